import os
import shutil
from pathlib import Path


class FileSystemStore:
    def __init__(self, base_path: str | Path):
        self.base_path = Path(base_path).resolve()
        if not self.base_path.exists():
            os.makedirs(self.base_path, exist_ok=True)

    def _safe_path(self, path: str) -> Path:
        # Prevent traversal
        target = (self.base_path / path).resolve()
        if target != self.base_path and self.base_path not in target.parents:
            raise ValueError(f"Path traversal attempt detected: {path}")
        return target

    def save(self, name: str, data: bytes) -> str:
        """Save bytes and return the path relative to the store root."""
        target = self._safe_path(name)
        target.parent.mkdir(parents=True, exist_ok=True)
        with open(target, "wb") as f:
            f.write(data)
        return target.relative_to(self.base_path).as_posix()

    def get(self, path: str) -> bytes:
        """Retrieve bytes by path. Raises FileNotFoundError."""
        target = self._safe_path(path)
        if not target.is_file():
            raise FileNotFoundError(f"File not found: {path}")
        with open(target, "rb") as f:
            return f.read()

    def delete_tree(self, path: str) -> bool:
        target = self._safe_path(path)
        if target == self.base_path:
            raise ValueError("Refusing to delete the store root")
        if not target.is_dir():
            return False
        shutil.rmtree(target)
        return True
