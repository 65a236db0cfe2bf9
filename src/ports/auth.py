from typing import Protocol


class PasswordHasherPort(Protocol):
    def hash_password(self, password: str) -> str: ...

    def verify_password(self, plain: str, hashed: str) -> bool:
        """Constant-time check of a plaintext password against a stored hash."""
        ...
