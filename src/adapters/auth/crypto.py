from passlib.context import CryptContext


class PasslibPasswordHasher:
    """Room password hashing backed by passlib (argon2 by default)."""

    def __init__(self, schemes: list[str] | None = None) -> None:
        self.context = CryptContext(schemes=schemes or ["argon2"], deprecated="auto")

    def hash_password(self, password: str) -> str:
        result: str = self.context.hash(password)
        return result

    def verify_password(self, plain: str, hashed: str) -> bool:
        try:
            result: bool = self.context.verify(plain, hashed)
        except ValueError:
            # Unrecognised or corrupt hash
            return False
        return result
