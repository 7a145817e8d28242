"""
Notebox Backend — Credential Hasher
===================================

What:  One-way, salted password hashing and verification with Argon2id.
How:   argon2-cffi's PasswordHasher. Every hash is a PHC string
       ($argon2id$v=19$m=...,t=...,p=...$salt$hash) carrying its own salt and
       parameters, so stored hashes stay verifiable after parameters change.
Who:   Used by the login flow.

Guarantees:
    hash()    never returns the same string twice for the same password.
    verify()  fails closed: mismatch, malformed hash or empty input → False.
"""

from typing import Optional

from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerificationError, VerifyMismatchError

from notebox.config import Settings


class CredentialHasher:
    def __init__(
        self,
        time_cost: int = 3,
        memory_cost: int = 65536,
        parallelism: int = 4,
    ):
        self._hasher = PasswordHasher(
            time_cost=time_cost,
            memory_cost=memory_cost,
            parallelism=parallelism,
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> "CredentialHasher":
        return cls(
            time_cost=settings.argon2_time_cost,
            memory_cost=settings.argon2_memory_cost,
            parallelism=settings.argon2_parallelism,
        )

    def hash(self, password: str) -> str:
        if not password:
            raise ValueError("password must not be empty")
        return self._hasher.hash(password)

    def verify(self, password: str, hashed: Optional[str]) -> bool:
        if not password or not hashed:
            return False
        try:
            return self._hasher.verify(hashed, password)
        except (VerifyMismatchError, VerificationError, InvalidHashError):
            return False

    def needs_rehash(self, hashed: str) -> bool:
        """True when `hashed` was produced under different parameters than ours."""
        try:
            return self._hasher.check_needs_rehash(hashed)
        except InvalidHashError:
            return True
