"""Centralized password hashing configuration.

All modules requiring password hashing import from here so every stored
credential shares the same Argon2id parameters.
"""

from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerificationError

# Argon2id parameters
# - Memory: 64 MB (65536 KB)
# - Iterations (time_cost): 3
# - Parallelism: 4
PASSWORD_HASHER = PasswordHasher(
    time_cost=3,
    memory_cost=65536,
    parallelism=4,
    hash_len=32,
    salt_len=16,
)

MIN_PASSWORD_LENGTH = 6


def hash_password(password: str) -> str:
    """Hash a password using Argon2id."""
    return PASSWORD_HASHER.hash(password)


def verify_password(hash: str, password: str) -> bool:
    """Verify a password against its hash.

    Returns True if valid, False otherwise.
    """
    try:
        return PASSWORD_HASHER.verify(hash, password)
    except (VerificationError, InvalidHashError):
        return False
