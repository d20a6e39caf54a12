"""Staff password hashing: bcrypt over a SHA-256 pre-hash.

The pre-hash gives bcrypt a fixed 44-byte input, so passwords longer than
bcrypt's 72-byte limit are not truncated. The bcrypt cost is configurable
(PASSWORD_HASH_ROUNDS); hashes stored with a different cost are reported by
needs_rehash and upgraded on the next successful login.
"""

import base64
import hashlib

import bcrypt

DEFAULT_ROUNDS = 12

# "$2b$12$<53 chars>"
_BCRYPT_PREFIXES = ("$2a$", "$2b$", "$2y$")


def _prehash(password: str) -> bytes:
    return base64.b64encode(hashlib.sha256(password.encode("utf-8")).digest())


def hash_cost(password_hash: str) -> int | None:
    """Return the bcrypt cost encoded in password_hash, or None if it is not a bcrypt hash."""
    if not password_hash.startswith(_BCRYPT_PREFIXES):
        return None
    cost = password_hash[4:6]
    return int(cost) if cost.isdigit() else None


def get_password_hash(password: str, rounds: int = DEFAULT_ROUNDS) -> str:
    hashed = bcrypt.hashpw(_prehash(password), bcrypt.gensalt(rounds=rounds))
    return hashed.decode("utf-8")


def verify_password(plain_password: str, password_hash: str) -> bool:
    """Return True if plain_password matches. Malformed hashes never match."""
    try:
        return bool(bcrypt.checkpw(_prehash(plain_password), password_hash.encode("utf-8")))
    except (ValueError, TypeError):
        return False


def needs_rehash(password_hash: str, rounds: int = DEFAULT_ROUNDS) -> bool:
    """True when a verified hash was stored with a cost other than rounds."""
    return hash_cost(password_hash) != rounds
