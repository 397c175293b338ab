"""Password hashing.

bcrypt at a fixed cost factor (BCRYPT_ROUNDS). Inputs are truncated to
bcrypt's 72-byte limit on both hash and verify, so the two always agree.

Hashing is CPU-bound (~50ms at 10 rounds); the *_async variants run it
in a worker thread so a login doesn't stall the event loop.

When BCRYPT_ROUNDS changes, existing digests keep verifying;
needs_rehash() tells login to re-hash them at the new cost.
"""

import asyncio

import bcrypt

BCRYPT_ROUNDS = 10
MAX_PASSWORD_BYTES = 72


def _encode(password: str) -> bytes:
    return password.encode("utf-8")[:MAX_PASSWORD_BYTES]


def hash_password(password: str, rounds: int = BCRYPT_ROUNDS) -> str:
    """Return a "$2b$<rounds>$..." digest with a random salt."""
    return bcrypt.hashpw(_encode(password), bcrypt.gensalt(rounds=rounds)).decode("ascii")


def verify_password(password: str, password_hash: str) -> bool:
    """Malformed or foreign digests never match."""
    try:
        return bcrypt.checkpw(_encode(password), password_hash.encode("ascii"))
    except (ValueError, TypeError):
        return False


def needs_rehash(password_hash: str) -> bool:
    """True when the digest was made at a cost other than BCRYPT_ROUNDS."""
    parts = password_hash.split("$")
    try:
        return int(parts[2]) != BCRYPT_ROUNDS
    except (IndexError, ValueError):
        return True


async def hash_password_async(password: str) -> str:
    return await asyncio.to_thread(hash_password, password)


async def verify_password_async(password: str, password_hash: str) -> bool:
    return await asyncio.to_thread(verify_password, password, password_hash)
