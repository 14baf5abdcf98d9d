"""
Password hashing with bcrypt.

The hash string carries version, cost factor and salt, so checking needs
nothing but the stored value.
"""

import asyncio
from typing import Optional

import bcrypt


def hash_password(password: str, rounds: int = 10) -> str:
    """Generate a salted bcrypt hash of ``password``."""
    salt = bcrypt.gensalt(rounds=rounds)
    return bcrypt.hashpw(password.encode("utf-8"), salt).decode("ascii")


def password_cost(password_hash: str) -> Optional[int]:
    """Cost factor of a ``$2b$12$...`` style hash, None if it has none."""
    parts = password_hash.split("$")
    if len(parts) < 4 or not parts[2].isdigit():
        return None
    cost = int(parts[2])
    return cost if 4 <= cost <= 31 else None


def _check_password(password: str, password_hash: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("ascii"))
    except (ValueError, UnicodeEncodeError):
        # Malformed stored hash or a password bcrypt refuses (> 72 bytes)
        return False


async def check_password(password: str, password_hash: str) -> bool:
    """Check ``password`` against ``password_hash`` off the event loop."""
    return await asyncio.to_thread(_check_password, password, password_hash)
