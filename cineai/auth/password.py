"""
Password hashing and verification utilities.

Uses bcrypt with a work factor of 12 unless BCRYPT_ROUNDS overrides it.
"""

import os

import bcrypt

BCRYPT_WORK_FACTOR = int(os.getenv("BCRYPT_ROUNDS", "12"))


def hash_password(password: str) -> str:
    """
    Hash a password using bcrypt.

    Args:
        password: The plain-text password to hash

    Returns:
        The hashed password as a string
    """
    salt = bcrypt.gensalt(rounds=BCRYPT_WORK_FACTOR)
    hashed = bcrypt.hashpw(password.encode('utf-8'), salt)

    # Stored as text in users.json
    return hashed.decode('utf-8')


def verify_password(password: str, password_hash: str) -> bool:
    """
    Verify a password against its hash.

    Args:
        password: The plain-text password to verify
        password_hash: The stored bcrypt hash

    Returns:
        True if the password matches, False otherwise (including when the
        stored hash is missing or malformed)
    """
    if not password_hash:
        return False
    try:
        return bcrypt.checkpw(password.encode('utf-8'), password_hash.encode('utf-8'))
    except ValueError:
        return False
