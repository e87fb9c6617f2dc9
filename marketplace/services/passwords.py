"""
Password Hashing
"""

import hashlib


def hash_password(password: str) -> str:
    """SHA512 hex digest of the password; the plaintext is never stored."""
    return hashlib.sha512(password.encode("utf-8")).hexdigest()
