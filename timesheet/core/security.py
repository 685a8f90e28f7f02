"""Password storage helpers for the ``Users`` sheet."""

from __future__ import annotations

import base64
import hashlib
import hmac
import secrets

HASH_SCHEME = "pbkdf2_sha256"
MAX_ITERATIONS = 1_000_000


def _b64e(b: bytes) -> str:
    return base64.urlsafe_b64encode(b).decode("ascii").rstrip("=")


def _b64d(s: str) -> bytes:
    pad = "=" * (-len(s) % 4)
    return base64.urlsafe_b64decode((s + pad).encode("ascii"))


def hash_password(password: str, *, iterations: int = 260_000) -> str:
    salt = secrets.token_bytes(16)
    dk = hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt, iterations)
    return f"{HASH_SCHEME}${iterations}${_b64e(salt)}${_b64e(dk)}"


def is_password_hash(stored: str) -> bool:
    return stored.startswith(f"{HASH_SCHEME}$")


def verify_password(password: str, stored: str) -> bool:
    """Check ``password`` against a stored cell value.

    Cells written by the change-password endpoint hold a pbkdf2 hash; cells
    maintained by hand in the spreadsheet hold the plaintext password.
    """

    if not stored:
        return False
    if not is_password_hash(stored):
        return hmac.compare_digest(password.encode("utf-8"), stored.encode("utf-8"))

    try:
        _, iter_s, salt_s, hash_s = stored.split("$", 3)
        iterations = int(iter_s)
        if not 0 < iterations <= MAX_ITERATIONS:
            return False
        salt = _b64d(salt_s)
        expected = _b64d(hash_s)
        dk = hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt, iterations)
    except ValueError:
        return False
    return hmac.compare_digest(dk, expected)
