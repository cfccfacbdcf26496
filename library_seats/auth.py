"""
auth.py
Password hashing (bcrypt) and login for the admin and for students.
Students log in with their mobile number.
"""

from __future__ import annotations

import hmac

import bcrypt

from library_seats import config


def _to_bcrypt_secret(password: str) -> bytes:
    """
    bcrypt only uses the first 72 BYTES of the password.
    We truncate to 72 bytes to avoid ValueError and to make behavior explicit.
    """
    pw = password.encode("utf-8")
    if len(pw) > 72:
        pw = pw[:72]
    return pw


def hash_password(password: str) -> str:
    secret = _to_bcrypt_secret(password)
    salt = bcrypt.gensalt(rounds=12)
    hashed = bcrypt.hashpw(secret, salt)
    return hashed.decode("utf-8")


def verify_password(password: str, password_hash: str | None) -> bool:
    if not password_hash:
        return False
    secret = _to_bcrypt_secret(password)
    return bcrypt.checkpw(secret, password_hash.encode("utf-8"))


def login(mobile: str, password: str, store):
    """
    Returns ("ADMIN", None), ("STUDENT", student) or None.
    """
    mobile = mobile.strip()
    if (hmac.compare_digest(mobile.encode(), config.ADMIN_MOBILE.encode())
            and hmac.compare_digest(password.encode(), config.ADMIN_PASSWORD.encode())):
        return "ADMIN", None

    with store.reading() as roster:
        student = roster.find_by_mobile(mobile)
    if student and student.is_active and verify_password(password, student.password_hash):
        return "STUDENT", student
    return None
