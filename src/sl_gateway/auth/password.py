"""Password hashing utilities using bcrypt (the ``bcrypt`` library directly)."""

import bcrypt

# Checked against when the email is unknown so both login failure paths cost one bcrypt round
_DUMMY_HASH: bytes = bcrypt.hashpw(b"not-a-real-password", bcrypt.gensalt())


def hash_password(plain: str) -> str:
    """Hash a plain-text password with bcrypt. Returns a utf-8 hash string."""
    hashed_bytes: bytes = bcrypt.hashpw(plain.encode("utf-8"), bcrypt.gensalt())
    return hashed_bytes.decode("utf-8")


def verify_password(plain: str, hashed: str | None) -> bool:
    """Verify a plain-text password against a bcrypt hash.

    A missing hash still burns a comparison and returns False.
    """
    if hashed is None:
        bcrypt.checkpw(plain.encode("utf-8"), _DUMMY_HASH)
        return False
    return bcrypt.checkpw(plain.encode("utf-8"), hashed.encode("utf-8"))
