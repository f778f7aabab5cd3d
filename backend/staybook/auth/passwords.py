"""bcrypt password hashing."""

import bcrypt

# bcrypt ignores input beyond 72 bytes; longer passwords are rejected at the schema layer.
_ENCODING = "utf-8"


def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode(_ENCODING), bcrypt.gensalt()).decode(_ENCODING)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Return True if ``plain_password`` matches the stored hash.

    A malformed stored hash counts as a mismatch.
    """
    try:
        return bcrypt.checkpw(plain_password.encode(_ENCODING), hashed_password.encode(_ENCODING))
    except ValueError:
        return False
