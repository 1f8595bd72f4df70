"""Password hashing utilities.

New accounts get bcrypt hashes. Accounts created with a precomputed hash
(for example through `linkshelf create-user --password-hash`) keep that raw
value, and login compares the submitted credential against it directly in
constant time.
"""

import secrets

import bcrypt


def hash_password(password: str) -> str:
    """Hash a password with bcrypt.

    bcrypt includes a random salt and produces hashes starting with "$2b$".
    Passwords are truncated to 72 bytes (bcrypt's limit).
    """
    pw_bytes = password.encode("utf-8")[:72]
    salt = bcrypt.gensalt(rounds=12)
    return bcrypt.hashpw(pw_bytes, salt).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    """Verify a credential against a stored bcrypt hash or raw hash value."""
    if not _is_bcrypt_hash(password_hash):
        return secrets.compare_digest(
            password.encode("utf-8"), password_hash.encode("utf-8")
        )
    try:
        pw_bytes = password.encode("utf-8")[:72]
        hash_bytes = password_hash.encode("utf-8")
        return bcrypt.checkpw(pw_bytes, hash_bytes)
    except (ValueError, TypeError):
        return False


def _is_bcrypt_hash(password_hash: str) -> bool:
    return password_hash.startswith("$2")
