"""Password hashing and verification-code generation."""

import secrets

import bcrypt

DEFAULT_COST = 10
_MAX_PASSWORD_BYTES = 72


def bcrypt_hash(password: str) -> str:
    """Hash ``password`` with bcrypt at the default cost."""
    raw = password.encode("utf-8")
    if len(raw) > _MAX_PASSWORD_BYTES:
        raise ValueError(f"password length exceeds {_MAX_PASSWORD_BYTES} bytes")
    salt = bcrypt.gensalt(rounds=DEFAULT_COST, prefix=b"2a")
    return bcrypt.hashpw(raw, salt).decode("ascii")


def generate_verification_code(length: int) -> str:
    """Return a random decimal code of exactly ``length`` digits, zero padded."""
    if length < 0:
        raise ValueError("verification code length must not be negative")
    value = secrets.randbelow(10**length)
    return str(value).zfill(length)