"""
Credential primitives - activation tokens and password hashing.
"""

import secrets

import bcrypt

DEFAULT_TOKEN_LENGTH = 16
DEFAULT_BCRYPT_COST = 10
BCRYPT_MAX_PASSWORD_BYTES = 72


def generate_activation_token(length: int = DEFAULT_TOKEN_LENGTH) -> str:
    """
    Generate a cryptographically secure activation token.

    Lowercase hex from the secrets module; 16 characters carry 64 bits.
    """
    if length < 1:
        raise ValueError("token length must be positive")
    return secrets.token_hex((length + 1) // 2)[:length]


def hash_password(password: str, rounds: int = DEFAULT_BCRYPT_COST) -> str:
    """
    Hash password using bcrypt.

    The salt is generated per call and embedded in the result,
    so hashing the same password twice never yields the same string.
    bcrypt only reads the first 72 bytes of its input; longer UTF-8
    encodings are truncated to that limit before hashing.
    """
    secret = password.encode()[:BCRYPT_MAX_PASSWORD_BYTES]
    return bcrypt.hashpw(secret, bcrypt.gensalt(rounds=rounds)).decode()
