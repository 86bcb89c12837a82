"""Random secrets and PKCE (Proof Key for Code Exchange) utilities."""

import secrets
from base64 import urlsafe_b64encode
from hashlib import sha256

# Entropy for state tokens, PKCE verifiers and carry session ids
DEFAULT_TOKEN_BYTES = 32


def _b64url(data: bytes) -> str:
    return urlsafe_b64encode(data).rstrip(b"=").decode("ascii")


def new_random_token(byte_length: int = DEFAULT_TOKEN_BYTES) -> str:
    """Generate a URL-safe random token.

    Args:
        byte_length: Number of random bytes drawn from the OS CSPRNG

    Returns:
        base64url encoded string without padding
    """
    if byte_length < 16:
        raise ValueError("Random tokens need at least 16 bytes of entropy")
    return _b64url(secrets.token_bytes(byte_length))


def derive_challenge(verifier: str) -> str:
    """Derive the S256 code challenge for a PKCE verifier.

    Args:
        verifier: PKCE code verifier

    Returns:
        base64url(SHA-256(verifier)) without padding
    """
    return _b64url(sha256(verifier.encode("ascii")).digest())
