"""
Key material utilities for the ORE automation executor.

Loads the executor's signing keypair from a base58-encoded 64-byte secret
(the format produced by Phantom / solana-keygen exports). A JSON byte array,
as written by `solana-keygen new`, is accepted too.
"""
import json
from typing import Optional

import base58
from solders.keypair import Keypair

from executor.errors import SigningUnavailable

SECRET_KEY_LENGTH = 64


def decode_secret(secret: str) -> bytes:
    """
    Decode a secret key string to raw bytes.

    Args:
        secret: base58 string or JSON array of ints

    Returns:
        Raw secret key bytes

    Raises:
        ValueError: If the string is neither valid base58 nor a JSON byte array
    """
    secret = secret.strip()
    if secret.startswith("[") and secret.endswith("]"):
        values = json.loads(secret)
        return bytes(values)
    return base58.b58decode(secret)


def load_executor_keypair(secret: Optional[str]) -> Keypair:
    """
    Build the executor keypair from its encoded secret.

    Raises:
        SigningUnavailable: If the secret is missing or malformed
    """
    if secret is None or not secret.strip():
        raise SigningUnavailable("Missing EXECUTOR_SECRET_BASE58")

    try:
        raw = decode_secret(secret)
    except (ValueError, TypeError) as e:
        raise SigningUnavailable(f"Cannot decode executor secret: {e}") from e

    if len(raw) != SECRET_KEY_LENGTH:
        raise SigningUnavailable(
            f"Executor secret must be {SECRET_KEY_LENGTH} bytes, got {len(raw)}"
        )

    try:
        return Keypair.from_bytes(raw)
    except Exception as e:
        raise SigningUnavailable(f"Invalid executor keypair: {e}") from e
