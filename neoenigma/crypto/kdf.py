"""
Passphrase-based key derivation for configuration encryption.

Derives AES-256 keys from passphrases with scrypt and manages the
auto-generated passphrase secret file.
"""

import os
from typing import Optional

from cryptography.hazmat.primitives.kdf.scrypt import Scrypt

from .utils import generate_random_bytes


class KeyDerivationError(Exception):
    """Raised when key derivation fails."""
    pass


# scrypt parameters (N=2^14, r=8, p=1)
SCRYPT_N = 2 ** 14
SCRYPT_R = 8
SCRYPT_P = 1
KEY_LENGTH = 32  # 256-bit keys
SALT_LENGTH = 16
PASSPHRASE_BYTES = 16


def derive_config_key(passphrase: str, salt: bytes) -> bytes:
    """
    Derive a configuration encryption key from a passphrase.

    Args:
        passphrase: User or generated passphrase (UTF-8)
        salt: Random salt stored alongside the ciphertext

    Returns:
        32-byte key

    Raises:
        KeyDerivationError: If derivation fails or invalid parameters
    """
    if not passphrase:
        raise KeyDerivationError("Passphrase must not be empty")
    if not salt:
        raise KeyDerivationError("Salt must not be empty")

    try:
        kdf = Scrypt(salt=salt, length=KEY_LENGTH, n=SCRYPT_N, r=SCRYPT_R, p=SCRYPT_P)
        return kdf.derive(passphrase.encode('utf-8'))
    except Exception as e:
        raise KeyDerivationError(f"Key derivation failed: {str(e)}") from e


def generate_salt() -> bytes:
    """Generate a random scrypt salt."""
    return generate_random_bytes(SALT_LENGTH)


def generate_passphrase() -> str:
    """Generate a random passphrase as 32 hex characters."""
    return generate_random_bytes(PASSPHRASE_BYTES).hex()


def save_secret_file(path: str, secret: str) -> None:
    """
    Write a secret to a file readable only by the owner.

    Args:
        path: Destination file path
        secret: Secret text
    """
    with open(path, 'w', encoding='utf-8') as f:
        f.write(secret)

    # Set restrictive permissions (Unix/Linux)
    try:
        os.chmod(path, 0o600)  # rw-------
    except (OSError, AttributeError):
        # Windows or permission error - warn but continue
        print(f"Warning: Could not set restrictive permissions on {path}")


def load_secret_file(path: str) -> Optional[str]:
    """
    Read a secret file.

    Returns:
        The stripped secret, or None if the file does not exist or is empty
    """
    if not os.path.exists(path):
        return None

    with open(path, 'r', encoding='utf-8') as f:
        secret = f.read().strip()

    return secret or None
