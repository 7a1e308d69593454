"""
Cryptographic primitives for configuration storage.

This module provides:
- Passphrase-based key derivation (scrypt)
- Authenticated encryption of configuration payloads (AES-256-GCM)
"""

from .kdf import derive_config_key, generate_passphrase, KeyDerivationError
from .aes_gcm import encrypt_config, decrypt_config, EncryptionError

__all__ = [
    'derive_config_key',
    'generate_passphrase',
    'encrypt_config',
    'decrypt_config',
    'KeyDerivationError',
    'EncryptionError'
]
