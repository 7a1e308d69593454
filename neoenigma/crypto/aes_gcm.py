"""
AES-GCM authenticated encryption of configuration payloads.

A payload is encrypted under a passphrase-derived key and stored as a JSON
record of hex strings:

    {"salt": ..., "iv": ..., "encrypted": ..., "authTag": ...}
"""

import json
from typing import Dict

from cryptography.hazmat.primitives.ciphers.aead import AESGCM
from cryptography.exceptions import InvalidTag

from .kdf import SALT_LENGTH, KeyDerivationError, derive_config_key, generate_salt
from .utils import generate_random_bytes, read_record_field

IV_LENGTH = 16
TAG_LENGTH = 16

DECRYPT_FAILURE_MESSAGE = "Invalid passphrase or corrupted data"


class EncryptionError(Exception):
    """Raised when encryption or decryption fails."""
    pass


def encrypt_config(data: str, passphrase: str) -> str:
    """
    Encrypt a UTF-8 payload with a passphrase.

    Args:
        data: Plaintext payload (the configuration JSON)
        passphrase: Passphrase to derive the key from

    Returns:
        JSON record with salt, iv, encrypted and authTag fields

    Raises:
        EncryptionError: If encryption fails
    """
    try:
        salt = generate_salt()
        key = derive_config_key(passphrase, salt)
        iv = generate_random_bytes(IV_LENGTH)

        ciphertext_with_tag = AESGCM(key).encrypt(iv, data.encode('utf-8'), None)

        record: Dict[str, str] = {
            'salt': salt.hex(),
            'iv': iv.hex(),
            'encrypted': ciphertext_with_tag[:-TAG_LENGTH].hex(),
            'authTag': ciphertext_with_tag[-TAG_LENGTH:].hex(),
        }
        return json.dumps(record)

    except Exception as e:
        raise EncryptionError(f"Encryption failed: {str(e)}") from e


def decrypt_config(blob: str, passphrase: str) -> str:
    """
    Decrypt a record produced by encrypt_config.

    Any failure (wrong passphrase, tampered or malformed record) is reported
    with the same message so no cryptographic detail leaks.

    Args:
        blob: JSON record
        passphrase: Passphrase the record was encrypted with

    Returns:
        Decrypted UTF-8 payload

    Raises:
        EncryptionError: If decryption or authentication fails
    """
    try:
        record = json.loads(blob)
        salt = read_record_field(record, 'salt', SALT_LENGTH)
        iv = read_record_field(record, 'iv', IV_LENGTH)
        ciphertext = read_record_field(record, 'encrypted')
        tag = read_record_field(record, 'authTag', TAG_LENGTH)

        key = derive_config_key(passphrase, salt)
        plaintext = AESGCM(key).decrypt(iv, ciphertext + tag, None)
        return plaintext.decode('utf-8')

    except InvalidTag:
        raise EncryptionError(DECRYPT_FAILURE_MESSAGE) from None
    except (ValueError, TypeError, KeyError, KeyDerivationError):
        raise EncryptionError(DECRYPT_FAILURE_MESSAGE) from None
