"""
Configuration management for NeoEnigma.

Handles the local configuration directory, the stored auto-generated
passphrase, and encrypted export/import of cipher configurations.

Cryptographic operations are delegated to the crypto package; this module
only decides which credential to try and how failures are reported.
"""

import logging
import os
from typing import Callable, Optional

from .crypto.aes_gcm import EncryptionError, decrypt_config, encrypt_config
from .crypto.kdf import generate_passphrase, load_secret_file, save_secret_file
from .machine.settings import ConfigurationError, EnigmaConfig

logger = logging.getLogger(__name__)

PASSPHRASE_FILE = "auto_passphrase"
CONFIG_SECRET_FILE = "enigma_config_secret.json"


class ConfigError(Exception):
    """Raised when configuration operations fail."""
    pass


class NeoEnigmaConfig:
    """
    Simple configuration manager for NeoEnigma.

    The stored passphrase acts as the secret store: auto-obfuscation saves
    its generated passphrase here, and imports try it before asking.
    """

    def __init__(self, config_dir: str = None):
        """
        Initialize configuration.

        Args:
            config_dir: Directory for configuration files. Defaults to ~/.neoenigma/
        """
        if config_dir is None:
            config_dir = os.path.expanduser("~/.neoenigma")

        self.config_dir = config_dir
        self.passphrase_path = os.path.join(config_dir, PASSPHRASE_FILE)

        # Create config directory if it doesn't exist
        os.makedirs(config_dir, exist_ok=True)

    def get_stored_passphrase(self) -> Optional[str]:
        """
        Load the stored passphrase.

        Returns:
            The passphrase, or None if none is stored

        Raises:
            ConfigError: If the passphrase file cannot be read
        """
        try:
            return load_secret_file(self.passphrase_path)
        except OSError as e:
            raise ConfigError(f"Failed to read stored passphrase: {e}") from e

    def store_passphrase(self, passphrase: str) -> None:
        """
        Persist a passphrase, replacing any previous one.

        Raises:
            ConfigError: If the passphrase is empty or cannot be saved
        """
        if not passphrase:
            raise ConfigError("Passphrase must not be empty")

        try:
            save_secret_file(self.passphrase_path, passphrase)
        except OSError as e:
            raise ConfigError(f"Failed to save passphrase: {e}") from e

    def create_new_passphrase(self) -> str:
        """Generate, store and return a new random passphrase."""
        passphrase = generate_passphrase()
        self.store_passphrase(passphrase)
        return passphrase

    def has_stored_passphrase(self) -> bool:
        """Check if a stored passphrase exists."""
        return os.path.exists(self.passphrase_path)

    def export_config(self, config: EnigmaConfig, passphrase: str) -> str:
        """
        Encrypt a cipher configuration.

        Args:
            config: Configuration to export
            passphrase: Passphrase to encrypt with

        Returns:
            Encrypted JSON record

        Raises:
            ConfigError: If no passphrase is given or encryption fails
        """
        if not passphrase:
            raise ConfigError("Export cancelled")

        try:
            return encrypt_config(config.to_json(), passphrase)
        except EncryptionError as e:
            raise ConfigError(f"Error exporting configuration: {e}") from e

    def import_config(self, blob: str,
                      prompt: Optional[Callable[[], Optional[str]]] = None) -> EnigmaConfig:
        """
        Decrypt a cipher configuration.

        The stored passphrase is tried first; if it is missing or does not
        match, `prompt` is asked for one.

        Args:
            blob: Encrypted JSON record
            prompt: Callable returning a passphrase, or None/empty to cancel

        Returns:
            The decrypted configuration

        Raises:
            ConfigError: If import is cancelled, the passphrase is wrong, or
                the decrypted payload is not a valid configuration
        """
        stored = self.get_stored_passphrase()
        if stored:
            try:
                payload = decrypt_config(blob, stored)
                logger.info("Config imported via stored passphrase")
                return self._parse_payload(payload)
            except EncryptionError:
                logger.warning("Stored passphrase did not match this config file, falling back to prompt")

        passphrase = prompt() if prompt is not None else None
        if not passphrase:
            raise ConfigError("Import cancelled")

        try:
            payload = decrypt_config(blob, passphrase)
        except EncryptionError as e:
            raise ConfigError("Invalid passphrase or corrupted configuration file.") from e

        return self._parse_payload(payload)

    def save_encrypted_config(self, path: str, config: EnigmaConfig, passphrase: str) -> None:
        """Export a configuration and write the record to a file."""
        blob = self.export_config(config, passphrase)
        try:
            with open(path, 'w', encoding='utf-8') as f:
                f.write(blob)
        except OSError as e:
            raise ConfigError(f"Error exporting configuration: {e}") from e

    def load_encrypted_config(self, path: str,
                              prompt: Optional[Callable[[], Optional[str]]] = None) -> EnigmaConfig:
        """Read an encrypted record from a file and import it."""
        try:
            with open(path, 'r', encoding='utf-8') as f:
                blob = f.read()
        except OSError as e:
            raise ConfigError(f"Error reading configuration file: {e}") from e
        return self.import_config(blob, prompt)

    @staticmethod
    def _parse_payload(payload: str) -> EnigmaConfig:
        try:
            return EnigmaConfig.from_json(payload)
        except ConfigurationError as e:
            raise ConfigError(f"Decrypted configuration is invalid: {e}") from e
