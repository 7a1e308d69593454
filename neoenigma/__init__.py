"""
NeoEnigma rotor cipher and source obfuscation toolkit.

A software model of a three-rotor cipher machine (keyboard, plugboard,
rotors, reflector) combined with layered source-text obfuscation passes.

Key Features:
- Deterministic, self-inverse, case-preserving letter substitution
- Historical rotor (I-V) and reflector (A-C) wirings
- Obfuscation passes with pattern-based removal
- Passphrase-encrypted configuration export/import (AES-256-GCM)
- Batch processing of workspace files

Basic Usage:
    >>> from neoenigma import EnigmaConfig, create_session
    >>>
    >>> config = EnigmaConfig.from_dict({
    ...     "rotors": "I-II-III", "rotorStart": "AAA", "rings": "AAA",
    ...     "plugboard": "", "reflector": "B"})
    >>> session = create_session(config)
    >>> session.encode("Hello, World!")
    'Ilbda, Amtaz!'
    >>> session.decode("Ilbda, Amtaz!")
    'Hello, World!'
"""

__version__ = "1.0.0"
__author__ = "NeoEnigma Team"

import random
from typing import Optional

# Cipher machine
from .machine.settings import EnigmaConfig, ConfigurationError, generate_random_config
from .machine.engine import EnigmaMachine, EncipherResult, create_machine
from .machine.codec import transform_text, encode_text, decode_text

# Obfuscation
from .obfuscation.analyzer import CodeAnalyzer, HeuristicAnalyzer, AnalysisResult
from .obfuscation.passes import remove_obfuscation
from .obfuscation.pipeline import ObfuscationPipeline, obfuscate_source, deobfuscate_source

# Configuration storage
from .config import NeoEnigmaConfig, ConfigError
from .crypto.aes_gcm import encrypt_config, decrypt_config, EncryptionError

# Workspace processing
from .workspace.files import LocalFileStore
from .workspace.processor import WorkspaceProcessor, auto_obfuscate


class CipherSession:
    """
    High-level entry point bound to one configuration.

    Every call builds a fresh engine, so calls never share rotor state.
    """

    def __init__(self, config: EnigmaConfig, analyzer: Optional[CodeAnalyzer] = None,
                 rng: Optional[random.Random] = None):
        """
        Initialize the session.

        Args:
            config: Cipher configuration
            analyzer: Optional classifier for obfuscation strategies
            rng: Random source for randomized obfuscation passes
        """
        self.config = config
        self.analyzer = analyzer
        self.rng = rng if rng is not None else random.Random()

    def encode(self, text: str) -> str:
        return encode_text(text, self.config)

    def decode(self, text: str) -> str:
        return decode_text(text, self.config)

    def obfuscate(self, code: str, file_extension: str = '') -> str:
        """Run the full obfuscation flow on one file's content."""
        return obfuscate_source(code, self.config, file_extension, self.analyzer, self.rng)

    def deobfuscate(self, code: str) -> str:
        """Undo the cipher layer and strip removable passes."""
        return deobfuscate_source(code, self.config)

    def get_info(self) -> dict:
        """Get information about this session."""
        return {
            'config': self.config.to_dict(),
            'analyzer': type(self.analyzer).__name__ if self.analyzer else None,
        }


def create_session(config: EnigmaConfig, analyzer: Optional[CodeAnalyzer] = None,
                   rng: Optional[random.Random] = None) -> CipherSession:
    """
    Create a cipher session.

    Args:
        config: Cipher configuration
        analyzer: Optional classifier for obfuscation strategies
        rng: Random source for randomized obfuscation passes

    Returns:
        CipherSession
    """
    return CipherSession(config, analyzer, rng)


# Export key components for easy access
__all__ = [
    # Version info
    '__version__',

    # High-level interface
    'CipherSession',
    'create_session',

    # Cipher machine
    'EnigmaConfig',
    'ConfigurationError',
    'generate_random_config',
    'EnigmaMachine',
    'EncipherResult',
    'create_machine',
    'transform_text',
    'encode_text',
    'decode_text',

    # Obfuscation
    'CodeAnalyzer',
    'HeuristicAnalyzer',
    'AnalysisResult',
    'ObfuscationPipeline',
    'obfuscate_source',
    'deobfuscate_source',
    'remove_obfuscation',

    # Configuration storage
    'NeoEnigmaConfig',
    'ConfigError',
    'encrypt_config',
    'decrypt_config',
    'EncryptionError',

    # Workspace processing
    'LocalFileStore',
    'WorkspaceProcessor',
    'auto_obfuscate',
]
