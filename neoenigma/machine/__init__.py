"""
Rotor cipher machine model.

This package provides the permutation components, the three-rotor engine,
its configuration record and the case-preserving text codec.
"""

from .components import Keyboard, Plugboard, Reflector, Rotor, PermutationTable
from .engine import EnigmaMachine, EncipherResult, create_machine
from .settings import EnigmaConfig, ConfigurationError, generate_random_config
from .codec import transform_text, encode_text, decode_text

__all__ = [
    'Keyboard',
    'Plugboard',
    'Reflector',
    'Rotor',
    'PermutationTable',
    'EnigmaMachine',
    'EncipherResult',
    'create_machine',
    'EnigmaConfig',
    'ConfigurationError',
    'generate_random_config',
    'transform_text',
    'encode_text',
    'decode_text',
]
