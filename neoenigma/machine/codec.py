"""
Text codec built on the cipher engine.

Letters are enciphered one by one with their case restored afterwards; every
other character passes through untouched and does not step the rotors. The
transform is its own inverse under the same configuration.
"""

from typing import Iterator

from .alphabet import is_letter
from .engine import EnigmaMachine, create_machine
from .settings import EnigmaConfig


def iter_transform(text: str, machine: EnigmaMachine) -> Iterator[str]:
    """Yield transformed characters, advancing the machine per letter."""
    for char in text:
        if is_letter(char):
            letter = machine.encipher(char.upper()).letter
            yield letter.lower() if char.islower() else letter
        else:
            yield char


def transform_with_machine(text: str, machine: EnigmaMachine) -> str:
    """Transform text with an existing machine, continuing from its state."""
    return "".join(iter_transform(text, machine))


def transform_text(text: str, config: EnigmaConfig) -> str:
    """
    Transform text with a fresh machine built from a configuration.

    Args:
        text: Input text
        config: Cipher configuration

    Returns:
        Transformed text of the same length
    """
    return transform_with_machine(text, create_machine(config))


# Encoding and decoding are the same operation.
encode_text = transform_text
decode_text = transform_text
