"""
Alphabet utilities for the cipher machine.

Every rotor, reflector and plugboard is a permutation over the same 26-letter
domain. Positions are integers in [0, 26) and are always reduced modulo 26.
"""

import string

ALPHABET = string.ascii_uppercase
ALPHABET_SIZE = len(ALPHABET)


def letter_to_position(letter: str) -> int:
    """
    Convert a letter to its alphabet position.

    Args:
        letter: Single ASCII letter (either case)

    Returns:
        Position in [0, 26)

    Raises:
        ValueError: If letter is not a single ASCII letter
    """
    if not is_letter(letter):
        raise ValueError(f"Not an alphabet letter: {letter!r}")
    return ALPHABET.index(letter.upper())


def position_to_letter(position: int) -> str:
    """Convert a position (any integer, reduced mod 26) to an uppercase letter."""
    return ALPHABET[position % ALPHABET_SIZE]


def is_letter(char: str) -> bool:
    """Check whether a character takes part in encipherment (ASCII A-Z, a-z)."""
    return len(char) == 1 and char in string.ascii_letters


def shift_letter(letter: str, offset: int) -> str:
    """Shift a letter cyclically by offset positions."""
    return position_to_letter(letter_to_position(letter) + offset)
