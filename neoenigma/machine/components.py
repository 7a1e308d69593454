"""
Cipher machine components.

Each component is a permutation table over the 26-letter alphabet: a "fixed"
side and a "wired" side. A signal entering at position p on the wired side
leaves at the fixed-side position of the same letter. Rotation shifts both
sides together, so a rotor's wiring stays a bijection at every offset.
"""

import logging
from typing import List, Tuple

from .alphabet import (
    ALPHABET,
    ALPHABET_SIZE,
    is_letter,
    letter_to_position,
    position_to_letter,
    shift_letter,
)
from .settings import parse_plugboard

logger = logging.getLogger(__name__)


class PermutationTable:
    """
    Two parallel orderings of the alphabet.

    `forward` maps a position through the wired side onto the fixed side,
    `backward` is its inverse.
    """

    def __init__(self, wiring: str = ALPHABET):
        """
        Initialize a permutation table.

        Args:
            wiring: Wired-side ordering; must be a permutation of the alphabet

        Raises:
            ValueError: If wiring is not a permutation of the alphabet
        """
        if sorted(wiring) != sorted(ALPHABET):
            raise ValueError("Wiring must be a permutation of the alphabet")

        self.fixed: List[str] = list(ALPHABET)
        self.wired: List[str] = list(wiring)

    def forward(self, signal: int) -> int:
        """Pass a signal from the wired side to the fixed side."""
        letter = self.wired[signal]
        return self.fixed.index(letter)

    def backward(self, signal: int) -> int:
        """Pass a signal from the fixed side back to the wired side."""
        letter = self.fixed[signal]
        return self.wired.index(letter)

    def rotate(self, n: int = 1, forward: bool = True) -> None:
        """
        Cyclically shift both sides of the table.

        Args:
            n: Number of positions
            forward: Shift direction (True moves each entry one place toward 0)
        """
        n %= ALPHABET_SIZE
        if not forward:
            n = (ALPHABET_SIZE - n) % ALPHABET_SIZE
        self.fixed = self.fixed[n:] + self.fixed[:n]
        self.wired = self.wired[n:] + self.wired[:n]

    def swap(self, a: str, b: str) -> None:
        """Exchange two letters on the fixed side."""
        idx_a = self.fixed.index(a)
        idx_b = self.fixed.index(b)
        self.fixed[idx_a], self.fixed[idx_b] = self.fixed[idx_b], self.fixed[idx_a]


class Keyboard:
    """Maps key letters to signal positions and back."""

    def forward(self, letter: str) -> int:
        return letter_to_position(letter)

    def backward(self, signal: int) -> str:
        return position_to_letter(signal)


class Plugboard(PermutationTable):
    """
    Static pairwise letter swaps applied before and after the rotor stack.

    A letter takes part in at most one swap. When a later pair touches a
    letter that is already plugged, the whole pair is skipped.
    """

    def __init__(self, pairs: List[Tuple[str, str]] = None):
        """
        Initialize the plugboard.

        Args:
            pairs: Letter pairs to swap, e.g. [("A", "B"), ("C", "D")]
        """
        super().__init__()
        self.pairs: List[Tuple[str, str]] = []

        plugged = set()
        for a, b in pairs or []:
            if not (is_letter(a) and is_letter(b)):
                raise ValueError(f"Plugboard pair must be two letters: {a!r}{b!r}")
            a, b = a.upper(), b.upper()
            if a == b:
                raise ValueError(f"Plugboard pair must join two different letters: {a}{b}")
            if a in plugged or b in plugged:
                logger.debug(f"Skipping conflicting plugboard pair {a}{b}")
                continue
            self.swap(a, b)
            plugged.update((a, b))
            self.pairs.append((a, b))

    @classmethod
    def from_string(cls, pairs_str: str) -> 'Plugboard':
        """
        Build a plugboard from a space-separated pair string such as "AB CD".

        Raises:
            ConfigurationError: If a token is not two different letters
        """
        return cls(parse_plugboard(pairs_str))


class Rotor(PermutationTable):
    """
    A rotating wiring element with a single notch.

    The notch is only a reference letter: ring calibration shifts it, but
    stepping never consults it.
    """

    def __init__(self, wiring: str, notch: str):
        """
        Initialize a rotor at its canonical (unrotated) position.

        Args:
            wiring: Rotor wiring as a permutation of the alphabet
            notch: Notch letter
        """
        if not is_letter(notch):
            raise ValueError(f"Notch must be a single letter: {notch!r}")
        super().__init__(wiring)
        self.notch = notch.upper()

    def rotate_to_letter(self, letter: str) -> None:
        """Advance the rotor to an absolute start position."""
        self.rotate(letter_to_position(letter))

    def set_ring(self, ring: int) -> None:
        """
        Apply a ring setting.

        Args:
            ring: Ring value, 1 for no offset (A=1 ... Z=26)
        """
        self.rotate(ring - 1, forward=False)
        self.notch = shift_letter(self.notch, -(ring - 1))

    @property
    def offset(self) -> int:
        """Current rotation offset in [0, 26)."""
        return letter_to_position(self.fixed[0])


class Reflector(PermutationTable):
    """Static involutive wiring that sends the signal back through the rotors."""

    def reflect(self, signal: int) -> int:
        return self.forward(signal)
