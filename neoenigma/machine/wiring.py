"""
Historical wiring tables for rotors and reflectors.

A rotor name resolves to (wiring, notch letter); a reflector name resolves to
its wiring. Rotor triples are written left-middle-right, e.g. "I-II-III".
"""

from typing import Dict, Tuple

ROTOR_WIRINGS: Dict[str, Tuple[str, str]] = {
    "I": ("EKMFLGDQVZNTOWYHXUSPAIBRCJ", "Q"),
    "II": ("AJDKSIRUXBLHWTMCQGZNPYFVOE", "E"),
    "III": ("BDFHJLCPRTXVZNYEIWGAKMUSQO", "V"),
    "IV": ("ESOVPZJAYQUIRHXLNFTGKDCMWB", "J"),
    "V": ("VZBRGITYUPSDNHLXAWMJQOFECK", "Z"),
}

REFLECTOR_WIRINGS: Dict[str, str] = {
    "A": "EJMZALYXVBWFCRQUONTSPIKHGD",
    "B": "YRUHQSLDPXNGOKMIEBFZCWVJAT",
    "C": "FVPJIAOYEDRZXWGCTKUQSBNMHL",
}

ROTOR_NAMES = tuple(ROTOR_WIRINGS)
REFLECTOR_NAMES = tuple(REFLECTOR_WIRINGS)
