"""
Cipher machine configuration.

A configuration fully determines engine behaviour and must be identical for
encoding and decoding. Its wire format is a flat record:

    {
      "rotors": "I-II-III",     # left-middle-right rotor names
      "rotorStart": "AAA",      # start letter per rotor
      "rings": "AAA",           # ring letter per rotor, A=1 ... Z=26
      "plugboard": "AB CD",     # space-separated letter pairs
      "reflector": "B"
    }
"""

import json
import random
import secrets
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

from .alphabet import ALPHABET, is_letter, letter_to_position
from .wiring import REFLECTOR_NAMES, REFLECTOR_WIRINGS, ROTOR_NAMES, ROTOR_WIRINGS

WIRE_FIELDS = ("rotors", "rotorStart", "rings", "plugboard", "reflector")

DEFAULT_PLUG_PAIRS = 10


class ConfigurationError(ValueError):
    """Raised when a cipher configuration is missing, malformed or unknown."""
    pass


def _three_letters(value: str, field_name: str) -> str:
    if not isinstance(value, str) or len(value) != 3 or not all(is_letter(c) for c in value):
        raise ConfigurationError(f"{field_name} must be exactly three letters, got {value!r}")
    return value.upper()


def parse_plugboard(plugboard: str) -> List[Tuple[str, str]]:
    """
    Parse a plugboard string into letter pairs.

    Args:
        plugboard: Space-separated two-letter tokens, e.g. "AB CD EF"

    Returns:
        List of (letter, letter) pairs in the order given

    Raises:
        ConfigurationError: If a token is not two different letters
    """
    if not isinstance(plugboard, str):
        raise ConfigurationError("plugboard must be a string")

    pairs = []
    for token in plugboard.split():
        if len(token) != 2 or not all(is_letter(c) for c in token):
            raise ConfigurationError(f"Malformed plugboard pair: {token!r}")
        a, b = token.upper()
        if a == b:
            raise ConfigurationError(f"Plugboard pair must join two different letters: {token!r}")
        pairs.append((a, b))
    return pairs


@dataclass
class EnigmaConfig:
    """
    Complete cipher machine configuration.

    Fields:
        rotors: Rotor names, left to right (the rightmost rotor steps)
        rotor_start: Three start letters, left to right
        rings: Three ring letters, left to right
        plugboard: Space-separated plugboard pairs
        reflector: Reflector name
    """
    rotors: Tuple[str, str, str]
    rotor_start: str
    rings: str
    plugboard: str
    reflector: str

    def __post_init__(self):
        """Validate and normalise fields."""
        if isinstance(self.rotors, str):
            self.rotors = tuple(self.rotors.split("-"))
        else:
            self.rotors = tuple(self.rotors)
        if len(self.rotors) != 3:
            raise ConfigurationError(f"Exactly three rotors are required, got {len(self.rotors)}")
        for name in self.rotors:
            if name not in ROTOR_WIRINGS:
                raise ConfigurationError(f"Unknown rotor: {name!r}")

        if self.reflector not in REFLECTOR_WIRINGS:
            raise ConfigurationError(f"Unknown reflector: {self.reflector!r}")

        self.rotor_start = _three_letters(self.rotor_start, "rotorStart")
        self.rings = _three_letters(self.rings, "rings")
        parse_plugboard(self.plugboard)

    @property
    def ring_settings(self) -> Tuple[int, int, int]:
        """Ring values (1-26) derived from the ring letters."""
        return tuple(letter_to_position(c) + 1 for c in self.rings)

    @property
    def plugboard_pairs(self) -> List[Tuple[str, str]]:
        return parse_plugboard(self.plugboard)

    def to_dict(self) -> Dict[str, str]:
        """Convert to the flat wire record."""
        return {
            'rotors': "-".join(self.rotors),
            'rotorStart': self.rotor_start,
            'rings': self.rings,
            'plugboard': self.plugboard,
            'reflector': self.reflector,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'EnigmaConfig':
        """
        Create from the flat wire record.

        Raises:
            ConfigurationError: If any field is missing or invalid
        """
        if not isinstance(data, dict):
            raise ConfigurationError("Configuration must be a JSON object")

        missing = [name for name in WIRE_FIELDS if name not in data]
        if missing:
            raise ConfigurationError(f"Missing configuration fields: {', '.join(missing)}")

        rotors = data['rotors']
        if not isinstance(rotors, str):
            raise ConfigurationError("rotors must be a dash-joined string such as 'I-II-III'")

        return cls(
            rotors=rotors,
            rotor_start=data['rotorStart'],
            rings=data['rings'],
            plugboard=data['plugboard'],
            reflector=data['reflector'],
        )

    def to_json(self) -> str:
        return json.dumps(self.to_dict())

    @classmethod
    def from_json(cls, text: str) -> 'EnigmaConfig':
        try:
            data = json.loads(text)
        except (TypeError, ValueError) as e:
            raise ConfigurationError(f"Invalid configuration JSON: {e}") from e
        return cls.from_dict(data)


def generate_random_config(rng: Optional[random.Random] = None,
                           plug_pairs: int = DEFAULT_PLUG_PAIRS) -> EnigmaConfig:
    """
    Generate a random configuration.

    Args:
        rng: Random source (defaults to the system CSPRNG)
        plug_pairs: Number of plugboard pairs (0-13)

    Returns:
        A valid EnigmaConfig
    """
    if not 0 <= plug_pairs <= 13:
        raise ConfigurationError("plug_pairs must be between 0 and 13")

    rng = rng or secrets.SystemRandom()

    rotors = tuple(rng.sample(ROTOR_NAMES, 3))
    rotor_start = "".join(rng.choice(ALPHABET) for _ in range(3))
    rings = "".join(rng.choice(ALPHABET) for _ in range(3))

    letters = rng.sample(ALPHABET, plug_pairs * 2)
    plugboard = " ".join(letters[i] + letters[i + 1] for i in range(0, len(letters), 2))

    return EnigmaConfig(
        rotors=rotors,
        rotor_start=rotor_start,
        rings=rings,
        plugboard=plugboard,
        reflector=rng.choice(REFLECTOR_NAMES),
    )
