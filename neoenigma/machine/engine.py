"""
Cipher engine.

Composes keyboard, plugboard, three rotors and a reflector into a single
stateful letter-substitution step. Only the rightmost rotor steps, once per
enciphered letter and before the signal is threaded through; notches are
never consulted while enciphering.

An engine is single-owner state: build a fresh one from the configuration
for every independent text or file instead of rewinding an existing one.
"""

from typing import List, NamedTuple, Sequence

from .components import Keyboard, Plugboard, Reflector, Rotor
from .settings import EnigmaConfig
from .wiring import REFLECTOR_WIRINGS, ROTOR_WIRINGS


class EncipherResult(NamedTuple):
    """Output letter plus the 10 signal positions visited on the way."""
    letter: str
    path: List[int]


class EnigmaMachine:
    """
    Three-rotor cipher machine.

    Rotor r1 is the leftmost (next to the reflector), r3 the rightmost.
    """

    def __init__(self, reflector: Reflector, r1: Rotor, r2: Rotor, r3: Rotor,
                 plugboard: Plugboard, keyboard: Keyboard):
        self.re = reflector
        self.r1 = r1
        self.r2 = r2
        self.r3 = r3
        self.pb = plugboard
        self.kb = keyboard

    def set_rings(self, rings: Sequence[int]) -> None:
        """Apply ring values (1-26), left to right."""
        self.r1.set_ring(rings[0])
        self.r2.set_ring(rings[1])
        self.r3.set_ring(rings[2])

    def set_key(self, key: str) -> None:
        """Turn the rotors to a three-letter start position, left to right."""
        if len(key) != 3:
            raise ValueError(f"Key must be three letters, got {key!r}")
        self.r1.rotate_to_letter(key[0])
        self.r2.rotate_to_letter(key[1])
        self.r3.rotate_to_letter(key[2])

    def encipher(self, letter: str) -> EncipherResult:
        """
        Encipher a single letter, stepping the rightmost rotor first.

        Args:
            letter: One ASCII letter (case-insensitive)

        Returns:
            EncipherResult with the uppercase output letter and signal path

        Raises:
            ValueError: If letter is not a single ASCII letter
        """
        signal = self.kb.forward(letter)
        self.r3.rotate()

        path = [signal]
        signal = self.pb.forward(signal); path.append(signal)
        signal = self.r3.forward(signal); path.append(signal)
        signal = self.r2.forward(signal); path.append(signal)
        signal = self.r1.forward(signal); path.append(signal)
        signal = self.re.reflect(signal); path.append(signal)
        signal = self.r1.backward(signal); path.append(signal)
        signal = self.r2.backward(signal); path.append(signal)
        signal = self.r3.backward(signal); path.append(signal)
        signal = self.pb.backward(signal); path.append(signal)

        return EncipherResult(letter=self.kb.backward(signal), path=path)

    @property
    def positions(self) -> str:
        """Current rotor offsets as letters, left to right."""
        return "".join(rotor.fixed[0] for rotor in (self.r1, self.r2, self.r3))


def create_machine(config: EnigmaConfig) -> EnigmaMachine:
    """
    Build a machine in the start state described by a configuration.

    Rings are applied before the start key.

    Args:
        config: Validated configuration

    Returns:
        EnigmaMachine ready to encipher
    """
    rotors = []
    for name in config.rotors:
        wiring, notch = ROTOR_WIRINGS[name]
        rotors.append(Rotor(wiring, notch))

    machine = EnigmaMachine(
        reflector=Reflector(REFLECTOR_WIRINGS[config.reflector]),
        r1=rotors[0],
        r2=rotors[1],
        r3=rotors[2],
        plugboard=Plugboard.from_string(config.plugboard),
        keyboard=Keyboard(),
    )
    machine.set_rings(config.ring_settings)
    machine.set_key(config.rotor_start)
    return machine
