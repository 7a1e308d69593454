"""
Obfuscation pipeline.

Passes are registered as tagged records so a caller can tell up front which
ones can be undone. The full-file flows combine the passes with the cipher
layer:

    obfuscate:   analyze -> suggested strategies -> wrap -> junk -> interleave -> cipher
    deobfuscate: cipher -> remove_obfuscation

Only the cipher layer and the pattern-strippable passes are guaranteed to be
undone; flattening, opaque predicates and arithmetic re-encoding persist.
"""

import logging
import random
from dataclasses import dataclass
from typing import Callable, Dict, Iterable, Optional, Sequence

from ..machine.codec import transform_text
from ..machine.settings import EnigmaConfig
from .analyzer import CodeAnalyzer, ObfuscationStrategy, analyze_safely
from .passes import (
    encode_arithmetic,
    flatten_control_flow,
    inject_junk_code,
    insert_opaque_predicates,
    interleave_dummy_statements,
    remove_obfuscation,
    wrap_variable_values,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ObfuscationPass:
    """
    A registered pass.

    Fields:
        technique: Technique name used by strategies
        forward: (code, rng) -> code
        reverse: code -> code, or None for forward-only passes
        randomized: Whether forward draws from the random source
    """
    technique: str
    forward: Callable[[str, Optional[random.Random]], str]
    reverse: Optional[Callable[[str], str]] = None
    randomized: bool = False

    @property
    def reversible(self) -> bool:
        return self.reverse is not None


PASSES: Dict[str, ObfuscationPass] = {
    p.technique: p for p in (
        ObfuscationPass('controlFlowFlattening', flatten_control_flow),
        ObfuscationPass('opaquePredicates', insert_opaque_predicates, randomized=True),
        ObfuscationPass('arithmeticEncoding', encode_arithmetic),
        ObfuscationPass('variableEncryption', wrap_variable_values, remove_obfuscation),
        ObfuscationPass('deadCodeInjection', inject_junk_code, remove_obfuscation, randomized=True),
        ObfuscationPass('codeInterleaving', interleave_dummy_statements, remove_obfuscation,
                        randomized=True),
    )
}

# Strategy techniques an analyzer may suggest
STRATEGY_TECHNIQUES = ('controlFlowFlattening', 'variableEncryption', 'deadCodeInjection')

FULL_OBFUSCATION_ORDER = (
    'variableEncryption',
    'opaquePredicates',
    'arithmeticEncoding',
    'controlFlowFlattening',
    'deadCodeInjection',
    'codeInterleaving',
)

FILE_PASSES = ('variableEncryption', 'deadCodeInjection', 'codeInterleaving')


class ObfuscationPipeline:
    """An ordered list of passes sharing one random source."""

    def __init__(self, techniques: Sequence[str], rng: Optional[random.Random] = None):
        """
        Initialize the pipeline.

        Args:
            techniques: Technique names in application order
            rng: Random source for randomized passes

        Raises:
            KeyError: If a technique is not registered
        """
        unknown = [t for t in techniques if t not in PASSES]
        if unknown:
            raise KeyError(f"Unknown obfuscation techniques: {', '.join(unknown)}")

        self.passes = [PASSES[t] for t in techniques]
        self.rng = rng if rng is not None else random.Random()

    @property
    def reversible(self) -> bool:
        """True when every pass can be undone by the removal pass."""
        return all(p.reversible for p in self.passes)

    def forward(self, code: str) -> str:
        for obf_pass in self.passes:
            code = obf_pass.forward(code, self.rng)
        return code

    def reverse(self, code: str) -> str:
        return remove_obfuscation(code)


def apply_strategies(code: str, strategies: Iterable[ObfuscationStrategy],
                     rng: Optional[random.Random] = None) -> str:
    """
    Apply suggested strategies in order.

    Techniques outside STRATEGY_TECHNIQUES are ignored.
    """
    techniques = []
    for strategy in strategies:
        if strategy.technique in STRATEGY_TECHNIQUES:
            techniques.append(strategy.technique)
        else:
            logger.debug(f"Ignoring unsupported strategy {strategy.technique!r}")
    return ObfuscationPipeline(techniques, rng).forward(code)


def apply_full_obfuscation(code: str, rng: Optional[random.Random] = None) -> str:
    """Apply every pass in the fixed full-obfuscation order."""
    return ObfuscationPipeline(FULL_OBFUSCATION_ORDER, rng).forward(code)


def obfuscate_source(code: str, config: EnigmaConfig, file_extension: str = '',
                     analyzer: Optional[CodeAnalyzer] = None,
                     rng: Optional[random.Random] = None) -> str:
    """
    Obfuscate one file's content.

    With an analyzer, its suggested strategies run first, followed by the
    wrap, junk and interleave passes. Without one, every pass runs. The
    cipher layer is applied last.

    Args:
        code: Source text
        config: Cipher configuration
        file_extension: Extension including the dot, passed to the analyzer
        analyzer: Optional classifier
        rng: Random source for randomized passes

    Returns:
        Obfuscated text
    """
    rng = rng if rng is not None else random.Random()

    if analyzer is None:
        code = apply_full_obfuscation(code, rng)
    else:
        analysis = analyze_safely(analyzer, code, file_extension)
        code = apply_strategies(code, analysis.suggested_strategies, rng)
        code = ObfuscationPipeline(FILE_PASSES, rng).forward(code)

    return transform_text(code, config)


def deobfuscate_source(code: str, config: EnigmaConfig) -> str:
    """Undo the cipher layer, then strip the pattern-removable passes."""
    return remove_obfuscation(transform_text(code, config))
