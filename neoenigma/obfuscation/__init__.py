"""
Reversible and forward-only source obfuscation passes.
"""

from .passes import (
    flatten_control_flow,
    insert_opaque_predicates,
    encode_arithmetic,
    wrap_variable_values,
    inject_junk_code,
    interleave_dummy_statements,
    remove_obfuscation,
)
from .pipeline import (
    ObfuscationPass,
    ObfuscationPipeline,
    PASSES,
    apply_strategies,
    apply_full_obfuscation,
    obfuscate_source,
    deobfuscate_source,
)
from .analyzer import (
    AnalysisResult,
    ObfuscationStrategy,
    CodeAnalyzer,
    HeuristicAnalyzer,
    AnalysisError,
    analyze_safely,
)

__all__ = [
    'flatten_control_flow',
    'insert_opaque_predicates',
    'encode_arithmetic',
    'wrap_variable_values',
    'inject_junk_code',
    'interleave_dummy_statements',
    'remove_obfuscation',
    'ObfuscationPass',
    'ObfuscationPipeline',
    'PASSES',
    'apply_strategies',
    'apply_full_obfuscation',
    'obfuscate_source',
    'deobfuscate_source',
    'AnalysisResult',
    'ObfuscationStrategy',
    'CodeAnalyzer',
    'HeuristicAnalyzer',
    'AnalysisError',
    'analyze_safely',
]
