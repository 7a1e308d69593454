"""
Code analysis for choosing obfuscation strategies.

An analyzer scores source text on four metrics in [0, 1] and suggests
strategies from them. The pipeline treats analyzers as opaque oracles:
`analyze_safely` turns any failure into the neutral result so analysis can
never block obfuscation.
"""

import logging
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass, field, asdict
from typing import Any, Dict, List

logger = logging.getLogger(__name__)

NEUTRAL_SCORE = 0.5

BRANCH_WORDS = {'if', 'else', 'elif', 'switch', 'case', 'try', 'catch', 'except', 'finally'}
LOOP_WORDS = {'for', 'while', 'do', 'forEach', 'map', 'reduce', 'filter'}
SENSITIVE_MARKERS = ('key', 'secret', 'password', 'passwd', 'token', 'auth',
                     'credential', 'private', 'http', 'fetch', 'eval')

_WORD_SPLIT = re.compile(r'[\s{}()\[\],;=+\-*/<>!&|^%:."\'`]+')


class AnalysisError(Exception):
    """Raised when an analyzer cannot score the given code."""
    pass


@dataclass
class ObfuscationStrategy:
    """
    A suggested obfuscation technique.

    Fields:
        type: 'structural', 'encryption' or 'optimization'
        technique: Pass technique name, e.g. 'controlFlowFlattening'
        intensity: Suggested strength in [0, 1]
    """
    type: str
    technique: str
    intensity: float


@dataclass
class AnalysisResult:
    """Metrics for one source file plus the strategies they suggest."""
    complexity: float
    security_risk: float
    performance_impact: float
    obfuscation_level: float
    suggested_strategies: List[ObfuscationStrategy] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the camelCase record used by classifier services."""
        return {
            'complexity': self.complexity,
            'securityRisk': self.security_risk,
            'performanceImpact': self.performance_impact,
            'obfuscationLevel': self.obfuscation_level,
            'suggestedStrategies': [asdict(s) for s in self.suggested_strategies],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'AnalysisResult':
        """Create from a classifier service record."""
        try:
            return cls(
                complexity=float(data['complexity']),
                security_risk=float(data['securityRisk']),
                performance_impact=float(data['performanceImpact']),
                obfuscation_level=float(data['obfuscationLevel']),
                suggested_strategies=[
                    ObfuscationStrategy(s['type'], s['technique'], float(s['intensity']))
                    for s in data.get('suggestedStrategies', [])
                ],
            )
        except (KeyError, TypeError, ValueError) as e:
            raise AnalysisError(f"Invalid analysis record: {e}") from e


def neutral_result() -> AnalysisResult:
    """Mid-range scores and no strategies."""
    return AnalysisResult(
        complexity=NEUTRAL_SCORE,
        security_risk=NEUTRAL_SCORE,
        performance_impact=NEUTRAL_SCORE,
        obfuscation_level=NEUTRAL_SCORE,
    )


def generate_strategies(complexity: float, security_risk: float,
                        performance_impact: float) -> List[ObfuscationStrategy]:
    """
    Suggest strategies from metric scores.

    Args:
        complexity: Control-flow complexity score
        security_risk: Sensitive-content score
        performance_impact: Runtime cost score

    Returns:
        Strategies in application order
    """
    strategies = []

    if complexity > 0.6:
        strategies.append(ObfuscationStrategy(
            type='structural',
            technique='controlFlowFlattening',
            intensity=min(complexity * 1.2, 0.95),
        ))

    if security_risk > 0.5:
        strategies.append(ObfuscationStrategy(
            type='encryption',
            technique='variableEncryption',
            intensity=max(security_risk * 1.1, 0.7),
        ))

    if performance_impact < 0.6:
        strategies.append(ObfuscationStrategy(
            type='optimization',
            technique='deadCodeInjection',
            intensity=0.8 - performance_impact,
        ))

    return strategies


class CodeAnalyzer(ABC):
    """Interface of a code classifier."""

    @abstractmethod
    def analyze(self, code: str, file_extension: str) -> AnalysisResult:
        """
        Score source text.

        Args:
            code: Source text
            file_extension: Extension including the dot, e.g. '.js'

        Returns:
            AnalysisResult

        Raises:
            AnalysisError: If the code cannot be analyzed
        """
        pass


def tokenize_words(code: str) -> List[str]:
    """Split source text on whitespace, brackets and operators."""
    return [word for word in _WORD_SPLIT.split(code) if word]


class HeuristicAnalyzer(CodeAnalyzer):
    """
    Keyword-counting analyzer.

    Scores are densities per non-blank line, clamped to [0, 1].
    """

    def analyze(self, code: str, file_extension: str) -> AnalysisResult:
        if not isinstance(code, str):
            raise AnalysisError("Code must be a string")

        lines = [line for line in code.split('\n') if line.strip()]
        line_count = max(len(lines), 1)
        words = tokenize_words(code)

        branches = sum(1 for w in words if w in BRANCH_WORDS)
        loops = sum(1 for w in words if w in LOOP_WORDS)
        sensitive = sum(1 for w in words if any(m in w.lower() for m in SENSITIVE_MARKERS))

        complexity = min(1.0, 2.0 * (branches + loops) / line_count)
        security_risk = min(1.0, sensitive / 3.0)
        performance_impact = min(1.0, 4.0 * loops / line_count)
        obfuscation_level = (complexity + security_risk + performance_impact) / 3.0

        return AnalysisResult(
            complexity=complexity,
            security_risk=security_risk,
            performance_impact=performance_impact,
            obfuscation_level=obfuscation_level,
            suggested_strategies=generate_strategies(complexity, security_risk, performance_impact),
        )


def analyze_safely(analyzer: CodeAnalyzer, code: str, file_extension: str) -> AnalysisResult:
    """
    Run an analyzer, falling back to the neutral result on any failure.

    Args:
        analyzer: Classifier to consult
        code: Source text
        file_extension: Extension including the dot

    Returns:
        The analyzer's result, or the neutral result
    """
    try:
        result = analyzer.analyze(code, file_extension)
        if not isinstance(result, AnalysisResult):
            raise AnalysisError(f"Analyzer returned {type(result).__name__}")
        return result
    except Exception as e:
        logger.warning(f"Code analysis failed, using neutral defaults: {e}")
        return neutral_result()
