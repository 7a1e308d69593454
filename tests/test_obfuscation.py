"""
Obfuscation pass tests.

Tests each pass's output shape, the removal pass, the pipeline registry and
the analyzer fallback.
"""

import random
import re

import pytest

from neoenigma.machine.settings import EnigmaConfig
from neoenigma.obfuscation.analyzer import (
    AnalysisError,
    AnalysisResult,
    CodeAnalyzer,
    HeuristicAnalyzer,
    ObfuscationStrategy,
    analyze_safely,
    generate_strategies,
    neutral_result,
)
from neoenigma.obfuscation.passes import (
    DUMMY_STATEMENTS,
    JUNK_FUNCTIONS,
    OPAQUE_PREDICATES,
    encode_arithmetic,
    flatten_control_flow,
    inject_junk_code,
    insert_opaque_predicates,
    interleave_dummy_statements,
    remove_obfuscation,
    wrap_variable_values,
)
from neoenigma.obfuscation.pipeline import (
    PASSES,
    ObfuscationPipeline,
    apply_full_obfuscation,
    apply_strategies,
    deobfuscate_source,
    obfuscate_source,
)

SAMPLE_CODE = """class TestClass {
  private data: any[];

  constructor() {
    this.data = [];
  }

  public processData(input: number): number {
    const apiKey = "secret_key_123";
    let result = 0;
    for (let i = 0; i < input; i++) {
      result += i * 2;
    }
    return result;
  }

  public getData(): any[] {
    return this.data;
  }
}"""


class AlwaysRandom(random.Random):
    """Random source whose rate checks always pass."""

    def random(self):
        return 0.0


class NeverRandom(random.Random):
    """Random source whose rate checks never pass."""

    def random(self):
        return 0.99


class FixedAnalyzer(CodeAnalyzer):
    def __init__(self, *techniques):
        self.strategies = [ObfuscationStrategy('encryption', t, 0.8) for t in techniques]

    def analyze(self, code, file_extension):
        return AnalysisResult(0.1, 0.9, 0.1, 0.4, list(self.strategies))


class FailingAnalyzer(CodeAnalyzer):
    def analyze(self, code, file_extension):
        raise AnalysisError("classifier unavailable")


def make_config() -> EnigmaConfig:
    return EnigmaConfig(rotors="II-V-I", rotor_start="QEV", rings="CAF",
                        plugboard="AT BS DE", reflector="B")


class TestControlFlowFlattening:
    """Test control-flow flattening."""

    def test_two_lines(self):
        expected = (
            "let state = 0;\n"
            "while (state < 2) {\n"
            "  switch(state) {\n"
            "    case 0: // a();\n"
            "    a();\n"
            "    state = 1; break;\n"
            "    case 1: // b();\n"
            "    b();\n"
            "    state = 2; break;\n"
            "  }\n"
            "}"
        )
        assert flatten_control_flow("a();\nb();") == expected

    def test_one_case_per_line(self):
        flattened = flatten_control_flow(SAMPLE_CODE)
        line_count = len(SAMPLE_CODE.split('\n'))
        assert f"while (state < {line_count})" in flattened
        assert flattened.count("    case ") == line_count

    def test_not_removed(self):
        flattened = flatten_control_flow("a();")
        assert remove_obfuscation(flattened) == flattened


class TestOpaquePredicates:
    """Test opaque predicate insertion."""

    def test_every_line_guarded_when_rate_passes(self):
        result = insert_opaque_predicates("a();\n\nb();", AlwaysRandom(1))
        guards = re.findall(r"if \((.+)\) \{", result)

        assert len(guards) == 2
        assert all(guard in OPAQUE_PREDICATES for guard in guards)
        assert result.count("throw new Error('Impossible')") == 2
        assert "\n\n" in result

    def test_no_lines_guarded_when_rate_fails(self):
        assert insert_opaque_predicates(SAMPLE_CODE, NeverRandom(1)) == SAMPLE_CODE

    def test_seeded_output_is_deterministic(self):
        assert (insert_opaque_predicates(SAMPLE_CODE, random.Random(7))
                == insert_opaque_predicates(SAMPLE_CODE, random.Random(7)))


class TestArithmeticEncoding:
    """Test arithmetic re-encoding."""

    def test_addition(self):
        assert encode_arithmetic("y = x + 5;") == "y = (x - (-5));"

    def test_subtraction(self):
        assert encode_arithmetic("y = x - 3;") == "y = (x + (-3));"

    def test_power_of_two_multiplication(self):
        assert encode_arithmetic("y = x * 8;") == "y = ((x << 3) + x * 0);"

    def test_other_multiplication_unchanged(self):
        assert encode_arithmetic("y = x * 6;") == "y = x * 6;"
        assert encode_arithmetic("y = x * 1;") == "y = x * 1;"

    def test_member_operand(self):
        assert encode_arithmetic("n = this.count + 12;") == "n = (this.count - (-12));"

    def test_identifiers_untouched(self):
        assert encode_arithmetic("y = a + b;") == "y = a + b;"

    def test_return_and_argument_operands(self):
        assert encode_arithmetic("return x + 1;") == "return (x - (-1));"
        assert encode_arithmetic("f(x + 2, y * 4)") == "f((x - (-2)), ((y << 2) + y * 0))"

    def test_fragments_of_longer_expressions_untouched(self):
        for expression in ("i * 4 + 1", "a - b + 2", "a / b + 1", "-x + 5",
                           "a + 1 + 2", "a % b - 3", "x * 2 * 3"):
            assert encode_arithmetic(expression) == expression

    def test_values_preserved(self):
        """Re-encoded expressions compute the same values as the originals."""
        expressions = (
            "i * 4 + 1", "a - b + 2", "a / b + 1", "-x + 5", "a + 1 + 2",
            "x + 5", "x - 3", "x * 8", "(a - 7)", "max(x + 2, y * 4)",
            "[i - 1, a * 16][0]", "b * 2 - a",
        )
        for env in ({"a": 10, "b": 3, "i": 3, "x": 7, "y": 5},
                    {"a": -4, "b": 2, "i": 0, "x": -1, "y": 12}):
            for expression in expressions:
                encoded = encode_arithmetic(expression)
                assert eval(encoded, {}, dict(env)) == eval(expression, {}, dict(env)), encoded

    def test_rewrites_still_applied(self):
        assert encode_arithmetic("(a - 7)") == "((a + (-7)))"
        assert encode_arithmetic("[i - 1, a * 16]") == "[(i + (-1)), ((a << 4) + a * 0)]"


class TestVariableWrapping:
    """Test variable value wrapping and its removal."""

    def test_wrap(self):
        assert (wrap_variable_values('const apiKey = "secret_key_123";')
                == 'const apiKey = ("secret_key_123" * 1 + 0);')

    def test_all_declaration_keywords(self):
        code = "let a = 1;\nvar b = f(2);\nconst c = [3];"
        wrapped = wrap_variable_values(code)
        assert wrapped == "let a = (1 * 1 + 0);\nvar b = (f(2) * 1 + 0);\nconst c = ([3] * 1 + 0);"
        assert remove_obfuscation(wrapped) == code

    def test_roundtrip_on_sample(self):
        assert remove_obfuscation(wrap_variable_values(SAMPLE_CODE)) == SAMPLE_CODE

    def test_double_wrap_removed(self):
        code = "let total = price;"
        assert remove_obfuscation(wrap_variable_values(wrap_variable_values(code))) == code


class TestJunkCode:
    """Test junk function injection and removal."""

    def test_junk_after_every_line(self):
        result = inject_junk_code("a();\nb();", AlwaysRandom(3))
        lines = result.split('\n')

        assert lines[0] == "a();"
        assert lines[1] == ""
        assert lines[2] in JUNK_FUNCTIONS
        assert lines[3] == "b();"
        assert remove_obfuscation(result) == "a();\nb();"

    def test_no_junk_when_rate_fails(self):
        assert inject_junk_code(SAMPLE_CODE, NeverRandom(3)) == SAMPLE_CODE

    def test_seeded_roundtrip(self):
        for seed in range(20):
            injected = inject_junk_code(SAMPLE_CODE, random.Random(seed))
            assert remove_obfuscation(injected) == SAMPLE_CODE


class TestDummyStatements:
    """Test dummy statement interleaving and removal."""

    def test_blank_lines_skipped(self):
        result = interleave_dummy_statements("a();\n\nb();", AlwaysRandom(5))
        lines = result.split('\n')

        assert lines[0] == "a();"
        assert lines[1] in DUMMY_STATEMENTS
        assert lines[2] == ""
        assert lines[3] == "b();"
        assert lines[4] in DUMMY_STATEMENTS
        assert remove_obfuscation(result) == "a();\n\nb();"

    def test_seeded_roundtrip(self):
        for seed in range(20):
            interleaved = interleave_dummy_statements(SAMPLE_CODE, random.Random(seed))
            assert remove_obfuscation(interleaved) == SAMPLE_CODE


class TestRemoval:
    """Test the removal pass."""

    def test_idempotent(self):
        code = ("const a = ((1 * 1 + 0) * 1 + 0);\nfoo();\nconst _t = performance.now();\n\n"
                "function _dummy2(x) { if(x > 0) return x; else return -x; }")
        once = remove_obfuscation(code)

        assert once == "const a = 1;\nfoo();"
        assert remove_obfuscation(once) == once

    def test_plain_code_unchanged(self):
        assert remove_obfuscation(SAMPLE_CODE) == SAMPLE_CODE

    def test_reversible_layers_stacked(self):
        rng = random.Random(11)
        code = wrap_variable_values(SAMPLE_CODE)
        code = inject_junk_code(code, rng)
        code = interleave_dummy_statements(code, rng)
        code = inject_junk_code(code, rng)
        assert remove_obfuscation(code) == SAMPLE_CODE


class TestPipeline:
    """Test the pass registry and pipelines."""

    def test_reversibility_flags(self):
        assert not PASSES['controlFlowFlattening'].reversible
        assert not PASSES['opaquePredicates'].reversible
        assert not PASSES['arithmeticEncoding'].reversible
        assert PASSES['variableEncryption'].reversible
        assert PASSES['deadCodeInjection'].reversible
        assert PASSES['codeInterleaving'].reversible

    def test_pipeline_reversible(self):
        pipeline = ObfuscationPipeline(['variableEncryption', 'deadCodeInjection',
                                        'codeInterleaving'], random.Random(4))
        assert pipeline.reversible
        assert pipeline.reverse(pipeline.forward(SAMPLE_CODE)) == SAMPLE_CODE

    def test_pipeline_with_forward_only_pass(self):
        assert not ObfuscationPipeline(['variableEncryption', 'controlFlowFlattening']).reversible

    def test_unknown_technique(self):
        with pytest.raises(KeyError):
            ObfuscationPipeline(['selfModifyingCode'])

    def test_unsupported_strategy_ignored(self):
        strategies = [ObfuscationStrategy('structural', 'opaquePredicates', 0.9)]
        assert apply_strategies(SAMPLE_CODE, strategies, random.Random(1)) == SAMPLE_CODE

    def test_full_obfuscation_is_seeded(self):
        assert (apply_full_obfuscation(SAMPLE_CODE, random.Random(8))
                == apply_full_obfuscation(SAMPLE_CODE, random.Random(8)))
        assert "while (state < " in apply_full_obfuscation(SAMPLE_CODE, random.Random(8))


class TestFileFlow:
    """Test full obfuscation of one file's content."""

    def test_reversible_strategies_roundtrip(self):
        config = make_config()
        analyzer = FixedAnalyzer('variableEncryption', 'deadCodeInjection')
        for seed in range(10):
            obfuscated = obfuscate_source(SAMPLE_CODE, config, '.ts', analyzer, random.Random(seed))
            assert obfuscated != SAMPLE_CODE
            assert deobfuscate_source(obfuscated, config) == SAMPLE_CODE

    def test_failing_analyzer_still_obfuscates(self):
        config = make_config()
        obfuscated = obfuscate_source(SAMPLE_CODE, config, '.ts', FailingAnalyzer(), random.Random(2))
        assert deobfuscate_source(obfuscated, config) == SAMPLE_CODE

    def test_cipher_layer_applied_last(self):
        config = make_config()
        obfuscated = obfuscate_source("let a = 1;", config, '.js', FixedAnalyzer(), NeverRandom(0))
        assert "(1 * 1 + 0)" in obfuscated
        assert "let" not in obfuscated

    def test_no_analyzer_runs_every_pass(self):
        config = make_config()
        obfuscated = obfuscate_source(SAMPLE_CODE, config, '.ts', None, random.Random(3))
        deobfuscated = deobfuscate_source(obfuscated, config)
        assert deobfuscated.startswith("let state = 0;")


class TestAnalyzer:
    """Test strategy generation and analyzer fallback."""

    def test_thresholds(self):
        strategies = generate_strategies(0.7, 0.6, 0.7)
        assert [s.technique for s in strategies] == ['controlFlowFlattening', 'variableEncryption']
        assert strategies[0].intensity == pytest.approx(0.84)
        assert strategies[1].intensity == pytest.approx(0.7)

    def test_intensity_caps(self):
        strategies = generate_strategies(0.9, 1.0, 0.2)
        assert strategies[0].intensity == pytest.approx(0.95)
        assert strategies[1].intensity == pytest.approx(1.1)
        assert strategies[2].technique == 'deadCodeInjection'
        assert strategies[2].intensity == pytest.approx(0.6)

    def test_no_strategies_at_boundaries(self):
        assert generate_strategies(0.6, 0.5, 0.6) == []

    def test_heuristic_flags_sensitive_code(self):
        code = ('const apiKey = "secret_key_123";\n'
                'const password = getPassword();\n'
                'const token = fetch(url);')
        result = HeuristicAnalyzer().analyze(code, '.js')

        assert result.security_risk == 1.0
        assert result.complexity == 0.0
        assert [s.technique for s in result.suggested_strategies] == [
            'variableEncryption', 'deadCodeInjection']

    def test_heuristic_scores_in_range(self):
        result = HeuristicAnalyzer().analyze(SAMPLE_CODE, '.ts')
        for score in (result.complexity, result.security_risk,
                      result.performance_impact, result.obfuscation_level):
            assert 0.0 <= score <= 1.0

    def test_failure_gives_neutral_result(self):
        result = analyze_safely(FailingAnalyzer(), SAMPLE_CODE, '.ts')
        assert result == neutral_result()
        assert result.suggested_strategies == []

    def test_wrong_return_type_gives_neutral_result(self):
        class BrokenAnalyzer(CodeAnalyzer):
            def analyze(self, code, file_extension):
                return {"complexity": 1.0}

        assert analyze_safely(BrokenAnalyzer(), SAMPLE_CODE, '.ts') == neutral_result()

    def test_record_roundtrip(self):
        result = FixedAnalyzer('variableEncryption').analyze(SAMPLE_CODE, '.ts')
        record = result.to_dict()
        assert record['securityRisk'] == 0.9
        assert AnalysisResult.from_dict(record) == result

    def test_invalid_record(self):
        with pytest.raises(AnalysisError):
            AnalysisResult.from_dict({'complexity': 0.5})
