"""
Source-text obfuscation passes.

Every pass is a text -> text function. Randomized passes draw from an
injectable `random.Random` so a fixed seed gives a fixed output.

Reversibility:
- variable wrapping, junk functions and dummy statements are removed by
  `remove_obfuscation` through exact pattern matching;
- control-flow flattening, opaque predicates and arithmetic re-encoding are
  forward-only.

Inserted snippets use JavaScript syntax.
"""

import math
import random
import re
from typing import Optional

OPAQUE_PREDICATE_RATE = 0.2
JUNK_CODE_RATE = 0.2
DUMMY_STATEMENT_RATE = 0.15

OPAQUE_PREDICATES = (
    '(Date.now() * Date.now() - Date.now()) >= 0',
    '[0, 1].includes(Date.now() & 1)',
    'Math.abs(Math.sin(Date.now())) <= 1',
)

JUNK_FUNCTIONS = (
    'function _dummy1() { return Math.random() > 0.5; }',
    'function _dummy2(x) { if(x > 0) return x; else return -x; }',
    'function _dummy3() { console.log(new Date().getTime()); }',
)

DUMMY_STATEMENTS = (
    'const _t = performance.now();',
    'if(_t % 2 === 0) { /* even timestamp */ }',
    'try { _dummy1(); } catch(e) { /* silent */ }',
)

_ADDITION = re.compile(r'([\w.]+)\s*\+\s*(\d+)(?![\w.])')
_MULTIPLICATION = re.compile(r'([\w.]+)\s*\*\s*(\d+)(?![\w.])')
_SUBTRACTION = re.compile(r'([\w.]+)\s*-\s*(\d+)(?![\w.])')

# Neighbours that delimit a complete operand
_LEFT_BOUNDARIES = frozenset("\n=(,[")
_RIGHT_BOUNDARIES = frozenset(";),]\r\n")
_IDENTIFIER_CHAR = re.compile(r"[\w$.]")

_DECLARATION = re.compile(r'\b(let|const|var)(\s+)([A-Za-z_$][\w$]*)(\s*=\s*)([^;]+);')
_WRAPPED_DECLARATION = re.compile(
    r'\b(let|const|var)(\s+)([A-Za-z_$][\w$]*)(\s*=\s*)\(([^;]+) \* 1 \+ 0\);'
)

# Inserted text is removed together with the line breaks added with it.
_JUNK_FUNCTION = re.compile(r'\n\nfunction _dummy\d+\([^)]*\) \{[^}]*\}(?=\n|\Z)')
_DUMMY_STATEMENT = re.compile(
    r'\n(?:const _t = performance\.now\(\);'
    r'|if\(_t % 2 === 0\) \{ /\* even timestamp \*/ \}'
    r'|try \{ _dummy\d+\(\); \} catch\(e\) \{ /\* silent \*/ \})(?=\n|\Z)'
)


def _rng(rng: Optional[random.Random]) -> random.Random:
    return rng if rng is not None else random.Random()


def flatten_control_flow(code: str, rng: Optional[random.Random] = None) -> str:
    """
    Rewrite straight-line code as a loop over an explicit state counter.

    Each original line becomes one `case` of a `switch`, executed in the
    original order. There is no reverse pass.

    Args:
        code: Source text
        rng: Unused; accepted so all passes share one signature

    Returns:
        Flattened source text
    """
    lines = code.split('\n')
    flattened = []

    for state, line in enumerate(lines):
        flattened.append(f"case {state}: // {line.strip()}")
        flattened.append(line)
        flattened.append(f"state = {state + 1}; break;")

    body = '\n    '.join(flattened)
    return f"let state = 0;\nwhile (state < {len(lines)}) {{\n  switch(state) {{\n    {body}\n  }}\n}}"


def insert_opaque_predicates(code: str, rng: Optional[random.Random] = None) -> str:
    """
    Guard about 20% of the non-blank lines with an always-true condition.

    The else branch throws and can never run. There is no reverse pass.
    """
    rng = _rng(rng)
    result = []

    for line in code.split('\n'):
        if line.strip() and rng.random() < OPAQUE_PREDICATE_RATE:
            predicate = rng.choice(OPAQUE_PREDICATES)
            line = f"if ({predicate}) {{\n  {line}\n}} else {{ throw new Error('Impossible'); }}"
        result.append(line)

    return '\n'.join(result)


def _stands_alone(match) -> bool:
    """
    Check that a matched `operand op literal` is a complete operand.

    The text before it must end at a line start, `=`, `(`, `,`, `[` or
    `return`, and the text after it must start with `;`, `)`, `,`, `]` or a
    line end. Anything else, as in `i * 4 + 1` or `a - b + 2`, would bind
    differently once parenthesized.
    """
    text = match.string

    start = match.start()
    while start > 0 and text[start - 1] in ' \t':
        start -= 1
    left_ok = (
        start == 0
        or text[start - 1] in _LEFT_BOUNDARIES
        or (text.endswith('return', 0, start)
            and (start == 6 or not _IDENTIFIER_CHAR.match(text[start - 7])))
    )

    end = match.end()
    while end < len(text) and text[end] in ' \t':
        end += 1
    right_ok = end == len(text) or text[end] in _RIGHT_BOUNDARIES

    return left_ok and right_ok


def _encode_addition(match) -> str:
    if not _stands_alone(match):
        return match.group(0)
    operand, literal = match.group(1), int(match.group(2))
    return f"({operand} - ({-literal}))"


def _encode_subtraction(match) -> str:
    if not _stands_alone(match):
        return match.group(0)
    operand, literal = match.group(1), int(match.group(2))
    return f"({operand} + ({-literal}))"


def _encode_multiplication(match) -> str:
    operand, literal = match.group(1), int(match.group(2))
    # only powers of two >= 2 have an exact shift form
    if literal < 2 or literal & (literal - 1) or not _stands_alone(match):
        return match.group(0)
    shift = int(math.log2(literal))
    return f"(({operand} << {shift}) + {operand} * {literal % 2})"


def encode_arithmetic(code: str, rng: Optional[random.Random] = None) -> str:
    """
    Rewrite literal-operand arithmetic into equivalent, noisier forms.

    `x + k` -> `(x - (-k))`, `x - k` -> `(x + (-k))` and
    `x * 2^n` -> `((x << n) + x * 0)`. Only expressions that form a whole
    operand are rewritten; fragments of longer expressions are left as
    they are. There is no reverse pass.
    """
    code = _ADDITION.sub(_encode_addition, code)
    code = _MULTIPLICATION.sub(_encode_multiplication, code)
    code = _SUBTRACTION.sub(_encode_subtraction, code)
    return code


def wrap_variable_values(code: str, rng: Optional[random.Random] = None) -> str:
    """Rewrite `let|const|var NAME = VALUE;` to `... = (VALUE * 1 + 0);`."""
    return _DECLARATION.sub(r'\1\2\3\4(\5 * 1 + 0);', code)


def inject_junk_code(code: str, rng: Optional[random.Random] = None) -> str:
    """
    Insert an inert helper function after about 20% of the lines.

    Each function is preceded by a blank line.
    """
    rng = _rng(rng)
    result = []

    for line in code.split('\n'):
        result.append(line)
        if rng.random() < JUNK_CODE_RATE:
            result.append('\n' + rng.choice(JUNK_FUNCTIONS))

    return '\n'.join(result)


def interleave_dummy_statements(code: str, rng: Optional[random.Random] = None) -> str:
    """Append an inert statement after about 15% of the non-blank lines."""
    rng = _rng(rng)
    result = []

    for line in code.split('\n'):
        if line.strip() and rng.random() < DUMMY_STATEMENT_RATE:
            line = line + '\n' + rng.choice(DUMMY_STATEMENTS)
        result.append(line)

    return '\n'.join(result)


def _strip_once(code: str) -> str:
    code = _DUMMY_STATEMENT.sub('', code)
    code = _JUNK_FUNCTION.sub('', code)
    code = _WRAPPED_DECLARATION.sub(r'\1\2\3\4\5;', code)
    return code


def remove_obfuscation(code: str) -> str:
    """
    Strip dummy statements, junk functions and variable wrapping.

    Patterns are removed until the text stops changing, so applying this
    twice gives the same result as applying it once. Flattening, opaque
    predicates and arithmetic re-encoding are left in place.

    Args:
        code: Obfuscated source text (after the cipher layer is undone)

    Returns:
        Source text with the strippable layers removed
    """
    while True:
        stripped = _strip_once(code)
        if stripped == code:
            return code
        code = stripped
