"""Static checks for parameter formulas.

A formula is an arithmetic or comparison expression over numbers and
parameter names, e.g. ``Width - 2 * FrameWidth`` or
``if(Height > 6, 0.1, 0.05)``.  Nothing is evaluated.
"""

from __future__ import annotations

import re

_TOKEN_RE = re.compile(
    r"\s*(?:"
    r"(?P<number>\d+(?:\.\d*)?|\.\d+)"
    r"|(?P<name>[A-Za-z_][A-Za-z0-9_]*)"
    r"|(?P<op><=|>=|==|!=|[-+*/^<>=])"
    r"|(?P<paren>[()])"
    r"|(?P<comma>,)"
    r"|(?P<other>\S)"
    r")"
)

OPERATORS = frozenset({"+", "-", "*", "/", "^", "<", ">", "=", "<=", ">=", "==", "!="})

# Functions the family editor accepts inside formulas.
FUNCTIONS = frozenset({
    "if", "and", "or", "not",
    "abs", "sqrt", "round", "roundup", "rounddown",
    "min", "max", "exp", "log", "ln",
    "sin", "cos", "tan", "asin", "acos", "atan", "pi",
})


def tokenize_formula(formula: str) -> list[tuple[str, str]]:
    """Return ``(kind, text)`` pairs for *formula*."""
    tokens: list[tuple[str, str]] = []
    for match in _TOKEN_RE.finditer(formula):
        kind = match.lastgroup
        if kind is None:
            continue
        tokens.append((kind, match.group(kind)))
    return tokens


def references(formula: str) -> set[str]:
    """Names in *formula* that are not built-in functions."""
    return {
        text for kind, text in tokenize_formula(formula)
        if kind == "name" and text.lower() not in FUNCTIONS
    }


def formula_problems(formula: str | None, known_names: set[str] | list[str]) -> list[str]:
    """Return a list of problems with *formula*; empty when it is valid."""
    if formula is None or not formula.strip():
        return ["Empty formula"]

    known = set(known_names)
    tokens = tokenize_formula(formula)
    problems: list[str] = []

    if not any(kind == "op" for kind, _ in tokens):
        problems.append("Formula contains no valid operators")

    for kind, text in tokens:
        if kind == "other":
            problems.append(f"Unexpected character: {text}")
        elif kind == "name" and text.lower() not in FUNCTIONS and text not in known:
            problems.append(f"Undefined parameter reference: {text}")

    problems.extend(_syntax_problems(tokens))
    return problems


def _syntax_problems(tokens: list[tuple[str, str]]) -> list[str]:
    problems: list[str] = []
    depth = 0
    previous = None  # kind of the last significant token
    for kind, text in tokens:
        if kind == "paren":
            if text == "(":
                depth += 1
            else:
                depth -= 1
                if depth < 0:
                    problems.append("Unbalanced parentheses")
                    depth = 0
        elif kind == "op":
            unary = text == "-" and previous in (None, "op", "open", "comma")
            if not unary and previous in (None, "op", "open", "comma"):
                problems.append(f"Operator '{text}' is missing a left operand")
        previous = "open" if (kind, text) == ("paren", "(") else kind
    if depth > 0:
        problems.append("Unbalanced parentheses")
    if previous == "op":
        problems.append("Formula ends with an operator")
    return problems


def substitute(formula: str, name: str, value: object) -> str:
    """Replace whole-word occurrences of *name* in *formula* with *value*."""
    return re.sub(rf"(?<![A-Za-z0-9_]){re.escape(name)}(?![A-Za-z0-9_])", str(value), formula)
