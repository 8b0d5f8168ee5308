"""
Condition evaluation for logic nodes.

A deliberately small expression subset: one binary comparison per
expression, using exactly ``===``, ``==``, ``!=``, ``>`` or ``<``. The
operator is found by substring search in that priority order and the
expression is split at its first occurrence, so expressions mixing
operators (``a >= b``, ``a !== b``) are not understood.

Operands:
- ``"text"`` / ``'text'``: string literal
- ``42`` / ``-1.5``: number literal
- ``user.profile.age``: nested lookup in the context
- ``score``: ``context["score"]``, or the text ``"score"`` itself when the
  key is absent

Evaluation never raises; anything unexpected yields ``False``.

The generated logic scripts embed these functions verbatim, so they may
only depend on the standard library and ``lookup_path``.
"""

import logging
import math
import re
from typing import Any

from agentflow.graph.templating import lookup_path

logger = logging.getLogger(__name__)


def _parse_number(token: str) -> int | float | None:
    if not re.fullmatch(r"[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?", token):
        return None
    if re.fullmatch(r"[+-]?\d+", token):
        return int(token)
    return float(token)


def _resolve_operand(token: str, context: Any) -> Any:
    if len(token) >= 2 and token[0] == token[-1] and token[0] in ("'", '"'):
        return token[1:-1]
    number = _parse_number(token)
    if number is not None:
        return number
    if "." in token:
        return lookup_path(context, token)
    if isinstance(context, dict) and token in context:
        return context[token]
    return token


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _to_number(value: Any) -> float:
    if isinstance(value, bool):
        return float(value)
    if _is_number(value):
        return float(value)
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return 0.0
        number = _parse_number(text)
        return math.nan if number is None else float(number)
    return math.nan


def _strict_equals(left: Any, right: Any) -> bool:
    if _is_number(left) and _is_number(right):
        return left == right
    return type(left) is type(right) and left == right


def _loose_equals(left: Any, right: Any) -> bool:
    if left is None or right is None:
        return left is None and right is None
    if _strict_equals(left, right):
        return True
    scalar = (str, int, float, bool)
    if isinstance(left, scalar) and isinstance(right, scalar):
        if isinstance(left, str) and isinstance(right, str):
            return False
        return _to_number(left) == _to_number(right)
    return False


def evaluate_condition(expression: str, context: Any) -> bool:
    """Evaluate ``expression`` against ``context``. Returns False instead of raising."""
    try:
        for operator in ("===", "==", "!=", ">", "<"):
            if operator not in expression:
                continue
            left_text, _, right_text = expression.partition(operator)
            left = _resolve_operand(left_text.strip(), context)
            right = _resolve_operand(right_text.strip(), context)
            if operator == "===":
                return _strict_equals(left, right)
            if operator == "==":
                return _loose_equals(left, right)
            if operator == "!=":
                return not _loose_equals(left, right)
            if operator == ">":
                return _to_number(left) > _to_number(right)
            return _to_number(left) < _to_number(right)
        return False
    except Exception as e:
        logger.debug(f"Condition evaluation failed for {expression!r}: {e}")
        return False
