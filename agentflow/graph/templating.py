"""
Placeholder substitution and dotted-path lookup.

These helpers are shared by the simulator and by the generated scripts:
the script generators embed their source verbatim, so every function here
must stay self-contained (standard library only, no module-level state).
"""

import re
from typing import Any


def lookup_path(value: Any, path: str) -> Any:
    """Resolve ``a.b.0.c`` against nested dicts/lists. Missing segments give None."""
    current = value
    for part in path.split("."):
        if isinstance(current, dict):
            current = current.get(part)
        elif isinstance(current, (list, tuple)) and part.isdigit():
            index = int(part)
            current = current[index] if index < len(current) else None
        else:
            return None
        if current is None:
            return None
    return current


def render_template(text: str, values: Any) -> str:
    """Replace ``{{key}}`` (whitespace inside the braces allowed) for every top-level key."""
    if not isinstance(text, str) or not isinstance(values, dict):
        return text
    for key, value in values.items():
        pattern = re.compile(r"\{\{\s*" + re.escape(str(key)) + r"\s*\}\}")
        replacement = "" if value is None else str(value)
        text = pattern.sub(lambda _match: replacement, text)
    return text


def render_value(value: Any, values: Any) -> Any:
    """Apply ``render_template`` to every string inside a nested structure."""
    if isinstance(value, str):
        return render_template(value, values)
    if isinstance(value, dict):
        return {k: render_value(v, values) for k, v in value.items()}
    if isinstance(value, list):
        return [render_value(item, values) for item in value]
    return value


def apply_response_mapping(response: Any, mapping: dict[str, str]) -> Any:
    """Project ``response`` onto ``{output_key: dotted.path}``. Empty mapping is identity."""
    if not mapping:
        return response
    return {output_key: lookup_path(response, path) for output_key, path in mapping.items()}
