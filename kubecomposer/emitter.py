"""
YAML emitter for the manifest shapes kubecomposer builds.

This is deliberately not a general YAML library: it walks dicts, lists and
scalars in insertion order, drops keys whose value is None and quotes only
the strings that would otherwise be misread by a YAML parser. Block scalars,
anchors and non-string keys are never produced by the manifest builders and
are not supported here.

Builders use ``when_set`` for optional fields so that a falsy value becomes
None and the key disappears from the output.
"""

import logging
from typing import Any, Iterable, List, Optional

logger = logging.getLogger(__name__)

DOCUMENT_SEPARATOR = "\n---\n"

# Characters that force a string scalar into double quotes
SPECIAL_CHARACTERS = frozenset(":#*?[]{}|>@&!%`\"'")


def when_set(value: Any) -> Optional[Any]:
    """
    Return ``value`` if it is truthy, otherwise None.

    A None value is skipped by ``render``, so ``{"key": when_set(x)}`` only
    emits ``key`` when ``x`` is set. Note that ``0`` and empty collections
    count as unset.
    """
    return value if value else None


def needs_quoting(value: str) -> bool:
    """
    Check whether a string scalar must be double-quoted.

    Args:
        value: The raw string

    Returns:
        True for the empty string, ``*``, strings containing a YAML
        indicator character, and strings with leading or trailing spaces
    """
    if value == "" or value == "*":
        return True
    if value.startswith(" ") or value.endswith(" "):
        return True
    return any(ch in SPECIAL_CHARACTERS for ch in value)


def format_scalar(value: Any) -> str:
    """
    Format a scalar for inline output.

    Booleans become ``true``/``false``, numbers are written verbatim and
    strings are quoted according to ``needs_quoting``.
    """
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return str(value)
    text = str(value)
    if "\n" in text:
        # Block scalars are not supported, so the output will not parse
        logger.warning(f"Scalar {text.splitlines()[0]!r}... contains a newline and is emitted unescaped")
    if needs_quoting(text):
        escaped = text.replace('"', '\\"')
        return f'"{escaped}"'
    return text


def _render_mapping(mapping: dict, indent_level: int) -> str:
    spaces = "  " * indent_level
    lines: List[str] = []

    for key, value in mapping.items():
        if value is None:
            continue

        if isinstance(value, dict):
            if not value:
                lines.append(f"{spaces}{key}: {{}}\n")
            else:
                lines.append(f"{spaces}{key}:\n")
                lines.append(_render_mapping(value, indent_level + 1))
        elif isinstance(value, (list, tuple)):
            if not value:
                lines.append(f"{spaces}{key}: []\n")
                continue
            lines.append(f"{spaces}{key}:\n")
            for item in value:
                if isinstance(item, dict):
                    if not item:
                        lines.append(f"{spaces}  - {{}}\n")
                    else:
                        lines.append(f"{spaces}  -\n")
                        lines.append(_render_mapping(item, indent_level + 2))
                else:
                    lines.append(f"{spaces}  - {format_scalar(item)}\n")
        else:
            lines.append(f"{spaces}{key}: {format_scalar(value)}\n")

    return "".join(lines)


def render(value: Any, indent_level: int = 0) -> str:
    """
    Render a resource (or a list of resources) as YAML text.

    Args:
        value: A dict describing one resource, or a list of such dicts
        indent_level: Starting indentation, two spaces per level

    Returns:
        YAML text. A list renders as a multi-document stream with ``---``
        between consecutive documents and no trailing separator.
    """
    if isinstance(value, (list, tuple)):
        return render_documents(value)
    return _render_mapping(value, indent_level)


def render_documents(resources: Iterable[dict]) -> str:
    """Render each resource and join them into one multi-document stream."""
    return DOCUMENT_SEPARATOR.join(_render_mapping(resource, 0) for resource in resources)
