"""
Template variable rewriting between the Insomnia and collection dialects.

Insomnia references nested data as ``{{ _.foo.bar[0] }}``; collection
variables are flat, underscore-joined names (``{{foo_bar_0}}``), matching the
way environment data is flattened on import.
"""
import re

_VARIABLE_PATTERN = re.compile(r"\{\{.*?\}\}")
_REMOVE_PATTERN = re.compile(r"_\.|[\s\]]+")
_UNDERSCORE_PATTERN = re.compile(r"[.\[]")


def _rewrite_reference(match: re.Match) -> str:
    reference = _REMOVE_PATTERN.sub("", match.group(0))
    return _UNDERSCORE_PATTERN.sub("_", reference)


def normalize_variables(value: str | None) -> str:
    """Rewrite every ``{{ ... }}`` reference in ``value``; other text is kept."""
    if not value:
        return ""
    return _VARIABLE_PATTERN.sub(_rewrite_reference, value)
