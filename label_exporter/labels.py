"""Label block codec.

Decodes the ``{name="value",...}`` part of an exposition line into a
dictionary and renders a dictionary back into canonical form: names in
ascending order, values escaped, no block at all for an empty set.
"""
import re
from typing import Dict, Mapping

from label_exporter.errors import LabelParseError

LabelMap = Dict[str, str]

# One name="value" entry; the value may hold escaped quotes, commas and '='.
LABEL_RE = re.compile(r'\s*([^"=,{}\s]+)\s*=\s*"((?:[^"\\]|\\.)*)"\s*(?:,|$)')

_ESCAPE_RE = re.compile(r'\\(.)')
_UNESCAPES = {"\\": "\\", '"': '"', "n": "\n"}


def _unescape(value: str) -> str:
    # Unknown escapes keep their backslash
    return _ESCAPE_RE.sub(lambda m: _UNESCAPES.get(m.group(1), m.group(0)), value)


def _escape(value: str) -> str:
    return value.replace("\\", "\\\\").replace('"', '\\"').replace("\n", "\\n")


def decode_labels(block: str) -> LabelMap:
    """
    Decode a label block into a mapping.

    Args:
        block: Label block including braces, e.g. ``{foo="bar"}``. An empty
            string or ``{}`` yields an empty mapping.

    Returns:
        Mapping of label names to unescaped values

    Raises:
        LabelParseError: If the block is not a sequence of name="value" entries
    """
    if not block:
        return {}
    if not (block.startswith("{") and block.endswith("}")):
        raise LabelParseError(f"Label block must be wrapped in braces: {block!r}")

    inner = block[1:-1]
    labels: LabelMap = {}
    pos = 0
    while pos < len(inner):
        if not inner[pos:].strip():
            break
        match = LABEL_RE.match(inner, pos)
        if not match:
            raise LabelParseError(f"Unable to parse labels at offset {pos}: {block!r}")
        labels[match.group(1)] = _unescape(match.group(2))
        pos = match.end()

    return labels


def encode_labels(labels: Mapping[str, str]) -> str:
    """Render labels as a canonical block, or "" when there are none."""
    if not labels:
        return ""
    pairs = [f'{name}="{_escape(labels[name])}"' for name in sorted(labels)]
    return "{" + ",".join(pairs) + "}"


def merge_labels(existing: Mapping[str, str], overrides: Mapping[str, str]) -> LabelMap:
    """Return a new mapping of existing labels updated by overrides."""
    merged = dict(existing)
    merged.update(overrides)
    return merged
