"""Label injection engine.

Rewrites every sample line of an exposition payload so that it carries the
override labels, leaving comments, blank lines and anything unparseable
exactly as they were.
"""
import logging
from dataclasses import dataclass
from typing import List, Mapping, Optional

from label_exporter.errors import LabelParseError
from label_exporter.labels import decode_labels, encode_labels, merge_labels
from label_exporter.lines import LineKind, classify

logger = logging.getLogger(__name__)

# Round-trips arbitrary bytes through str
PAYLOAD_ENCODING = "utf-8"
PAYLOAD_ERRORS = "surrogateescape"


@dataclass
class InjectionResult:
    payload: bytes
    unprocessed: int


def rewrite_line(line: str, overrides: Mapping[str, str]) -> Optional[str]:
    """
    Rewrite one payload line with the given overrides.

    Returns the line unchanged for blanks and comments, the relabeled line
    for samples, and None when the line cannot be processed.
    """
    classified = classify(line)
    if classified.kind in (LineKind.BLANK, LineKind.COMMENT):
        return line
    if classified.kind is LineKind.MALFORMED:
        return None

    sample = classified.sample
    try:
        existing = decode_labels(sample.labels or "")
    except LabelParseError as e:
        logger.debug(f"Unprocessable labels on {sample.name}: {e}")
        return None

    return sample.render(encode_labels(merge_labels(existing, overrides)))


def inject(payload: bytes, overrides: Mapping[str, str], metrics=None) -> InjectionResult:
    """
    Inject override labels into every sample line of a payload.

    Args:
        payload: Raw exposition-format payload
        overrides: Labels applied to every sample, winning over existing ones
        metrics: Optional ProxyMetrics receiving the unprocessed line count

    Returns:
        Rewritten payload and the number of lines that could not be processed
    """
    text = payload.decode(PAYLOAD_ENCODING, PAYLOAD_ERRORS)
    output: List[str] = []
    unprocessed = 0

    for line in text.split("\n"):
        rewritten = rewrite_line(line, overrides)
        if rewritten is None:
            unprocessed += 1
            output.append(line)
        else:
            output.append(rewritten)

    if unprocessed:
        logger.debug(f"{unprocessed} line(s) passed through unprocessed")
        if metrics is not None:
            metrics.record_unprocessed(unprocessed)

    return InjectionResult(
        payload="\n".join(output).encode(PAYLOAD_ENCODING, PAYLOAD_ERRORS),
        unprocessed=unprocessed
    )
