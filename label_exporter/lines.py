"""Line-level classification of exposition payloads."""
import enum
import re
from dataclasses import dataclass
from typing import Optional

METRIC_LINE_RE = re.compile(
    r"^([a-zA-Z_][a-zA-Z0-9_:]*)(\{[^{}]*\})?[ \t]+([^ \t]+)(?:[ \t]+([^ \t]+))?$"
)


class LineKind(enum.Enum):
    BLANK = "blank"
    COMMENT = "comment"
    SAMPLE = "sample"
    MALFORMED = "malformed"


@dataclass
class SampleLine:
    """A single sample line split into its parts."""
    name: str
    labels: Optional[str]  # raw block; None when the line has none
    value: str
    timestamp: Optional[str] = None

    def render(self, label_block: str) -> str:
        """Rebuild the line around a new label block."""
        line = f"{self.name}{label_block} {self.value}"
        if self.timestamp is not None:
            line += f" {self.timestamp}"
        return line


@dataclass
class ClassifiedLine:
    kind: LineKind
    sample: Optional[SampleLine] = None


def parse_sample(line: str) -> Optional[SampleLine]:
    """Parse a sample line, returning None if it is not sample-shaped."""
    match = METRIC_LINE_RE.match(line)
    if not match:
        return None
    name, labels, value, timestamp = match.groups()
    return SampleLine(name=name, labels=labels, value=value, timestamp=timestamp)


def classify(line: str) -> ClassifiedLine:
    if not line:
        return ClassifiedLine(LineKind.BLANK)
    if line.startswith("#"):
        return ClassifiedLine(LineKind.COMMENT)

    sample = parse_sample(line)
    if sample is None:
        return ClassifiedLine(LineKind.MALFORMED)
    return ClassifiedLine(LineKind.SAMPLE, sample)
