from __future__ import annotations

import re
from typing import Iterator, Tuple

from .config import DEFAULT_RULES, ExtractionRules


class AnchorScan:
    """
    Re-iterable view over the anchor matches in a text buffer.

    Each iteration re-runs the pattern, so the sequence can be consumed more
    than once without materializing it.
    """

    def __init__(self, text: str, pattern: re.Pattern[str]) -> None:
        self.text = text or ""
        self.pattern = pattern

    def __iter__(self) -> Iterator[Tuple[str, int]]:
        for match in self.pattern.finditer(self.text):
            yield match.group(1), match.start()


def compile_anchor(rules: ExtractionRules = DEFAULT_RULES) -> re.Pattern[str]:
    return re.compile(rules.anchor_pattern)


def scan_identifiers(text: str, rules: ExtractionRules = DEFAULT_RULES) -> AnchorScan:
    """Yield (identifier, char_offset) for every anchor in `text`."""

    return AnchorScan(text, compile_anchor(rules))


def line_has_anchor(line: str, anchor: re.Pattern[str]) -> bool:
    return anchor.search(line) is not None
