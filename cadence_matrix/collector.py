from __future__ import annotations

import logging
import re
from typing import List, Optional, Sequence

from .classifier import BoundaryClassifier
from .config import DEFAULT_RULES, ExtractionRules
from .scanner import line_has_anchor
from .schema import RequirementKind

LOGGER = logging.getLogger(__name__)


class BodyCollector:
    """Gather the prose following an accepted anchor into one body string."""

    def __init__(
        self,
        rules: ExtractionRules = DEFAULT_RULES,
        classifier: Optional[BoundaryClassifier] = None,
    ) -> None:
        self.classifier = classifier or BoundaryClassifier(rules)
        self.anchor = self.classifier.anchor
        self.info_markers = [re.compile(p) for p in rules.info_marker_patterns]
        self.heading_phrases = [re.compile(p) for p in rules.heading_phrase_patterns]
        self.min_body_length = rules.min_body_length

    def collect(self, lines: Sequence[str], index: int) -> str:
        idx = index + 1
        while idx < len(lines) and not lines[idx].strip():
            idx += 1

        parts: List[str] = []
        for line in lines[idx:]:
            if line_has_anchor(line, self.anchor):
                break
            if self.classifier.boilerplate_reason(line):
                break
            stripped = line.strip()
            if stripped:
                parts.append(stripped)
        return " ".join(parts).strip()

    def is_heading_only(self, body: str) -> bool:
        return any(p.fullmatch(body) for p in self.heading_phrases)

    def keep(self, body: str) -> bool:
        if not body or len(body) < self.min_body_length:
            return False
        return not self.is_heading_only(body)

    def classify_kind(self, anchor_line: str) -> RequirementKind:
        if any(p.search(anchor_line) for p in self.info_markers):
            return RequirementKind.INFORMATION
        return RequirementKind.REQUIREMENT

    def body_for(self, lines: Sequence[str], index: int) -> Optional[str]:
        """Collected body, or None when it is empty or reads as a bare heading."""

        body = self.collect(lines, index)
        if not self.keep(body):
            LOGGER.debug("Discarded body after line %d: %r", index + 1, body)
            return None
        return body
