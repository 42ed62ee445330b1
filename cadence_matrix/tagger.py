from __future__ import annotations

import re
from pathlib import PurePath
from typing import List, Optional

from .config import DEFAULT_RULES, ExtractionRules
from .schema import SourceLabel


class SourceTagger:
    """Derive a cadence label from document content, then from the filename."""

    def __init__(self, rules: ExtractionRules = DEFAULT_RULES) -> None:
        self.content_patterns = self._compile(rules.content_label_patterns)
        self.filename_patterns = self._compile(rules.filename_label_patterns)

    def _compile(self, patterns) -> List[re.Pattern[str]]:
        return [re.compile(p) for p in patterns]

    def _first_match(self, patterns: List[re.Pattern[str]], text: str) -> Optional[str]:
        if not text:
            return None
        for regex in patterns:
            match = regex.search(text)
            if match:
                value = match.group(1) if regex.groups else match.group(0)
                return value.strip()
        return None

    def label_for(self, text: str, filename: str) -> Optional[str]:
        label = self._first_match(self.content_patterns, text)
        if label:
            return label
        return self._first_match(self.filename_patterns, PurePath(filename or "").name)

    def tag(self, text: str, filename: str) -> Optional[SourceLabel]:
        label = self.label_for(text, filename)
        if label is None:
            return None
        return SourceLabel(label=label, filename=filename)
