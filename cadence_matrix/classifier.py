"""
Boundary classification for anchor lines.

Identifiers show up as real requirement anchors and also as incidental
references inside headings, running headers/footers and table rows. The
classifier holds an ordered list of (reason, predicate) pairs; the first
predicate that fires names the reason the anchor is rejected. An anchor that
trips none of them is accepted.

Rules, in evaluation order:
    footer             copyright / confidentiality boilerplate
    page-number        "<n> of <n>" page counters
    file-extension     line ends with a document file name (running header)
    section-heading    "3.2 Capitalized ..." numbered headings
    heading-reference  next non-blank line is itself an anchor
"""

from __future__ import annotations

import logging
import re
from typing import Callable, List, Optional, Sequence, Tuple

from .config import DEFAULT_RULES, ExtractionRules
from .scanner import compile_anchor, line_has_anchor

LOGGER = logging.getLogger(__name__)

LinePredicate = Callable[[str], bool]
ContextPredicate = Callable[[Sequence[str], int], bool]

FOOTER = "footer"
PAGE_NUMBER = "page-number"
FILE_EXTENSION = "file-extension"
SECTION_HEADING = "section-heading"
HEADING_REFERENCE = "heading-reference"


def next_nonblank_index(lines: Sequence[str], index: int) -> Optional[int]:
    for idx in range(index + 1, len(lines)):
        if lines[idx].strip():
            return idx
    return None


class BoundaryClassifier:
    def __init__(self, rules: ExtractionRules = DEFAULT_RULES) -> None:
        self.anchor = compile_anchor(rules)
        self.footer_patterns = [re.compile(p) for p in rules.footer_patterns]
        self.page_number = re.compile(rules.page_number_pattern)
        exts = "|".join(re.escape(ext.lstrip(".")) for ext in rules.file_extensions)
        self.file_extension = re.compile(rf"(?i)\.(?:{exts})\s*$") if exts else None
        self.section_heading = re.compile(rules.section_heading_pattern)

        self.line_rules: List[Tuple[str, LinePredicate]] = [
            (FOOTER, self.is_footer),
            (PAGE_NUMBER, self.is_page_number),
            (FILE_EXTENSION, self.ends_with_file_extension),
            (SECTION_HEADING, self.is_section_heading),
        ]
        self.context_rules: List[Tuple[str, ContextPredicate]] = [
            (HEADING_REFERENCE, self.is_heading_reference),
        ]

    # Line-level rules, shared with the body collector.

    def is_footer(self, line: str) -> bool:
        return any(p.search(line) for p in self.footer_patterns)

    def is_page_number(self, line: str) -> bool:
        return self.page_number.search(line) is not None

    def ends_with_file_extension(self, line: str) -> bool:
        if self.file_extension is None:
            return False
        return self.file_extension.search(line) is not None

    def is_section_heading(self, line: str) -> bool:
        return self.section_heading.match(line) is not None

    def is_heading_reference(self, lines: Sequence[str], index: int) -> bool:
        nxt = next_nonblank_index(lines, index)
        if nxt is None:
            return False
        return line_has_anchor(lines[nxt], self.anchor)

    def boilerplate_reason(self, line: str) -> Optional[str]:
        for reason, predicate in self.line_rules:
            if predicate(line):
                return reason
        return None

    def reject_reason(self, lines: Sequence[str], index: int) -> Optional[str]:
        """Return the first matching rejection reason, or None to accept."""

        reason = self.boilerplate_reason(lines[index])
        if reason is None:
            for name, predicate in self.context_rules:
                if predicate(lines, index):
                    reason = name
                    break
        if reason:
            LOGGER.debug("Rejected anchor line %d (%s): %r", index + 1, reason, lines[index].strip())
        return reason

    def accepts(self, lines: Sequence[str], index: int) -> bool:
        return self.reject_reason(lines, index) is None
