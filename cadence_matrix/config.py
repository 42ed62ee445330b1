from __future__ import annotations

import os
import re
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Any, Dict, Tuple

import yaml
from dotenv import load_dotenv

load_dotenv()


def _parse_int(value: str | None, default: int) -> int:
    try:
        return int(value) if value is not None else default
    except ValueError:
        return default


# Patterns carry their own inline flags so a YAML override can choose case
# sensitivity per entry. Heading phrases are matched against the whole body.
DEFAULT_ANCHOR_PATTERN = r"(?i)GUID:[^\S\n]*(CYS-[A-Za-z0-9_-]+)"

DEFAULT_INFO_MARKER_PATTERNS = (
    r"(?i)\(\s*information[\s-]+only\s*\)",
    r"(?i)\(\s*info[\s-]+only\s*\)",
    r"(?i)\binformation-only\b",
)

DEFAULT_FOOTER_PATTERNS = (
    r"©",
    r"(?i)\(c\)\s*\d{4}",
    r"(?i)\bcopyright\b",
    r"\b(?:Confidential|CONFIDENTIAL)\b",
    r"\b(?:Proprietary|PROPRIETARY)\b",
    r"(?i)\ball rights reserved\b",
)

DEFAULT_PAGE_NUMBER_PATTERN = r"(?i)(?:\bpage\s+)?\b\d+\s+of\s+\d+\b"

DEFAULT_FILE_EXTENSIONS = ("pdf", "docx", "doc", "xlsx", "xls", "txt", "md")

# Leading integer(s), optionally dotted, then a capitalized word.
DEFAULT_SECTION_HEADING_PATTERN = r"^\s*\d+(?:\.\d+)*\.?\s+[A-Z][A-Za-z]*"

DEFAULT_HEADING_PHRASE_PATTERNS = (
    r"(?i)(?:\d+(?:\.\d+)*\.?\s+)?(?:introduction|scope|overview|purpose|background|"
    r"requirements?|definitions|references|glossary|table of contents|"
    r"appendix(?:\s+[a-z0-9]+)?)[:.]?",
    r"[A-Z][\w&/-]*(?:\s+(?:and|of|the|for|[A-Z][\w&/-]*)){0,3}",
)

DEFAULT_CONTENT_LABEL_PATTERNS = (
    r"(?i)release\s+cadence[:\s]+(\d+(?:\.\d+)*)",
    r"(?i)\bcadence[:\s]+(\d+(?:\.\d+)*)",
    r"(?i)\bversion[:\s]+(\d+(?:\.\d+)*)",
)

DEFAULT_FILENAME_LABEL_PATTERNS = (
    r"(\d+(?:\.\d+)+)",
    r"(?i)cadence[_\s-]*(\d+)",
    r"(\d+)",
)


@dataclass(frozen=True)
class ExtractionRules:
    """Tunable policy for anchor detection, boilerplate rejection and labeling."""

    anchor_pattern: str = DEFAULT_ANCHOR_PATTERN
    info_marker_patterns: Tuple[str, ...] = DEFAULT_INFO_MARKER_PATTERNS
    footer_patterns: Tuple[str, ...] = DEFAULT_FOOTER_PATTERNS
    page_number_pattern: str = DEFAULT_PAGE_NUMBER_PATTERN
    file_extensions: Tuple[str, ...] = DEFAULT_FILE_EXTENSIONS
    section_heading_pattern: str = DEFAULT_SECTION_HEADING_PATTERN
    heading_phrase_patterns: Tuple[str, ...] = DEFAULT_HEADING_PHRASE_PATTERNS
    min_body_length: int = 1
    content_label_patterns: Tuple[str, ...] = DEFAULT_CONTENT_LABEL_PATTERNS
    filename_label_patterns: Tuple[str, ...] = DEFAULT_FILENAME_LABEL_PATTERNS

    @staticmethod
    def from_dict(data: Dict[str, Any], base: "ExtractionRules | None" = None) -> "ExtractionRules":
        base = base or ExtractionRules()
        known = {f.name: f for f in fields(ExtractionRules)}
        updates: Dict[str, Any] = {}
        for key, value in data.items():
            if key not in known:
                raise ValueError(f"Unknown extraction rule: {key}")
            current = getattr(base, key)
            if isinstance(current, tuple):
                if isinstance(value, str):
                    value = [value]
                updates[key] = tuple(str(v) for v in value or ())
            elif isinstance(current, int):
                updates[key] = int(value)
            else:
                updates[key] = str(value)
        rules = replace(base, **updates)
        rules.validate()
        return rules

    def validate(self) -> None:
        patterns = [
            self.anchor_pattern,
            self.page_number_pattern,
            self.section_heading_pattern,
            *self.info_marker_patterns,
            *self.footer_patterns,
            *self.heading_phrase_patterns,
            *self.content_label_patterns,
            *self.filename_label_patterns,
        ]
        for pattern in patterns:
            try:
                re.compile(pattern)
            except re.error as exc:
                raise ValueError(f"Invalid regex in extraction rules: {pattern!r}") from exc
        if re.compile(self.anchor_pattern).groups < 1:
            raise ValueError("anchor_pattern must capture the identifier in group 1.")
        if self.min_body_length < 0:
            raise ValueError("min_body_length must not be negative.")


DEFAULT_RULES = ExtractionRules()


def load_extraction_rules(path: Path | None = None) -> ExtractionRules:
    """Load rule overrides from YAML; a missing file means the built-in defaults."""

    if path is None or not path.exists():
        return DEFAULT_RULES
    try:
        with path.open("r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as exc:
        raise ValueError(f"Failed to parse extraction rules at {path}") from exc
    if not isinstance(data, dict):
        raise ValueError(f"Extraction rules at {path} must be a mapping.")
    return ExtractionRules.from_dict(data)


@dataclass
class Settings:
    rules_path: Path = field(default_factory=lambda: Path("config/extraction_rules.yaml"))
    workers: int = 1


def load_settings() -> Settings:
    return Settings(
        rules_path=Path(os.getenv("CADENCE_RULES_PATH", "config/extraction_rules.yaml")),
        workers=max(1, _parse_int(os.getenv("CADENCE_WORKERS"), 1)),
    )
