from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Optional


class RequirementKind(str, Enum):
    """Classification flag carried from the anchor line into the merged record."""

    REQUIREMENT = "Requirement"
    INFORMATION = "Information"


@dataclass(frozen=True)
class SourceDocument:
    """
    Plain text of one input document plus the name it was loaded from.

    `label` pins the cadence explicitly (run config override) and skips the
    content/filename heuristics. `index` is the position in the caller's input
    list, kept when unreadable inputs are dropped before extraction.
    """

    text: str
    filename: str
    label: Optional[str] = None
    index: Optional[int] = None


@dataclass(frozen=True)
class SourceLabel:
    label: str
    filename: str


@dataclass(frozen=True)
class RawRequirementHit:
    identifier: str
    kind: RequirementKind
    body: str
    label: str
    doc_index: int = 0
    offset: int = 0

    @property
    def sort_key(self):
        return (self.doc_index, self.offset)


@dataclass
class Requirement:
    """
    One merged requirement row.

    `bodies` always holds one entry per known cadence label (empty string when
    the requirement was not found in that document). `service` is reviewer
    territory: extraction initializes it to None and never writes it again.
    """

    identifier: str
    kind: RequirementKind
    bodies: Dict[str, str] = field(default_factory=dict)
    service: Optional[str] = None

    def body(self, label: str) -> str:
        return self.bodies.get(label, "")


@dataclass(frozen=True)
class DocumentFailure:
    filename: str
    error: str
