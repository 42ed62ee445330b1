from __future__ import annotations

import logging
from typing import Dict, Iterable, Iterator, List, Optional, Sequence

from .schema import RawRequirementHit, Requirement, SourceLabel

LOGGER = logging.getLogger(__name__)


class RequirementSet:
    """Merged requirements keyed by identifier, in first-sighting order."""

    def __init__(self, labels: Sequence[str] = ()) -> None:
        self.labels: List[str] = list(dict.fromkeys(labels))
        self._items: Dict[str, Requirement] = {}

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[Requirement]:
        return iter(self._items.values())

    def __contains__(self, identifier: object) -> bool:
        return identifier in self._items

    def __getitem__(self, identifier: str) -> Requirement:
        return self._items[identifier]

    def get(self, identifier: str) -> Optional[Requirement]:
        return self._items.get(identifier)

    def identifiers(self) -> List[str]:
        return list(self._items)

    def add_hit(self, hit: RawRequirementHit) -> Requirement:
        if hit.label not in self.labels:
            raise ValueError(f"Hit for {hit.identifier} carries unknown label '{hit.label}'")
        req = self._items.get(hit.identifier)
        if req is None:
            req = Requirement(
                identifier=hit.identifier,
                kind=hit.kind,
                bodies={label: "" for label in self.labels},
            )
            self._items[hit.identifier] = req
        req.bodies[hit.label] = hit.body
        return req

    def set_service(self, identifier: str, value: Optional[str]) -> Requirement:
        """Set the reviewer's service annotation; no other field is touched."""

        req = self._items.get(identifier)
        if req is None:
            raise KeyError(f"Unknown requirement identifier: {identifier}")
        req.service = value
        return req

    def filter(self, term: str = "", label: Optional[str] = None) -> List[Requirement]:
        """Case-insensitive search over identifier, kind and service."""

        needle = (term or "").strip().lower()
        result: List[Requirement] = []
        for req in self._items.values():
            if needle:
                haystack = (req.identifier, req.kind.value, req.service or "")
                if not any(needle in field.lower() for field in haystack):
                    continue
            if label is not None and not req.body(label):
                continue
            result.append(req)
        return result


def merge_hits(labels: Iterable[SourceLabel | str], hits: Iterable[RawRequirementHit]) -> RequirementSet:
    """
    Fold per-document hits into one RequirementSet.

    Hits are ordered by (document index, offset) first, so a duplicate anchor
    inside one document resolves last-write-wins for its label no matter in
    which order the documents finished extracting. Later sightings only fill
    their own label; kind stays as first seen.
    """

    names = [lbl.label if isinstance(lbl, SourceLabel) else str(lbl) for lbl in labels]
    merged = RequirementSet(names)
    ordered = sorted(hits, key=lambda h: h.sort_key)
    for hit in ordered:
        existing = merged.get(hit.identifier)
        if existing is not None and existing.kind is not hit.kind:
            LOGGER.debug(
                "%s seen as %s under '%s'; keeping %s",
                hit.identifier,
                hit.kind.value,
                hit.label,
                existing.kind.value,
            )
        merged.add_hit(hit)
    LOGGER.info(f"Merged {len(ordered)} hits into {len(merged)} requirements across {len(merged.labels)} cadences")
    return merged
