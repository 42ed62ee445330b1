"""
Batch extraction: tag each document, pull requirement hits out of its text,
and merge everything into one RequirementSet.

Per-document work shares no state, so documents can run on a thread pool.
Results are keyed by input position and the merger orders hits by
(document index, offset), which keeps the outcome independent of completion
order. A document that fails to extract is logged and reported as a
DocumentFailure; the rest of the batch carries on.
"""

from __future__ import annotations

import logging
from bisect import bisect_right
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple

from .classifier import BoundaryClassifier
from .collector import BodyCollector
from .config import DEFAULT_RULES, ExtractionRules
from .merge import RequirementSet, merge_hits
from .scanner import AnchorScan
from .schema import DocumentFailure, RawRequirementHit, RequirementKind, SourceDocument, SourceLabel
from .tagger import SourceTagger

LOGGER = logging.getLogger(__name__)


@dataclass
class DocumentExtraction:
    """Outcome for one document before labels are reconciled across the batch."""

    index: int
    filename: str
    position: int = 0
    label: Optional[str] = None
    hits: List[Tuple[str, RequirementKind, str, int]] = field(default_factory=list)
    error: Optional[str] = None


@dataclass
class ExtractionResult:
    labels: List[SourceLabel]
    requirements: RequirementSet
    failures: List[DocumentFailure] = field(default_factory=list)
    document_count: int = 0

    def summary(self) -> str:
        text = f"Processed {self.document_count} documents, extracted {len(self.requirements)} requirements"
        if self.failures:
            text += f" ({len(self.failures)} failed)"
        return text


def _line_starts(text: str) -> Tuple[List[str], List[int]]:
    lines = text.split("\n")
    starts: List[int] = []
    cursor = 0
    for line in lines:
        starts.append(cursor)
        cursor += len(line) + 1
    return lines, starts


class RequirementExtractor:
    def __init__(self, rules: ExtractionRules = DEFAULT_RULES) -> None:
        self.rules = rules
        self.tagger = SourceTagger(rules)
        self.classifier = BoundaryClassifier(rules)
        self.collector = BodyCollector(rules, classifier=self.classifier)

    def extract_hits(self, text: str) -> List[Tuple[str, RequirementKind, str, int]]:
        """Return (identifier, kind, body, offset) for every accepted anchor in `text`."""

        text = (text or "").replace("\r\n", "\n").replace("\r", "\n")
        lines, starts = _line_starts(text)
        hits: List[Tuple[str, RequirementKind, str, int]] = []
        verdicts: Dict[int, Optional[str]] = {}
        for identifier, offset in AnchorScan(text, self.classifier.anchor):
            index = bisect_right(starts, offset) - 1
            if index not in verdicts:
                verdicts[index] = self.classifier.reject_reason(lines, index)
            if verdicts[index]:
                continue
            body = self.collector.body_for(lines, index)
            if body is None:
                continue
            kind = self.collector.classify_kind(lines[index])
            hits.append((identifier, kind, body, offset))
        return hits

    def extract_document(self, document: SourceDocument, index: int) -> DocumentExtraction:
        position = document.index if document.index is not None else index
        result = DocumentExtraction(index=index, filename=document.filename, position=position)
        try:
            result.label = document.label or self.tagger.label_for(document.text, document.filename)
            result.hits = self.extract_hits(document.text)
        except Exception as exc:
            LOGGER.exception(f"Extraction failed for {document.filename}: {exc}")
            result.error = str(exc) or exc.__class__.__name__
            result.hits = []
            result.label = None
        return result

    def extract(
        self,
        documents: Sequence[SourceDocument],
        workers: int = 1,
        failures: Sequence[DocumentFailure] = (),
    ) -> ExtractionResult:
        """
        Extract and merge a batch of documents.

        `failures` carries documents the loading layer could not read; they
        are reported alongside extraction failures and counted as processed.
        """

        documents = [d if isinstance(d, SourceDocument) else SourceDocument(*d) for d in documents]
        if workers > 1 and len(documents) > 1:
            with ThreadPoolExecutor(max_workers=workers) as ex:
                outcomes = list(ex.map(self.extract_document, documents, range(len(documents))))
        else:
            outcomes = [self.extract_document(doc, idx) for idx, doc in enumerate(documents)]

        labels: List[SourceLabel] = []
        seen: Dict[str, SourceLabel] = {}
        hits: List[RawRequirementHit] = []
        all_failures = list(failures)

        for outcome in sorted(outcomes, key=lambda o: o.index):
            if outcome.error is not None:
                all_failures.append(DocumentFailure(filename=outcome.filename, error=outcome.error))
                continue
            label = outcome.label
            if label is None:
                label = str(outcome.position + 1)
                LOGGER.info(f"No cadence found for {outcome.filename}; using position label '{label}'")
            if label in seen:
                LOGGER.warning(
                    f"Cadence '{label}' from {outcome.filename} already provided by "
                    f"{seen[label].filename}; merging into the same column"
                )
            else:
                seen[label] = SourceLabel(label=label, filename=outcome.filename)
                labels.append(seen[label])
            LOGGER.info(f"Extracted {len(outcome.hits)} requirements from {outcome.filename} (cadence {label})")
            for identifier, kind, body, offset in outcome.hits:
                hits.append(
                    RawRequirementHit(
                        identifier=identifier,
                        kind=kind,
                        body=body,
                        label=label,
                        doc_index=outcome.index,
                        offset=offset,
                    )
                )

        requirements = merge_hits(labels, hits)
        result = ExtractionResult(
            labels=labels,
            requirements=requirements,
            failures=all_failures,
            document_count=len(documents) + len(failures),
        )
        LOGGER.info(result.summary())
        return result


def extract_requirements(
    documents: Sequence[SourceDocument],
    rules: ExtractionRules = DEFAULT_RULES,
    workers: int = 1,
) -> ExtractionResult:
    return RequirementExtractor(rules).extract(documents, workers=workers)
