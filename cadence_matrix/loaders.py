from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Tuple

from docx import Document
from pypdf import PdfReader

from .schema import DocumentFailure, SourceDocument

LOGGER = logging.getLogger(__name__)

SUPPORTED_EXTS = {".txt", ".md", ".pdf", ".docx"}


def load_text(path: Path) -> str:
    return path.read_text(encoding="utf-8", errors="replace")


def load_pdf(path: Path) -> str:
    reader = PdfReader(str(path))
    pages: List[str] = []
    for page in reader.pages:
        pages.append(page.extract_text() or "")
    return "\n".join(pages)


def load_docx(path: Path) -> str:
    doc = Document(str(path))
    lines: List[str] = []
    for para in doc.paragraphs:
        lines.append(para.text)
    # Requirement tables are common in Word exports; keep their cell text in reading order.
    for table in doc.tables:
        for row in table.rows:
            for cell in row.cells:
                lines.append(cell.text)
    return "\n".join(lines)


def load_source_document(path: Path, label: Optional[str] = None, index: Optional[int] = None) -> SourceDocument:
    suffix = path.suffix.lower()
    if suffix in {".txt", ".md"}:
        text = load_text(path)
    elif suffix == ".pdf":
        text = load_pdf(path)
    elif suffix == ".docx":
        text = load_docx(path)
    else:
        raise ValueError(f"Unsupported file type: {suffix}")
    return SourceDocument(text=text, filename=path.name, label=label, index=index)


def find_documents(folder: Path) -> List[Path]:
    return sorted([p for p in folder.rglob("*") if p.is_file() and p.suffix.lower() in SUPPORTED_EXTS])


def load_documents(
    paths: Iterable[Path],
    labels: Optional[Dict[Path, str]] = None,
) -> Tuple[List[SourceDocument], List[DocumentFailure]]:
    """Read every path; unreadable files become failure notices instead of errors."""

    documents: List[SourceDocument] = []
    failures: List[DocumentFailure] = []
    for position, path in enumerate(paths):
        try:
            documents.append(load_source_document(path, label=(labels or {}).get(path), index=position))
        except Exception as exc:
            LOGGER.error(f"Failed to read {path}: {exc}")
            failures.append(DocumentFailure(filename=path.name, error=str(exc) or exc.__class__.__name__))
            continue
        LOGGER.info(f"Loaded {path.name} ({len(documents[-1].text)} chars)")
    return documents, failures
