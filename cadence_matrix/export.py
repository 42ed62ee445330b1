from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path
from typing import Iterable, List, Optional, Sequence, Tuple

import pandas as pd

from .schema import Requirement, SourceLabel

LOGGER = logging.getLogger(__name__)

ID_HEADER = "Identifier"
DESCRIPTION_HEADER = "Description"
SERVICE_HEADER = "Service"
CADENCE_HEADER_PREFIX = "Cadence "
SHEET_NAME = "Requirements"

ID_COL_WIDTH = 20
DESCRIPTION_COL_WIDTH = 30
CADENCE_COL_WIDTH = 25
SERVICE_COL_WIDTH = 20


def _label_names(labels: Iterable[SourceLabel | str]) -> List[str]:
    names = [lbl.label if isinstance(lbl, SourceLabel) else str(lbl) for lbl in labels]
    return list(dict.fromkeys(names))


def resolve_selected_labels(
    labels: Iterable[SourceLabel | str],
    selected: Optional[Iterable[str]] = None,
) -> List[str]:
    """Selected labels in cadence order; None selects every cadence."""

    known = _label_names(labels)
    if selected is None:
        return known
    wanted = [str(s).strip() for s in selected]
    unknown = [s for s in wanted if s not in known]
    if unknown:
        LOGGER.warning(f"Ignoring unknown cadences in export selection: {', '.join(unknown)}")
    return [label for label in known if label in wanted]


def build_export_rows(
    requirements: Iterable[Requirement],
    labels: Iterable[SourceLabel | str],
    selected_labels: Optional[Iterable[str]] = None,
    include_service: bool = True,
) -> Tuple[List[str], List[List[str]]]:
    """Project merged requirements into (header, rows)."""

    columns = resolve_selected_labels(labels, selected_labels)
    header = [ID_HEADER, DESCRIPTION_HEADER]
    header.extend(f"{CADENCE_HEADER_PREFIX}{label}" for label in columns)
    if include_service:
        header.append(SERVICE_HEADER)

    rows: List[List[str]] = []
    for req in requirements:
        row = [req.identifier, req.kind.value]
        row.extend(req.body(label) for label in columns)
        if include_service:
            row.append(req.service or "")
        rows.append(row)
    return header, rows


def export_dataframe(
    requirements: Iterable[Requirement],
    labels: Iterable[SourceLabel | str],
    selected_labels: Optional[Iterable[str]] = None,
    include_service: bool = True,
) -> pd.DataFrame:
    header, rows = build_export_rows(requirements, labels, selected_labels, include_service)
    return pd.DataFrame(rows, columns=header)


def default_export_name(now: Optional[datetime] = None, suffix: str = ".xlsx") -> str:
    stamp = (now or datetime.now()).strftime("%Y-%m-%dT%H-%M-%S")
    return f"Requirements_Export_{stamp}{suffix}"


def _column_widths(df: pd.DataFrame) -> List[int]:
    widths: List[int] = []
    for col in df.columns:
        if col == ID_HEADER:
            widths.append(ID_COL_WIDTH)
        elif col == DESCRIPTION_HEADER:
            widths.append(DESCRIPTION_COL_WIDTH)
        elif col == SERVICE_HEADER:
            widths.append(SERVICE_COL_WIDTH)
        else:
            widths.append(CADENCE_COL_WIDTH)
    return widths


def write_excel(df: pd.DataFrame, output_path: Path) -> Path:
    output_path.parent.mkdir(parents=True, exist_ok=True)
    with pd.ExcelWriter(output_path, engine="xlsxwriter") as writer:
        df.to_excel(writer, sheet_name=SHEET_NAME, index=False)
        workbook = writer.book
        worksheet = writer.sheets[SHEET_NAME]
        fmt_wrap = workbook.add_format({"text_wrap": True, "valign": "top"})
        for idx, width in enumerate(_column_widths(df)):
            worksheet.set_column(idx, idx, width, fmt_wrap)
        worksheet.freeze_panes(1, 0)
    LOGGER.info(f"Wrote Excel to {output_path}")
    return output_path


def write_csv(df: pd.DataFrame, output_path: Path) -> Path:
    output_path.parent.mkdir(parents=True, exist_ok=True)
    df.to_csv(output_path, index=False)
    LOGGER.info(f"Wrote CSV to {output_path}")
    return output_path


def export_requirements(
    requirements: Iterable[Requirement],
    labels: Sequence[SourceLabel | str],
    output_path: Path,
    selected_labels: Optional[Iterable[str]] = None,
    include_service: bool = True,
) -> Path:
    """Write the export table; the suffix of `output_path` picks CSV or Excel."""

    df = export_dataframe(requirements, labels, selected_labels, include_service)
    if output_path.suffix.lower() == ".csv":
        return write_csv(df, output_path)
    return write_excel(df, output_path)
