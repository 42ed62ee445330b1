"""
Requirement extraction and cross-cadence merge helpers shared by the CLI and
the export layer.
"""

from .schema import (  # noqa: F401
    DocumentFailure,
    RawRequirementHit,
    Requirement,
    RequirementKind,
    SourceDocument,
    SourceLabel,
)

from .config import (  # noqa: F401
    DEFAULT_RULES,
    ExtractionRules,
    Settings,
    load_extraction_rules,
    load_settings,
)

from .scanner import scan_identifiers  # noqa: F401
from .classifier import BoundaryClassifier  # noqa: F401
from .collector import BodyCollector  # noqa: F401
from .tagger import SourceTagger  # noqa: F401
from .merge import RequirementSet, merge_hits  # noqa: F401
from .extract import ExtractionResult, RequirementExtractor, extract_requirements  # noqa: F401
from .export import build_export_rows, export_dataframe, export_requirements  # noqa: F401

__all__ = [
    "DocumentFailure",
    "RawRequirementHit",
    "Requirement",
    "RequirementKind",
    "SourceDocument",
    "SourceLabel",
    "DEFAULT_RULES",
    "ExtractionRules",
    "Settings",
    "load_extraction_rules",
    "load_settings",
    "scan_identifiers",
    "BoundaryClassifier",
    "BodyCollector",
    "SourceTagger",
    "RequirementSet",
    "merge_hits",
    "ExtractionResult",
    "RequirementExtractor",
    "extract_requirements",
    "build_export_rows",
    "export_dataframe",
    "export_requirements",
]
