from cadence_matrix.collector import BodyCollector
from cadence_matrix.config import ExtractionRules
from cadence_matrix.schema import RequirementKind, SourceLabel
from cadence_matrix.tagger import SourceTagger


def test_collect_skips_leading_blanks_and_joins_lines():
    collector = BodyCollector()
    lines = ["GUID: CYS-1", "", "  First line.", "second line", "", "third."]

    assert collector.collect(lines, 0) == "First line. second line third."


def test_collect_stops_at_next_anchor():
    collector = BodyCollector()
    lines = ["GUID: CYS-1", "Body one.", "GUID: CYS-2", "Body two."]

    assert collector.collect(lines, 0) == "Body one."
    assert collector.collect(lines, 2) == "Body two."


def test_collect_stops_at_boilerplate():
    collector = BodyCollector()

    assert collector.collect(["GUID: CYS-1", "Body one.", "© 2023 ACME", "More"], 0) == "Body one."
    assert collector.collect(["GUID: CYS-1", "Body one.", "12 of 40", "More"], 0) == "Body one."
    assert collector.collect(["GUID: CYS-1", "Body one.", "2 Scope", "More"], 0) == "Body one."


def test_heading_only_and_empty_bodies_are_discarded():
    collector = BodyCollector()

    assert collector.body_for(["GUID: CYS-1", "Introduction"], 0) is None
    assert collector.body_for(["GUID: CYS-1", "System Overview"], 0) is None
    assert collector.body_for(["GUID: CYS-1", "", ""], 0) is None
    assert collector.body_for(["GUID: CYS-1", "The valve shall close."], 0) == "The valve shall close."


def test_heading_policy_is_tunable():
    strict = BodyCollector(ExtractionRules(min_body_length=20))
    lenient = BodyCollector(ExtractionRules(heading_phrase_patterns=()))

    assert strict.body_for(["GUID: CYS-1", "Short body."], 0) is None
    assert lenient.body_for(["GUID: CYS-1", "Introduction"], 0) == "Introduction"


def test_information_marker_read_from_anchor_line_only():
    collector = BodyCollector()

    assert collector.classify_kind("GUID: CYS-2 (Information Only)") is RequirementKind.INFORMATION
    assert collector.classify_kind("GUID: CYS-2 (info only)") is RequirementKind.INFORMATION
    assert collector.classify_kind("GUID: CYS-2") is RequirementKind.REQUIREMENT


def test_tagger_prefers_content_labels():
    tagger = SourceTagger()

    assert tagger.label_for("Release Cadence: 3\nGUID: CYS-1", "doc_9.pdf") == "3"
    assert tagger.label_for("Release Cadence: 1.2.0", "doc.pdf") == "1.2.0"
    assert tagger.label_for("Document Version 4.1", "cadence_7.pdf") == "4.1"


def test_tagger_filename_fallbacks_in_order():
    tagger = SourceTagger()

    assert tagger.label_for("", "Spec_2.0.1_final.pdf") == "2.0.1"
    assert tagger.label_for("", "Requirements-Cadence_12.pdf") == "12"
    assert tagger.label_for("", "reqs_v3.pdf") == "3"
    assert tagger.label_for("", "requirements.pdf") is None


def test_tag_returns_source_label_or_none():
    tagger = SourceTagger()

    assert tagger.tag("Cadence: 5", "a.txt") == SourceLabel(label="5", filename="a.txt")
    assert tagger.tag("no label", "notes.txt") is None
