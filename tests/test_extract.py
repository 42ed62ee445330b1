import logging

from cadence_matrix.extract import RequirementExtractor, extract_requirements
from cadence_matrix.schema import RequirementKind, SourceDocument, SourceLabel

DOC_A = (
    "GUID: CYS-100\nDetailed requirement text here.\n\n"
    "GUID: CYS-101 (information only)\nInfo body."
)
DOC_B = "GUID: CYS-100\nUpdated text for new cadence."


def _two_cadences():
    return [
        SourceDocument(text=DOC_A, filename="requirements_1.0.0.pdf"),
        SourceDocument(text=DOC_B, filename="requirements_2.0.0.pdf"),
    ]


def _snapshot(result):
    return [(r.identifier, r.kind, dict(r.bodies)) for r in result.requirements]


def test_two_cadence_scenario():
    result = extract_requirements(_two_cadences())

    assert result.labels == [
        SourceLabel("1.0.0", "requirements_1.0.0.pdf"),
        SourceLabel("2.0.0", "requirements_2.0.0.pdf"),
    ]
    assert len(result.requirements) == 2

    req = result.requirements["CYS-100"]
    assert req.kind is RequirementKind.REQUIREMENT
    assert req.bodies == {
        "1.0.0": "Detailed requirement text here.",
        "2.0.0": "Updated text for new cadence.",
    }

    info = result.requirements["CYS-101"]
    assert info.kind is RequirementKind.INFORMATION
    assert info.bodies == {"1.0.0": "Info body.", "2.0.0": ""}
    assert result.summary() == "Processed 2 documents, extracted 2 requirements"


def test_extraction_is_idempotent():
    first = extract_requirements(_two_cadences())
    second = extract_requirements(_two_cadences())

    assert _snapshot(first) == _snapshot(second)


def test_thread_pool_matches_sequential_run():
    docs = _two_cadences() + [
        SourceDocument(text="GUID: CYS-100\nThird cadence text.", filename="requirements_3.0.0.pdf"),
        SourceDocument(text="GUID: CYS-200\nOnly in four.", filename="requirements_4.0.0.pdf"),
    ]

    sequential = extract_requirements(docs)
    threaded = extract_requirements(docs, workers=4)

    assert _snapshot(threaded) == _snapshot(sequential)
    assert [lbl.label for lbl in threaded.labels] == ["1.0.0", "2.0.0", "3.0.0", "4.0.0"]


def test_heading_reference_and_footer_anchors_produce_no_hits():
    text = (
        "1 Introduction - GUID: CYS-X_1\n"
        "GUID: CYS-X_2 (information only)\n"
        "Context for the second item.\n"
        "© 2022 ACME   GUID: CYS-9   Confidential   5 of 86\n"
        "Text after the footer.\n"
    )

    result = extract_requirements([SourceDocument(text=text, filename="cadence_4.txt")])

    assert result.requirements.identifiers() == ["CYS-X_2"]
    assert result.requirements["CYS-X_2"].kind is RequirementKind.INFORMATION
    assert result.requirements["CYS-X_2"].body("4") == "Context for the second item."


def test_document_without_anchors_still_contributes_label():
    docs = [
        SourceDocument(text="Release Cadence: 5\nNothing to see here.", filename="notes.txt"),
        SourceDocument(text="GUID: CYS-1\nThe pump shall start.", filename="cadence_6.txt"),
    ]

    result = extract_requirements(docs)

    assert [lbl.label for lbl in result.labels] == ["5", "6"]
    assert result.requirements["CYS-1"].bodies == {"5": "", "6": "The pump shall start."}


def test_unlabeled_document_gets_position_label():
    docs = [
        SourceDocument(text="GUID: CYS-1\nFirst body.", filename="cadence_1.txt"),
        SourceDocument(text="GUID: CYS-1\nSecond body.", filename="notes.txt"),
    ]

    result = extract_requirements(docs)

    assert result.labels[1] == SourceLabel("2", "notes.txt")
    assert result.requirements["CYS-1"].body("2") == "Second body."


def test_bad_document_is_reported_and_batch_continues():
    docs = [
        SourceDocument(text=b"\xff\xfe", filename="broken.pdf"),
        SourceDocument(text="GUID: CYS-1\nStill extracted.", filename="cadence_2.txt"),
    ]

    result = extract_requirements(docs)

    assert [f.filename for f in result.failures] == ["broken.pdf"]
    assert [lbl.label for lbl in result.labels] == ["2"]
    assert result.requirements["CYS-1"].body("2") == "Still extracted."
    assert result.document_count == 2
    assert result.summary().endswith("(1 failed)")


def test_empty_batch():
    result = extract_requirements([])

    assert result.labels == []
    assert len(result.requirements) == 0
    assert result.failures == []


def test_duplicate_label_aggregates_into_one_column(caplog):
    docs = [
        SourceDocument(text="GUID: CYS-1\nFirst body.", filename="a_v1.txt"),
        SourceDocument(text="GUID: CYS-1\nSecond body.\n\nGUID: CYS-2\nOther body.", filename="b_v1.txt"),
    ]

    with caplog.at_level(logging.WARNING):
        result = extract_requirements(docs)

    assert result.labels == [SourceLabel("1", "a_v1.txt")]
    assert result.requirements["CYS-1"].bodies == {"1": "Second body."}
    assert result.requirements["CYS-2"].bodies == {"1": "Other body."}
    assert "already provided by a_v1.txt" in caplog.text


def test_label_override_and_tuple_input():
    result = RequirementExtractor().extract(
        [
            SourceDocument(text="Release Cadence: 1\nGUID: CYS-1\nBody.", filename="x.txt", label="9.9"),
            ("GUID: CYS-2\nTuple body.", "cadence_3.txt"),
        ]
    )

    assert [lbl.label for lbl in result.labels] == ["9.9", "3"]
    assert result.requirements["CYS-2"].body("3") == "Tuple body."


def test_windows_line_endings_are_normalized():
    text = "GUID: CYS-1\r\nLine one\r\nline two.\r\n"

    result = extract_requirements([SourceDocument(text=text, filename="cadence_1.txt")])

    assert result.requirements["CYS-1"].body("1") == "Line one line two."


def test_identifier_on_line_after_guid_is_not_anchored():
    result = extract_requirements([SourceDocument(text="GUID:\nCYS-7\nThe pump shall start.", filename="cadence_1.txt")])

    assert len(result.requirements) == 0


def test_input_index_drives_position_label():
    docs = [
        SourceDocument(text="GUID: CYS-1\nNotes body.", filename="notes.txt", index=1),
        SourceDocument(text="GUID: CYS-1\nCadence body.", filename="cadence_1.txt", index=2),
    ]

    result = extract_requirements(docs)

    assert [lbl.label for lbl in result.labels] == ["2", "1"]
    assert result.requirements["CYS-1"].bodies == {"2": "Notes body.", "1": "Cadence body."}
