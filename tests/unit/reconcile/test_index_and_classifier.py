from __future__ import annotations

from asset_pipeline.parsing.profiles.cyber import CYBER_SPEC
from asset_pipeline.parsing.profiles.software import SOFTWARE_SPEC
from asset_pipeline.parsing.types import DuplicateRow, ValidRecord
from asset_pipeline.reconcile.classifier import classify
from asset_pipeline.reconcile.index import ExistingRecordIndex


def _existing(asset_id: str, name: str, unit: str = "Unit A") -> dict[str, str]:
    return {"asset_id": asset_id, "report_unit": unit, "asset_category": "OS", "asset_name": name}


def _record(name: str, source_row: int = 3, unit: str = "Unit A") -> ValidRecord:
    return ValidRecord(
        record_id=f"new-{source_row}",
        values={"report_unit": unit, "asset_category": "OS", "asset_name": name},
        source_row=source_row,
    )


def test_index_builds_from_bulk_read() -> None:
    index = ExistingRecordIndex.build(SOFTWARE_SPEC, [_existing("1", "Kylin"), _existing("2", "UOS")])
    assert len(index) == 2
    assert index.contains(("Unit A", "OS", "Kylin"))
    assert not index.contains(("Unit A", "OS", "Windows"))


def test_index_later_record_wins_on_key_collision() -> None:
    index = ExistingRecordIndex.build(SOFTWARE_SPEC, [_existing("first", "Kylin"), _existing("second", "Kylin")])
    assert len(index) == 1
    assert index.get(("Unit A", "OS", "Kylin"))["asset_id"] == "second"


def test_classify_duplicate_against_snapshot() -> None:
    index = ExistingRecordIndex.build(SOFTWARE_SPEC, [_existing("1", "Kylin")])
    res = classify(_record("Kylin", source_row=9), spec=SOFTWARE_SPEC, index=index)
    assert isinstance(res, DuplicateRow)
    assert res.source_row == 9
    assert res.matched_key == ("Unit A", "OS", "Kylin")


def test_classify_near_match_is_not_duplicate() -> None:
    """Exact-string keys: trailing whitespace or case differences are new records."""
    index = ExistingRecordIndex.build(SOFTWARE_SPEC, [_existing("1", "Kylin")])
    assert isinstance(classify(_record("Kylin "), spec=SOFTWARE_SPEC, index=index), ValidRecord)
    assert isinstance(classify(_record("kylin"), spec=SOFTWARE_SPEC, index=index), ValidRecord)


def test_classify_does_not_learn_from_classified_rows() -> None:
    """The snapshot is never updated as rows are accepted."""
    index = ExistingRecordIndex.build(SOFTWARE_SPEC, [])
    first = classify(_record("Kylin", source_row=3), spec=SOFTWARE_SPEC, index=index)
    second = classify(_record("Kylin", source_row=4), spec=SOFTWARE_SPEC, index=index)
    assert isinstance(first, ValidRecord) and isinstance(second, ValidRecord)
    assert len(index) == 0


def test_cyber_content_distinguishes_keys() -> None:
    existing = {**_existing("1", "Switch"), "asset_content": "24-port"}
    index = ExistingRecordIndex.build(CYBER_SPEC, [existing])
    record = ValidRecord(
        record_id="n",
        values={"report_unit": "Unit A", "asset_category": "OS", "asset_name": "Switch", "asset_content": "48-port"},
        source_row=3,
    )
    assert isinstance(classify(record, spec=CYBER_SPEC, index=index), ValidRecord)
