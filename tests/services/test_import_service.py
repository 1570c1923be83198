import datetime as dt

import pytest

from finance_importer.domain.errors import InvalidHeader, MappingError, RecordParseError
from finance_importer.domain.ledger import Ledger
from finance_importer.error_policy import ErrorPolicy
from finance_importer.mappers.operation_mapper import RecordMapper
from finance_importer.services.import_service import import_transactions, map_records
from finance_importer.data_sources.exante import parse_row

UUIDS = [
    "c9bf9e57-1685-4c89-bafb-ff5af830be8a",
    "1b4e28ba-2fa1-11d2-883f-0016d3cca427",
    "6fa459ea-ee8a-3ca4-894e-db77e160355e",
    "886313e1-3b8a-5372-9b90-0c9aee199e5d",
    "a8098c1a-f86e-11da-bd1a-00112444be1e",
]


def _rows(exante_row):
    # trade de 10:00 (2 jambes) puis frais, puis à nouveau 10:00 (non adjacent)
    return [
        exante_row(Transaction_ID="1", When="2023-01-10 10:00:00", Sum="-1500.00", UUID=UUIDS[0]),
        exante_row(Transaction_ID="2", When="2023-01-10 10:00:00", Sum="10", ISIN="US0004026250", Asset="ACME", UUID=UUIDS[1]),
        exante_row(Transaction_ID="3", When="2023-01-10 10:00:05", Sum="-2.50", Account_ID="ABC1234.002", UUID=UUIDS[2]),
        exante_row(Transaction_ID="4", When="2023-01-10 10:00:00", Sum="5", UUID=UUIDS[3]),
    ]


def test_import_groups_by_adjacent_timestamps(exante_row, exante_export):
    report = import_transactions(exante_export(*_rows(exante_row)), policy=ErrorPolicy.DROP)

    assert report.records_count == 4
    assert report.operations_count == 4
    assert report.transactions_count == 3
    assert [len(tx.operations) for tx in report.transactions] == [2, 1, 1]
    assert report.transactions[0].started_at == dt.datetime(2023, 1, 10, 10, 0, tzinfo=dt.timezone.utc)
    assert report.transactions[1].ledgers == {Ledger("ABC1234.002")}
    assert report.dropped_count == 0


def test_drop_policy_hides_errors_but_counts_them(exante_row, exante_export):
    rows = _rows(exante_row) + [
        exante_row(Transaction_ID="5", When="bad date", UUID=UUIDS[4]),
        exante_row(Transaction_ID="6", When="2023-01-10 10:00:00", ISIN="bad-isin", UUID=UUIDS[4]),
    ]

    report = import_transactions(exante_export(*rows), policy=ErrorPolicy.DROP)

    assert report.errors == []
    assert report.dropped_count == 2
    assert report.operations_count == 4


def test_collect_policy_reports_both_stages(exante_row, exante_export):
    rows = [
        exante_row(Transaction_ID="1", UUID=UUIDS[0]),
        exante_row(Transaction_ID="2", When="bad date"),
        exante_row(Transaction_ID="3", UUID="not-a-uuid"),
    ]

    report = import_transactions(exante_export(*rows), policy=ErrorPolicy.COLLECT)

    assert report.operations_count == 1
    assert [(e.line_no, e.stage) for e in report.errors] == [(3, "parse"), (4, "mapping")]
    assert report.dropped_count == 2


def test_fail_fast_raises_parse_error(exante_row, exante_export):
    text = exante_export(exante_row(When="bad"), exante_row())
    with pytest.raises(RecordParseError):
        import_transactions(text, policy=ErrorPolicy.FAIL_FAST)


def test_fail_fast_raises_mapping_error(exante_row, exante_export):
    text = exante_export(exante_row(ISIN="nope"))
    with pytest.raises(MappingError):
        import_transactions(text, policy=ErrorPolicy.FAIL_FAST)


def test_header_mismatch_is_raised_whatever_the_policy():
    with pytest.raises(InvalidHeader):
        import_transactions("a\tb\n1\t2\n", policy=ErrorPolicy.DROP)


def test_default_policy_comes_from_settings(monkeypatch, exante_row, exante_export):
    monkeypatch.setenv("FINANCE_IMPORTER_ERROR_POLICY", "fail_fast")
    with pytest.raises(RecordParseError):
        import_transactions(exante_export(exante_row(When="bad")))


def test_map_records_keeps_order(exante_row):
    records = [parse_row(exante_row(Transaction_ID=str(i), UUID=u), line_no=i + 2) for i, u in enumerate(UUIDS)]
    ops, errors = map_records(records, mapper=RecordMapper())
    assert [op.id.value for op in ops] == UUIDS
    assert errors == []


def test_fail_fast_raises_first_failure_in_file_order(exante_row, exante_export):
    text = exante_export(
        exante_row(Transaction_ID="1", ISIN="bad"),
        exante_row(Transaction_ID="2", When="bad"),
    )
    with pytest.raises(MappingError) as exc:
        import_transactions(text, policy=ErrorPolicy.FAIL_FAST)
    assert exc.value.record_id == "1"


def test_text_with_leading_bom_is_accepted(exante_row, exante_export):
    report = import_transactions("\ufeff" + exante_export(exante_row()), policy=ErrorPolicy.FAIL_FAST)
    assert report.transactions_count == 1
