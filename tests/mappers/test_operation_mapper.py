from decimal import Decimal

import pytest

from finance_importer.data_sources.exante import RawRecord, parse_row
from finance_importer.domain.asset import ISIN, Currency, Security, Token, TokenId
from finance_importer.domain.errors import InvalidFormat, MappingError
from finance_importer.domain.ledger import Ledger
from finance_importer.domain.money import FiatCurrency
from finance_importer.domain.operation import (
    Inflow,
    InflowOperation,
    Outflow,
    OutflowOperation,
)
from finance_importer.mappers.operation_mapper import (
    RecordMapper,
    classify_kind_by_sign,
    resolve_asset_id_by_isin,
)


@pytest.fixture
def record(exante_row):
    def _make(**overrides: str) -> RawRecord:
        return parse_row(exante_row(**overrides), line_no=2)

    return _make


def test_positive_sum_is_a_deposit(record):
    op = RecordMapper().map(record(Sum="10000.00"))

    assert op.kind == Inflow(InflowOperation.DEPOSIT)
    assert op.value == Decimal("10000.00")


def test_negative_sum_is_a_withdrawal_with_positive_value(record):
    op = RecordMapper().map(record(Sum="-49.99"))

    assert op.kind == Outflow(OutflowOperation.WITHDRAWAL)
    assert op.value == Decimal("49.99")


def test_zero_sum_is_classified_as_outflow(record):
    assert classify_kind_by_sign(record(Sum="0")) == Outflow(OutflowOperation.WITHDRAWAL)


def test_none_isin_defaults_to_usd(record):
    op = RecordMapper().map(record(ISIN="None"))
    assert op.asset.id == Currency(FiatCurrency.USD)
    assert op.asset.name == "USD"


def test_isin_is_validated_and_kept_as_is(record):
    op = RecordMapper().map(record(ISIN="US-000402625-0", Asset="Some Corp"))
    assert op.asset.id == Security(ISIN("US-000402625-0"))
    assert op.asset.name == "Some Corp"


def test_invalid_isin_fails_mapping(record):
    with pytest.raises(MappingError) as exc:
        RecordMapper().map(record(Transaction_ID="42", ISIN="A-000K0VF05"))

    assert exc.value.record_id == "42"
    assert isinstance(exc.value.cause, InvalidFormat)
    assert exc.value.cause.kind == "ISIN"
    assert isinstance(exc.value.__cause__, InvalidFormat)


def test_invalid_uuid_fails_mapping(record):
    with pytest.raises(MappingError) as exc:
        RecordMapper().map(record(UUID="not-a-uuid"))
    assert exc.value.cause.kind == "OperationId"


def test_isin_failure_reported_before_uuid_failure(record):
    with pytest.raises(MappingError) as exc:
        RecordMapper().map(record(ISIN="bad", UUID="bad"))
    assert exc.value.cause.kind == "ISIN"


def test_empty_account_fails_mapping(record):
    with pytest.raises(MappingError):
        RecordMapper().map(record(Account_ID=""))


def test_ledger_timestamp_and_id_are_carried_over(record):
    rec = record(Account_ID="XYZ9999.002", UUID="1b4e28ba-2fa1-11d2-883f-0016d3cca427")
    op = RecordMapper().map(rec)

    assert op.ledger == Ledger("XYZ9999.002")
    assert op.executed_at == rec.when
    assert op.id.value == "1b4e28ba-2fa1-11d2-883f-0016d3cca427"


def test_classification_policy_is_injectable(record):
    def by_operation_type(rec: RawRecord):
        if rec.operation_type == "DIVIDEND":
            return Inflow(InflowOperation.DIVIDEND)
        return classify_kind_by_sign(rec)

    def always_token(rec: RawRecord):
        return Token(TokenId(rec.symbol_id))

    mapper = RecordMapper(classify_kind=by_operation_type, resolve_asset_id=always_token)
    op = mapper.map(record(Operation_type="DIVIDEND", Symbol_ID="0xabc", Sum="3.10"))

    assert op.kind == Inflow(InflowOperation.DIVIDEND)
    assert op.asset.id == Token(TokenId("0xabc"))


def test_default_resolver_propagates_invalid_format(record):
    with pytest.raises(InvalidFormat):
        resolve_asset_id_by_isin(record(ISIN="xx"))
