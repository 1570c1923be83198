from __future__ import annotations

from finance_importer.api.schemas.transactions import (
    ImportResponse,
    OperationResponse,
    RecordErrorResponse,
    TransactionResponse,
)
from finance_importer.domain.asset import asset_id_code
from finance_importer.domain.operation import Operation
from finance_importer.domain.transaction import Transaction
from finance_importer.error_policy import ErrorPolicy, RecordError
from finance_importer.services.import_service import ImportReport


def op_to_response(op: Operation) -> OperationResponse:
    return OperationResponse(
        id=str(op.id),
        direction="INFLOW" if op.is_inflow else "OUTFLOW",
        kind=op.kind.kind.value,
        ledger=op.ledger.name,
        asset_id=asset_id_code(op.asset.id),
        asset_name=op.asset.name,
        value=str(op.value),
        executed_at=op.executed_at,
    )


def tx_to_response(tx: Transaction) -> TransactionResponse:
    return TransactionResponse(
        operations=[op_to_response(op) for op in tx.operations],
        ledgers=sorted(ledger.name for ledger in tx.ledgers),  # frozenset -> ordre stable
        started_at=tx.started_at,
        finished_at=tx.finished_at,
    )


def error_to_response(err: RecordError) -> RecordErrorResponse:
    return RecordErrorResponse(line_no=err.line_no, stage=err.stage, message=err.message)


def report_to_response(report: ImportReport, *, policy: ErrorPolicy, preview_limit: int) -> ImportResponse:
    return ImportResponse(
        error_policy=policy,
        records_count=report.records_count,
        operations_count=report.operations_count,
        transactions_count=report.transactions_count,
        dropped_count=report.dropped_count,
        errors_count=len(report.errors),
        errors_preview=[error_to_response(e) for e in report.errors[:preview_limit]],
        transactions=[tx_to_response(tx) for tx in report.transactions],
    )
