from __future__ import annotations

import datetime as dt
from typing import Literal

from pydantic import BaseModel, Field

from finance_importer.error_policy import ErrorPolicy


class OperationResponse(BaseModel):
    id: str
    direction: Literal["INFLOW", "OUTFLOW"]
    kind: str
    ledger: str
    asset_id: str = Field(..., examples=["SECURITY:US0004026250", "CURRENCY:USD"])
    asset_name: str
    value: str = Field(..., description="Magnitude (>= 0) as string, e.g. '49.99'")
    executed_at: dt.datetime


class TransactionResponse(BaseModel):
    operations: list[OperationResponse]
    ledgers: list[str]
    started_at: dt.datetime
    finished_at: dt.datetime


class RecordErrorResponse(BaseModel):
    line_no: int
    stage: Literal["parse", "mapping"]
    message: str


class ImportResponse(BaseModel):
    error_policy: ErrorPolicy
    records_count: int
    operations_count: int
    transactions_count: int
    dropped_count: int
    errors_count: int
    errors_preview: list[RecordErrorResponse]
    transactions: list[TransactionResponse]
