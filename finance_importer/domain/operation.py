from __future__ import annotations

from dataclasses import dataclass
import datetime as dt
from decimal import Decimal
from enum import Enum
from typing import Union
from uuid import UUID

from finance_importer.domain.asset import Asset
from finance_importer.domain.errors import InvalidFormat
from finance_importer.domain.ledger import Ledger


@dataclass(frozen=True, slots=True)
class OperationId:
    """
    Identifiant d'opération : doit être un UUID (toute version / variante).
    On garde la chaîne d'origine telle quelle.
    """
    value: str

    @classmethod
    def parse(cls, value: str) -> "OperationId":
        return cls(value=value)

    def __post_init__(self) -> None:
        if not isinstance(self.value, str):
            raise InvalidFormat("OperationId", repr(self.value))
        try:
            UUID(self.value)
        except ValueError as exc:
            raise InvalidFormat("OperationId", self.value) from exc

    @property
    def uuid(self) -> UUID:
        return UUID(self.value)

    def __str__(self) -> str:
        return self.value


class InflowOperation(str, Enum):
    DEPOSIT = "DEPOSIT"
    INCOME = "INCOME"
    DIVIDEND = "DIVIDEND"
    REWARD = "REWARD"


class OutflowOperation(str, Enum):
    WITHDRAWAL = "WITHDRAWAL"
    COST = "COST"
    INTEREST = "INTEREST"
    DONATION = "DONATION"


# ---------- OperationKind : Inflow(...) | Outflow(...) ----------

@dataclass(frozen=True, slots=True)
class Inflow:
    kind: InflowOperation

    def __post_init__(self) -> None:
        if not isinstance(self.kind, InflowOperation):
            raise ValueError("Inflow.kind must be an InflowOperation")

    def __str__(self) -> str:
        return f"INFLOW:{self.kind.value}"


@dataclass(frozen=True, slots=True)
class Outflow:
    kind: OutflowOperation

    def __post_init__(self) -> None:
        if not isinstance(self.kind, OutflowOperation):
            raise ValueError("Outflow.kind must be an OutflowOperation")

    def __str__(self) -> str:
        return f"OUTFLOW:{self.kind.value}"


OperationKind = Union[Inflow, Outflow]


@dataclass(frozen=True, slots=True)
class Operation:
    id: OperationId
    kind: OperationKind
    ledger: Ledger
    asset: Asset
    value: Decimal  # magnitude >= 0, le sens est porté par `kind`
    executed_at: dt.datetime  # UTC

    def __post_init__(self) -> None:
        if not isinstance(self.id, OperationId):
            raise ValueError("operation.id must be an OperationId")
        if not isinstance(self.kind, (Inflow, Outflow)):
            raise ValueError("operation.kind must be Inflow or Outflow")
        if not isinstance(self.ledger, Ledger):
            raise ValueError("operation.ledger must be a Ledger")
        if not isinstance(self.asset, Asset):
            raise ValueError("operation.asset must be an Asset")

        if not isinstance(self.value, Decimal):
            raise TypeError("operation.value must be a Decimal")
        if not self.value.is_finite() or self.value < 0:
            raise ValueError("operation.value must be a finite, non-negative Decimal")

        if not isinstance(self.executed_at, dt.datetime):
            raise ValueError("operation.executed_at must be a datetime")
        if self.executed_at.tzinfo is None:
            raise ValueError("operation.executed_at must be timezone-aware (UTC)")
        object.__setattr__(self, "executed_at", self.executed_at.astimezone(dt.timezone.utc))

    @property
    def is_inflow(self) -> bool:
        return isinstance(self.kind, Inflow)
