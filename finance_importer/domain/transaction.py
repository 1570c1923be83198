from __future__ import annotations

from dataclasses import dataclass, field
import datetime as dt
from typing import Optional

from finance_importer.domain.errors import MissingOperations
from finance_importer.domain.ledger import Ledger
from finance_importer.domain.operation import Operation


@dataclass(frozen=True)
class Transaction:
    """
    Groupe atomique d'opérations (même exécution), immuable.
    Invariants vérifiés à la construction :
    - au moins une opération
    - ledgers == ensemble des ledgers des opérations
    - started_at / finished_at == min / max des executed_at
    """
    operations: tuple[Operation, ...]
    ledgers: frozenset[Ledger]
    started_at: dt.datetime
    finished_at: dt.datetime

    def __post_init__(self) -> None:
        if not isinstance(self.operations, tuple):
            raise TypeError("transaction.operations must be a tuple")
        if not self.operations:
            raise MissingOperations()
        for op in self.operations:
            if not isinstance(op, Operation):
                raise ValueError("transaction.operations must contain Operation items")

        if self.started_at > self.finished_at:
            raise ValueError("transaction.started_at must be <= finished_at")

        if self.ledgers != frozenset(op.ledger for op in self.operations):
            raise ValueError("transaction.ledgers must match the operations' ledgers")

        times = [op.executed_at for op in self.operations]
        if self.started_at != min(times) or self.finished_at != max(times):
            raise ValueError("transaction time span must match the operations")

    @classmethod
    def from_operations(cls, operations: list[Operation]) -> "Transaction":
        builder = TransactionBuilder()
        for op in operations:
            builder.add_operation(op)
        return builder.build()


@dataclass
class TransactionBuilder:
    """
    Accumulateur mutable -> Transaction immuable.

    Deux états : en accumulation (initial) puis finalisé après un build() réussi.
    Ajouter une opération après finalisation est une erreur de programmation.
    """
    _operations: list[Operation] = field(default_factory=list, init=False)
    _ledgers: set[Ledger] = field(default_factory=set, init=False)
    _started_at: Optional[dt.datetime] = field(default=None, init=False)
    _finished_at: Optional[dt.datetime] = field(default=None, init=False)
    _finalized: bool = field(default=False, init=False)

    @property
    def is_finalized(self) -> bool:
        return self._finalized

    def add_operation(self, operation: Operation) -> "TransactionBuilder":
        if self._finalized:
            raise RuntimeError("Cannot add an operation to a finalized TransactionBuilder")
        if not isinstance(operation, Operation):
            raise ValueError("operation must be an Operation")

        executed_at = operation.executed_at

        self._ledgers.add(operation.ledger)

        if self._started_at is None or executed_at < self._started_at:
            self._started_at = executed_at
        if self._finished_at is None or executed_at > self._finished_at:
            self._finished_at = executed_at

        self._operations.append(operation)
        return self

    def build(self) -> Transaction:
        if not self._operations or self._started_at is None or self._finished_at is None:
            raise MissingOperations()

        tx = Transaction(
            operations=tuple(self._operations),
            ledgers=frozenset(self._ledgers),
            started_at=self._started_at,
            finished_at=self._finished_at,
        )
        self._finalized = True
        return tx
