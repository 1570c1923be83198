# finance_importer/engine/grouping.py
from __future__ import annotations

from itertools import groupby
import logging
from operator import attrgetter
from typing import Callable, Hashable, Iterable, Iterator, TypeVar

from finance_importer.domain.errors import MissingOperations
from finance_importer.domain.operation import Operation
from finance_importer.domain.transaction import Transaction, TransactionBuilder

logger = logging.getLogger(__name__)

T = TypeVar("T")


def group_runs(items: Iterable[T], key: Callable[[T], Hashable]) -> Iterator[list[T]]:
    """
    Regroupement par "runs" : chaque groupe est une suite maximale d'éléments
    ADJACENTS de même clé. Ce n'est pas une partition par valeur :
    [a, a, b, a] -> [a, a], [b], [a]
    """
    for _, run in groupby(items, key=key):
        yield list(run)


def group_by_execution_time(operations: Iterable[Operation]) -> Iterator[list[Operation]]:
    # précondition : operations triées par executed_at croissant (non vérifié ici)
    return group_runs(operations, key=attrgetter("executed_at"))


def build_transactions(operations: Iterable[Operation]) -> list[Transaction]:
    """
    Un TransactionBuilder par groupe, opérations ajoutées dans l'ordre.
    Un groupe qui ne se construit pas est ignoré (sans interrompre le reste).
    """
    out: list[Transaction] = []
    for group in group_by_execution_time(operations):
        builder = TransactionBuilder()
        for op in group:
            builder.add_operation(op)

        try:
            out.append(builder.build())
        except MissingOperations:
            logger.debug("Dropping empty operation group")
            continue

    return out
