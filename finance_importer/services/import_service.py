# finance_importer/services/import_service.py
from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import Iterable, Optional

from finance_importer.data_sources.exante import RawRecord, iter_rows, parse_row
from finance_importer.domain.errors import MappingError, RecordParseError
from finance_importer.domain.operation import Operation
from finance_importer.domain.transaction import Transaction
from finance_importer.engine.grouping import build_transactions
from finance_importer.error_policy import ErrorPolicy, RecordError
from finance_importer.mappers.operation_mapper import RecordMapper
from finance_importer.settings import get_settings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ImportReport:
    records_count: int  # lignes désérialisées
    operations_count: int  # lignes converties en Operation
    transactions: list[Transaction]
    errors: list[RecordError]  # détail des lignes rejetées, vide sauf en COLLECT
    dropped_count: int  # lignes rejetées (parse + mapping), y compris en DROP

    @property
    def transactions_count(self) -> int:
        return len(self.transactions)


def map_records(
    records: Iterable[RawRecord],
    *,
    mapper: RecordMapper,
    policy: ErrorPolicy = ErrorPolicy.DROP,
) -> tuple[list[Operation], list[RecordError]]:
    operations: list[Operation] = []
    errors: list[RecordError] = []

    for record in records:
        try:
            operations.append(mapper.map(record))
        except MappingError as e:
            if policy == ErrorPolicy.FAIL_FAST:
                raise
            if policy == ErrorPolicy.COLLECT:
                errors.append(RecordError(line_no=record.line_no, stage="mapping", message=str(e)))
            else:
                logger.debug("Dropping unmappable record line %s: %s", record.line_no, e)

    return operations, errors


def import_transactions(
    text: str,
    *,
    mapper: Optional[RecordMapper] = None,
    policy: Optional[ErrorPolicy] = None,
) -> ImportReport:
    """
    Pipeline complet : lecture -> Operation -> groupes (même horodatage adjacent) -> Transaction.

    Chaque ligne est désérialisée puis convertie avant de passer à la suivante :
    en FAIL_FAST l'erreur levée est la première dans l'ordre du fichier,
    quelle que soit l'étape (parse ou mapping).

    Les lignes de l'export sont supposées triées par date d'exécution ;
    l'ordre n'est jamais modifié ici.
    """
    if policy is None:
        policy = get_settings().error_policy
    if mapper is None:
        mapper = RecordMapper()

    records_count = 0
    operations: list[Operation] = []
    # DROP : on collecte quand même pour compter les pertes, puis on jette le détail
    errors: list[RecordError] = []

    for line_no, row in iter_rows(text):
        try:
            record = parse_row(row, line_no)
        except RecordParseError as e:
            if policy == ErrorPolicy.FAIL_FAST:
                raise
            errors.append(RecordError(line_no=e.line_no, stage="parse", message=e.reason))
            continue

        records_count += 1
        try:
            operations.append(mapper.map(record))
        except MappingError as e:
            if policy == ErrorPolicy.FAIL_FAST:
                raise
            errors.append(RecordError(line_no=record.line_no, stage="mapping", message=str(e)))

    transactions = build_transactions(operations)

    if policy == ErrorPolicy.DROP:
        for err in errors:
            logger.debug("Dropped %s", err)
        reported: list[RecordError] = []
    else:
        reported = errors

    logger.info(
        "Import done: %s records, %s operations, %s transactions, %s dropped (policy=%s)",
        records_count,
        len(operations),
        len(transactions),
        len(errors),
        policy.value,
    )

    return ImportReport(
        records_count=records_count,
        operations_count=len(operations),
        transactions=transactions,
        errors=reported,
        dropped_count=len(errors),
    )
