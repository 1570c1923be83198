from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

from finance_importer.data_sources.exante import RawRecord
from finance_importer.domain.asset import ISIN, Asset, AssetId, Currency, Security
from finance_importer.domain.errors import MappingError
from finance_importer.domain.ledger import Ledger
from finance_importer.domain.money import FiatCurrency, magnitude
from finance_importer.domain.operation import (
    Inflow,
    InflowOperation,
    Operation,
    OperationId,
    OperationKind,
    Outflow,
    OutflowOperation,
)

KindClassifier = Callable[[RawRecord], OperationKind]
AssetIdResolver = Callable[[RawRecord], AssetId]

# valeur littérale exportée par Exante quand la ligne n'a pas d'ISIN (cash)
NO_ISIN_SENTINEL = "None"


def classify_kind_by_sign(record: RawRecord) -> OperationKind:
    """
    Classification provisoire : uniquement sur le signe du montant.
    TODO: utiliser `operation_type` (TRADE, COMMISSION, DIVIDEND...) pour le vrai type.
    """
    if record.amount > 0:
        return Inflow(InflowOperation.DEPOSIT)
    return Outflow(OutflowOperation.WITHDRAWAL)


def resolve_asset_id_by_isin(record: RawRecord) -> AssetId:
    """
    ISIN renseigné -> Security (validé), sinon devise.
    La devise n'est pas déduite de l'export : USD par défaut.
    """
    if record.isin != NO_ISIN_SENTINEL:
        return Security(ISIN.parse(record.isin))
    return Currency(FiatCurrency.USD)


@dataclass(frozen=True)
class RecordMapper:
    """
    RawRecord -> Operation.
    La politique de classification (kind / asset id) est injectable ;
    la validation des identifiants reste ici.
    """
    classify_kind: KindClassifier = classify_kind_by_sign
    resolve_asset_id: AssetIdResolver = resolve_asset_id_by_isin

    def map(self, record: RawRecord) -> Operation:
        try:
            kind = self.classify_kind(record)
            asset_id = self.resolve_asset_id(record)
            return Operation(
                id=OperationId.parse(record.uuid),
                kind=kind,
                ledger=Ledger(record.account_id),
                asset=Asset(id=asset_id, name=record.asset_name),
                value=magnitude(record.amount),
                executed_at=record.when,
            )
        except ValueError as e:
            raise MappingError(record.tx_id, e) from e
