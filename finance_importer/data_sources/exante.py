"""
Lecture des exports Exante (fichier plat, tabulations, ligne d'en-tête obligatoire).

Colonnes attendues (noms exacts) :
  Transaction ID, Account ID, Symbol ID, ISIN, Operation type, When, Sum, Asset, UUID

Les colonnes supplémentaires sont ignorées.
"""
from __future__ import annotations

import csv
import datetime as dt
from decimal import Decimal
import io
import logging
from pathlib import Path
from typing import Any, Iterator, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from finance_importer.domain.errors import InvalidHeader, RecordParseError
from finance_importer.domain.money import parse_decimal
from finance_importer.error_policy import ErrorPolicy, RecordError

logger = logging.getLogger(__name__)

EXANTE_DELIMITER = "\t"
EXANTE_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

REQUIRED_COLUMNS: tuple[str, ...] = (
    "Transaction ID",
    "Account ID",
    "Symbol ID",
    "ISIN",
    "Operation type",
    "When",
    "Sum",
    "Asset",
    "UUID",
)


class RawRecord(BaseModel):
    """Une ligne d'export, typée mais pas encore validée métier."""

    model_config = ConfigDict(frozen=True)

    tx_id: str = Field(alias="Transaction ID")
    account_id: str = Field(alias="Account ID")
    symbol_id: str = Field(alias="Symbol ID")
    isin: str = Field(alias="ISIN")
    operation_type: str = Field(alias="Operation type")
    when: dt.datetime = Field(alias="When")
    amount: Decimal = Field(alias="Sum")
    asset_name: str = Field(alias="Asset")
    uuid: str = Field(alias="UUID")

    # numéro de ligne dans le fichier source (1 = en-tête), 0 si inconnu
    line_no: int = 0

    @field_validator("when", mode="before")
    @classmethod
    def _parse_when(cls, value: Any) -> Any:
        if isinstance(value, str):
            # horodatage Exante : naïf, interprété en UTC
            parsed = dt.datetime.strptime(value.strip(), EXANTE_DATE_FORMAT)
            return parsed.replace(tzinfo=dt.timezone.utc)
        return value

    @field_validator("when")
    @classmethod
    def _ensure_utc(cls, value: dt.datetime) -> dt.datetime:
        if value.tzinfo is None:
            raise ValueError("When must be timezone-aware")
        return value.astimezone(dt.timezone.utc)

    @field_validator("amount", mode="before")
    @classmethod
    def _parse_amount(cls, value: Any) -> Any:
        if isinstance(value, str):
            return parse_decimal(value)
        return value


def iter_rows(text: str) -> Iterator[tuple[int, dict[str, Optional[str]]]]:
    """
    Itère sur les lignes (numéro de ligne, dict colonne -> valeur).
    Lève InvalidHeader si l'en-tête est absent ou incomplet.
    """
    reader = csv.DictReader(io.StringIO(text), delimiter=EXANTE_DELIMITER)

    if reader.fieldnames is None:
        raise InvalidHeader("Exante export has no header row")

    # le BOM peut subsister si le texte n'a pas été décodé en utf-8-sig
    reader.fieldnames = [name.lstrip("\ufeff").strip() for name in reader.fieldnames]
    missing = [col for col in REQUIRED_COLUMNS if col not in reader.fieldnames]
    if missing:
        raise InvalidHeader("Exante export header mismatch. Missing columns: " + ", ".join(missing))

    for row in reader:
        # sauter lignes vides
        if all((v or "").strip() == "" for k, v in row.items() if k is not None):
            continue
        yield reader.line_num, row


def _summarize(exc: ValidationError) -> str:
    parts = []
    for err in exc.errors():
        loc = ".".join(str(x) for x in err.get("loc", ()))
        parts.append(f"{loc}: {err.get('msg')}")
    return "; ".join(parts)


def parse_row(row: dict[str, Optional[str]], line_no: int) -> RawRecord:
    # csv.DictReader range les cellules en trop sous la clé None
    data: dict[str, Any] = {k: v for k, v in row.items() if k is not None}
    data["line_no"] = line_no
    try:
        return RawRecord.model_validate(data)
    except ValidationError as exc:
        raise RecordParseError(line_no, _summarize(exc)) from exc


def read_raw_records(
    text: str,
    *,
    policy: ErrorPolicy = ErrorPolicy.DROP,
) -> tuple[list[RawRecord], list[RecordError]]:
    """
    Désérialise toutes les lignes de l'export.

    Par défaut (DROP) les lignes invalides sont ignorées : c'est une perte de
    données silencieuse, utiliser COLLECT ou FAIL_FAST pour les voir.
    """
    records: list[RawRecord] = []
    errors: list[RecordError] = []

    for line_no, row in iter_rows(text):
        try:
            records.append(parse_row(row, line_no))
        except RecordParseError as e:
            if policy == ErrorPolicy.FAIL_FAST:
                raise
            if policy == ErrorPolicy.COLLECT:
                errors.append(RecordError(line_no=e.line_no, stage="parse", message=e.reason))
            else:
                logger.debug("Dropping unparsable Exante row: %s", e)

    return records, errors


def decode_export(raw: bytes) -> str:
    """
    utf-8 (BOM Excel toléré) puis cp1252, fallback fréquent sur les exports Windows.
    Lève UnicodeDecodeError si aucun des deux ne convient.
    """
    try:
        return raw.decode("utf-8-sig")
    except UnicodeDecodeError:
        return raw.decode("cp1252")


def load_export_text(path: str | Path) -> str:
    # OSError (absent, répertoire, droits) et UnicodeDecodeError remontent à l'appelant
    return decode_export(Path(path).read_bytes())


def read_csv_file(
    path: str | Path,
    *,
    policy: ErrorPolicy = ErrorPolicy.DROP,
) -> tuple[list[RawRecord], list[RecordError]]:
    return read_raw_records(load_export_text(path), policy=policy)
