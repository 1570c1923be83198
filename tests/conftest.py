from __future__ import annotations

from typing import Callable

import pytest

EXANTE_HEADER = [
    "Transaction ID",
    "Account ID",
    "Symbol ID",
    "ISIN",
    "Operation type",
    "When",
    "Sum",
    "Asset",
    "UUID",
]

_DEFAULT_ROW = {
    "Transaction ID": "1",
    "Account ID": "ABC1234.001",
    "Symbol ID": "USD",
    "ISIN": "None",
    "Operation type": "FUNDING/WITHDRAWAL",
    "When": "2023-01-10 10:00:00",
    "Sum": "10000.00",
    "Asset": "USD",
    "UUID": "c9bf9e57-1685-4c89-bafb-ff5af830be8a",
}


@pytest.fixture
def exante_row() -> Callable[..., dict[str, str]]:
    """Fabrique une ligne d'export Exante ; les clés sont les noms de colonnes."""

    def _make(**overrides: str) -> dict[str, str]:
        row = dict(_DEFAULT_ROW)
        for key, value in overrides.items():
            row[key.replace("_", " ")] = value
        return row

    return _make


@pytest.fixture
def exante_export() -> Callable[..., str]:
    """Construit le texte d'un export (tabulations) à partir de lignes."""

    def _make(*rows: dict[str, str], header: list[str] | None = None) -> str:
        cols = header or EXANTE_HEADER
        lines = ["\t".join(cols)]
        for row in rows:
            lines.append("\t".join(row.get(c, "") for c in cols))
        return "\n".join(lines) + "\n"

    return _make
