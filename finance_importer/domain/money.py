from __future__ import annotations

from decimal import Decimal, InvalidOperation
from enum import Enum


class FiatCurrency(str, Enum):
    USD = "USD"
    EUR = "EUR"

    def __str__(self) -> str:
        return self.value


def parse_decimal(value: str) -> Decimal:
    """
    Parse robuste depuis string.
    Autorise "12.34", "-12.34", "12", et optionnellement "12,34".
    Pas d'arrondi : les montants broker gardent leur précision d'origine.
    """
    if not isinstance(value, str):
        raise TypeError("Amount must be provided as a string")

    raw = value.strip()
    if raw == "":
        raise ValueError("Amount cannot be empty")

    # tolérance minimale pour les virgules décimales
    raw = raw.replace(",", ".")

    try:
        dec = Decimal(raw)
    except InvalidOperation as exc:
        raise ValueError(f"Invalid decimal amount: {value!r}") from exc

    # Decimal("NaN") / Decimal("Infinity") passent le constructeur
    if not dec.is_finite():
        raise ValueError(f"Invalid decimal amount: {value!r}")
    return dec


def magnitude(amount: Decimal) -> Decimal:
    """Valeur absolue d'un montant signé (le sens est porté par OperationKind)."""
    if not isinstance(amount, Decimal):
        raise TypeError("amount must be a Decimal")
    return abs(amount)
