from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Union

from finance_importer.domain.errors import InvalidFormat
from finance_importer.domain.money import FiatCurrency

# ISO 6166 "naïf" : 2 lettres pays + 10 alphanumériques, sans contrôle du check digit.
# Compilé une seule fois à l'import : une regex invalide casse l'import, pas un appel.
_ISIN_RE = re.compile(r"[A-Z]{2}[0-9A-Z]{10}")


@dataclass(frozen=True, slots=True)
class ISIN:
    """
    International Securities Identification Number.

    La valeur stockée est la chaîne d'origine (tirets compris) :
    la normalisation sert uniquement à la validation.

    >>> ISIN.parse("NA-000K0VF05-4").value
    'NA-000K0VF05-4'
    """
    value: str

    @classmethod
    def parse(cls, value: str) -> "ISIN":
        return cls(value=value)

    def __post_init__(self) -> None:
        if not isinstance(self.value, str):
            raise InvalidFormat("ISIN", repr(self.value))
        if _ISIN_RE.fullmatch(self.value.replace("-", "")) is None:
            raise InvalidFormat("ISIN", self.value)

    @property
    def normalized(self) -> str:
        return self.value.replace("-", "")

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True, slots=True)
class TokenId:
    # adresse de contrat, identifiant de chaîne... aucun format imposé
    value: str

    def __str__(self) -> str:
        return self.value


# ---------- AssetId : union fermée de 3 variantes ----------

@dataclass(frozen=True, slots=True)
class Security:
    isin: ISIN

    def __post_init__(self) -> None:
        if not isinstance(self.isin, ISIN):
            raise ValueError("Security.isin must be an ISIN")


@dataclass(frozen=True, slots=True)
class Token:
    token_id: TokenId

    def __post_init__(self) -> None:
        if not isinstance(self.token_id, TokenId):
            raise ValueError("Token.token_id must be a TokenId")


@dataclass(frozen=True, slots=True)
class Currency:
    currency: FiatCurrency

    def __post_init__(self) -> None:
        if not isinstance(self.currency, FiatCurrency):
            raise ValueError("Currency.currency must be a FiatCurrency")


AssetId = Union[Security, Token, Currency]

ASSET_ID_VARIANTS: tuple[type, ...] = (Security, Token, Currency)


def asset_id_code(asset_id: AssetId) -> str:
    """
    Représentation texte stable d'un AssetId, ex: "SECURITY:US0004026250".
    """
    if isinstance(asset_id, Security):
        return f"SECURITY:{asset_id.isin}"
    if isinstance(asset_id, Token):
        return f"TOKEN:{asset_id.token_id}"
    if isinstance(asset_id, Currency):
        return f"CURRENCY:{asset_id.currency}"
    raise TypeError(f"Unknown AssetId variant: {type(asset_id).__name__}")


@dataclass(frozen=True, slots=True)
class Asset:
    id: AssetId
    # nom libre tel qu'exporté par le broker (peut être vide)
    name: str

    def __post_init__(self) -> None:
        if not isinstance(self.id, ASSET_ID_VARIANTS):
            raise ValueError("Invalid asset id")
        if not isinstance(self.name, str):
            raise ValueError("Asset name must be a string")
