from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Ledger:
    """
    Compte / livre nommé (ex: "TKO's trading account").
    Sert de clé de regroupement pour les transactions, ne porte pas de solde.
    Égalité et hash : par nom uniquement.
    """
    name: str

    def __post_init__(self) -> None:
        if not isinstance(self.name, str) or not self.name.strip():
            raise ValueError("ledger.name must be non-empty")

    def __str__(self) -> str:
        return self.name
