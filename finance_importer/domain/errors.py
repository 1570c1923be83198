from __future__ import annotations


class InvalidFormat(ValueError):
    """
    Identifiant qui ne respecte pas son format structurel (ISIN, OperationId).
    """

    def __init__(self, kind: str, value: str) -> None:
        self.kind = kind
        self.value = value
        super().__init__(f"Invalid {kind} format: {value!r}")


class MappingError(ValueError):
    """
    Échec de conversion d'un enregistrement brut en Operation.
    La cause d'origine est gardée dans `cause` (et dans __cause__ via `raise ... from`).
    """

    def __init__(self, record_id: str, cause: Exception) -> None:
        self.record_id = record_id
        self.cause = cause
        super().__init__(f"record {record_id!r}: {cause}")


class MissingOperations(ValueError):
    def __init__(self) -> None:
        super().__init__("Transaction requires at least one operation")


class RecordParseError(ValueError):
    """Ligne du fichier qui ne se désérialise pas selon le schéma attendu."""

    def __init__(self, line_no: int, reason: str) -> None:
        self.line_no = line_no
        self.reason = reason
        super().__init__(f"line {line_no}: {reason}")


class InvalidHeader(ValueError):
    pass
