from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Literal


class ErrorPolicy(str, Enum):
    """
    Que faire d'une ligne qui ne se désérialise pas / ne se convertit pas en Operation ?

    DROP      : on l'ignore sans la signaler (comportement historique, perte de données silencieuse)
    COLLECT   : on la garde dans le rapport d'import et on continue
    FAIL_FAST : on lève la première erreur
    """
    DROP = "drop"
    COLLECT = "collect"
    FAIL_FAST = "fail_fast"


ErrorStage = Literal["parse", "mapping"]


@dataclass(frozen=True)
class RecordError:
    line_no: int
    stage: ErrorStage
    message: str

    def __str__(self) -> str:
        return f"line {self.line_no} ({self.stage}): {self.message}"
