from __future__ import annotations

import logging
import os
from dataclasses import dataclass

from finance_importer.error_policy import ErrorPolicy


@dataclass(frozen=True)
class Settings:
    error_policy: ErrorPolicy
    errors_preview_limit: int
    log_level: int


def _parse_log_level(value: str) -> int:
    raw = value.strip().upper()
    if raw.isdigit():
        return int(raw)
    level = logging.getLevelName(raw)
    if not isinstance(level, int):
        raise ValueError(f"Invalid FINANCE_IMPORTER_LOG_LEVEL: {value!r}")
    return level


def get_settings() -> Settings:
    # 1) politique d'erreurs (drop par défaut = comportement historique)
    env_policy = os.getenv("FINANCE_IMPORTER_ERROR_POLICY")
    if env_policy and env_policy.strip():
        try:
            policy = ErrorPolicy(env_policy.strip().lower())
        except ValueError:
            raise ValueError(
                f"Invalid FINANCE_IMPORTER_ERROR_POLICY: {env_policy!r} "
                f"(expected one of {[p.value for p in ErrorPolicy]})"
            )
    else:
        policy = ErrorPolicy.DROP

    # 2) nombre d'erreurs renvoyées dans l'aperçu (API / script)
    env_preview = os.getenv("FINANCE_IMPORTER_ERRORS_PREVIEW")
    if env_preview and env_preview.strip():
        try:
            preview = int(env_preview.strip())
        except ValueError:
            raise ValueError(f"Invalid FINANCE_IMPORTER_ERRORS_PREVIEW: {env_preview!r}")
        if preview < 0:
            raise ValueError("FINANCE_IMPORTER_ERRORS_PREVIEW must be >= 0")
    else:
        preview = 20

    # 3) niveau de log (utilisé par le script, la lib ne configure rien)
    env_level = os.getenv("FINANCE_IMPORTER_LOG_LEVEL")
    if env_level and env_level.strip():
        level = _parse_log_level(env_level)
    else:
        level = logging.INFO

    return Settings(error_policy=policy, errors_preview_limit=preview, log_level=level)
