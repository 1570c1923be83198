from __future__ import annotations

from functools import lru_cache

from finance_importer.mappers.operation_mapper import RecordMapper
from finance_importer.settings import Settings, get_settings


@lru_cache
def get_app_settings() -> Settings:
    return get_settings()


@lru_cache
def get_record_mapper() -> RecordMapper:
    # politique de classification par défaut (signe du montant / ISIN ou USD)
    return RecordMapper()
