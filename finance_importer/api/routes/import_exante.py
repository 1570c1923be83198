from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, File, HTTPException, Query, UploadFile

from finance_importer.api.deps import get_app_settings, get_record_mapper
from finance_importer.api.mappers.transaction_mapper import report_to_response
from finance_importer.api.schemas.transactions import ImportResponse
from finance_importer.data_sources.exante import decode_export
from finance_importer.domain.errors import InvalidHeader, MappingError, RecordParseError
from finance_importer.error_policy import ErrorPolicy
from finance_importer.services.import_service import import_transactions

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/imports", tags=["import"])

_ALLOWED_SUFFIXES = (".csv", ".tsv", ".txt")


def decode_upload(raw: bytes) -> str:
    try:
        return decode_export(raw)
    except UnicodeDecodeError:
        raise HTTPException(
            status_code=422,
            detail=f"Decode error (utf-8/cp1252). First bytes: {raw[:20]!r}",
        )


@router.post("/exante", response_model=ImportResponse)
async def import_exante(
    file: UploadFile = File(...),
    error_policy: Optional[ErrorPolicy] = Query(default=None),
) -> ImportResponse:
    """
    Import d'un export Exante (tabulations) -> transactions groupées.

    error_policy (optionnel) surcharge la politique configurée :
    - drop : lignes invalides ignorées (défaut)
    - collect : lignes invalides renvoyées dans errors_preview
    - fail_fast : 422 à la première ligne invalide
    """
    settings = get_app_settings()
    policy = error_policy or settings.error_policy

    filename = (file.filename or "").lower()
    if not filename.endswith(_ALLOWED_SUFFIXES):
        raise HTTPException(status_code=422, detail="Invalid file type (expected .csv/.tsv/.txt)")

    try:
        raw = await file.read()
    except OSError as e:
        raise HTTPException(status_code=422, detail=f"Cannot read upload: {type(e).__name__}: {e}")

    text = decode_upload(raw)
    if not text.strip():
        raise HTTPException(status_code=422, detail="Empty file")

    try:
        report = import_transactions(text, mapper=get_record_mapper(), policy=policy)
    except InvalidHeader as e:
        raise HTTPException(status_code=422, detail=str(e))
    except (RecordParseError, MappingError) as e:
        # uniquement en fail_fast
        logger.warning("Exante import aborted: %s", e)
        raise HTTPException(status_code=422, detail=str(e))

    return report_to_response(report, policy=policy, preview_limit=settings.errors_preview_limit)
