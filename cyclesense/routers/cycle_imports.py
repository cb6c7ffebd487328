"""Cycle-tracker CSV import endpoint.

Endpoints:
    POST /cycle-imports/parse: Upload a CSV export, detect its layout and
                                return the normalized entries (nothing is stored)
"""

from __future__ import annotations

import logging
from pathlib import PurePath
from typing import Any

from fastapi import APIRouter, File, Form, HTTPException, UploadFile

from cyclesense.dependencies import AppSettings, OptionalUserId
from cyclesense.imports import SourceTag, entries_to_records, parse_cycle_csv
from cyclesense.models.analysis import CycleImportResponse

logger = logging.getLogger("cyclesense.routers.cycle_imports")

router = APIRouter(prefix="/cycle-imports", tags=["cycle-imports"])

_FORCEABLE = {SourceTag.CLUE.value, SourceTag.FLO.value, SourceTag.GENERIC.value}


@router.post("/parse", response_model=CycleImportResponse)
async def parse_cycle_import(
    settings: AppSettings,
    user_id: OptionalUserId,
    file: UploadFile = File(...),
    forced_format: str | None = Form(default=None),
) -> Any:
    """Parse a Clue, Flo or generic cycle CSV export.

    - Validates extension and size
    - Detects the export layout unless ``forced_format`` is given
    - Returns the normalized entries, row warnings, and how many store
      records the import would upsert (duplicate dates collapsed)

    A file that parses to zero entries is still a 200; check ``succeeded``
    and ``error``.
    """
    filename = file.filename or "upload.csv"
    suffix = PurePath(filename).suffix.lower()
    if suffix not in settings.allowed_import_extensions:
        raise HTTPException(
            status_code=400,
            detail=(
                f"File type '{suffix or filename}' not allowed. "
                f"Accepted: {settings.allowed_import_extensions}"
            ),
        )

    if forced_format is not None:
        forced_format = forced_format.strip().lower() or None
    if forced_format is not None and forced_format not in _FORCEABLE:
        raise HTTPException(
            status_code=400,
            detail=f"Unknown format '{forced_format}'. Accepted: {sorted(_FORCEABLE)}",
        )

    file_data = await file.read()
    if len(file_data) > settings.max_import_size_bytes:
        raise HTTPException(
            status_code=400,
            detail=f"File too large. Max: {settings.max_import_size_bytes // (1024 * 1024)} MB",
        )

    logger.info("Parsing cycle import %s (%d bytes)", filename, len(file_data))
    outcome = parse_cycle_csv(file_data, forced_format)

    records = entries_to_records(outcome.entries, user_id or "preview")
    return CycleImportResponse(**outcome.to_dict(), records=len(records))
