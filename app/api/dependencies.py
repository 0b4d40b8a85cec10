"""
app/api/dependencies.py

Upload validation shared by the visit endpoints.
"""

from __future__ import annotations

from pathlib import PurePath

from fastapi import File, HTTPException, UploadFile, status

from app.services.spreadsheet_service import SPREADSHEET_SUFFIXES

SPREADSHEET_CONTENT_TYPES = frozenset(
    {
        "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        "application/vnd.ms-excel",
        "application/vnd.ms-excel.sheet.macroenabled.12",
    }
)


def is_spreadsheet_upload(filename: str | None, content_type: str | None) -> bool:
    """True when either the file suffix or the declared MIME type names an Excel workbook."""
    suffix = PurePath((filename or "").strip()).suffix.lower()
    media_type = (content_type or "").split(";", 1)[0].strip().lower()
    return suffix in SPREADSHEET_SUFFIXES or media_type in SPREADSHEET_CONTENT_TYPES


def get_spreadsheet_upload(file: UploadFile = File(...)) -> UploadFile:
    if not is_spreadsheet_upload(file.filename, file.content_type):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Only Excel files are allowed.",
        )
    return file
