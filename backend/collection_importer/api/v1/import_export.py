"""
API endpoints for importing Insomnia exports.
"""
import logging

from fastapi import APIRouter, File, HTTPException, UploadFile, status

from collection_importer.config import settings
from collection_importer.core.errors import CollectionImportError
from collection_importer.services.file_loader import is_accepted_file
from collection_importer.services.pipeline import ImportResult, import_collection, summarize

logger = logging.getLogger(__name__)

router = APIRouter()


# ── Helpers ──

def _check_upload(file: UploadFile) -> None:
    if not is_accepted_file(file.filename, file.content_type):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Unsupported file type, expected .json, .yaml or .yml",
        )
    if file.size is not None and file.size > settings.MAX_IMPORT_BYTES:
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail=f"File exceeds {settings.MAX_IMPORT_BYTES} bytes",
        )


async def _import_upload(file: UploadFile) -> ImportResult:
    _check_upload(file)
    try:
        return await import_collection(file)
    except CollectionImportError as e:
        logger.warning("Rejected import of '%s': %s", file.filename, e.message)
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.message)


# ── Import Insomnia ──

@router.post("/import/insomnia")
async def import_insomnia(file: UploadFile = File(...)):
    """Convert an Insomnia export (JSON or YAML) into a collection document."""
    result = await _import_upload(file)
    return {"collection": result.collection.to_document()}


@router.post("/import/insomnia/preview")
async def preview_insomnia_import(file: UploadFile = File(...)):
    """Convert an Insomnia export and return only its counts."""
    result = await _import_upload(file)
    return summarize(result.collection)
