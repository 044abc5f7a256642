# campus_buddy/workflow/document_processing.py
import logging
import mimetypes
from typing import Dict

from campus_buddy.knowledge import loader

logger = logging.getLogger(__name__)


class RecordNotFound(LookupError):
    pass


def storage_path_from_url(file_url: str) -> str:
    """The storage object name is the last path segment of its URL."""
    return file_url.rstrip("/").split("/")[-1].split("?")[0]


def extract_content(
    data: bytes,
    file_name: str,
    file_type: str,
    document_ai,
) -> Dict:
    """
    Turn raw file bytes into ``parsed_content``.

    Images are OCR'd by the vision model; everything else goes through
    local extraction and then the structuring pass.
    """
    kind = loader.detect_kind(file_name, file_type)

    if kind == loader.IMAGE:

        mime = file_type or mimetypes.guess_type(file_name)[0] or "image/jpeg"

        text, ai_processed = document_ai.ocr_image(data, file_name, mime)

    else:

        local_text = loader.load_text(data, kind, file_name, file_type)

        text, ai_processed = document_ai.structure_document(
            local_text, file_type, file_name
        )

    logger.info(
        "Document content extracted",
        extra={
            "file_name": file_name,
            "kind": kind,
            "length": len(text),
            "ai_processed": ai_processed,
        },
    )

    return {"kind": kind, "parsed_content": text, "ai_processed": ai_processed}


def process_document(
    file_url: str,
    file_name: str,
    file_type: str,
    record_id: str,
    store,
    document_ai,
) -> Dict:
    """
    Download an uploaded file, extract its text and attach it to the
    college_data record.

    Raises StoreError on download or update failure and RecordNotFound
    when no row matches ``record_id``.
    """
    logger.info(
        "Processing document",
        extra={
            "file_url": file_url,
            "file_name": file_name,
            "file_type": file_type,
            "record_id": record_id,
        },
    )

    data = store.download_document(storage_path_from_url(file_url))

    result = extract_content(data, file_name, file_type, document_ai)

    parsed_content = result["parsed_content"]

    updated = store.update_college_data(
        record_id,
        {
            "parsed_content": parsed_content,
            "file_url": file_url,
            "file_name": file_name,
            "file_type": file_type,
        },
    )

    if not updated:
        raise RecordNotFound(f"College data record not found: {record_id}")

    logger.info(
        "Document processed and record updated",
        extra={"record_id": record_id, "parsed_length": len(parsed_content)},
    )

    if result["ai_processed"]:
        message = "Document processed successfully with Mistral AI"
    else:
        message = "Document processed with basic extraction"

    return {
        "success": True,
        "message": message,
        "parsed_length": len(parsed_content),
        "ai_processed": result["ai_processed"],
    }

