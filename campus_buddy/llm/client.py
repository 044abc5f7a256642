# campus_buddy/llm/client.py
import base64
import logging
import os
from typing import Optional, Tuple

from openai import APIStatusError, OpenAI

from campus_buddy.config import (
    DOCUMENT_MAX_TOKENS,
    DOCUMENT_TEMPERATURE,
    MISTRAL_BASE_URL,
    MISTRAL_DOCUMENT_MODEL,
    MISTRAL_VISION_MODEL,
)
from campus_buddy.prompts.prompt_builder import build_document_prompt
from campus_buddy.prompts.system_prompts import (
    DOCUMENT_PROCESSING_SYSTEM_PROMPT,
    OCR_INSTRUCTIONS,
    OCR_SYSTEM_PROMPT,
)

logger = logging.getLogger(__name__)


class DocumentAIClient:
    """
    Mistral client for the document pipeline.

    Two jobs: restructure extracted text into clean sections, and OCR
    images with the vision model. Neither raises: when Mistral is not
    configured or a call fails, the caller gets usable fallback text and
    ``ai_processed=False``.
    """

    def __init__(self, api_key: Optional[str] = None):
        """
        Args:
            api_key: Mistral key; defaults to MISTRAL_API_KEY.
        """
        api_key = api_key or os.getenv("MISTRAL_API_KEY")

        self.client: Optional[OpenAI] = None

        if api_key:
            self.client = OpenAI(api_key=api_key, base_url=MISTRAL_BASE_URL)
        else:
            logger.warning("MISTRAL_API_KEY not found, document AI disabled")

    @property
    def available(self) -> bool:
        return self.client is not None

    def structure_document(
        self,
        content: str,
        file_type: str,
        file_name: str,
    ) -> Tuple[str, bool]:
        """
        Returns (text, ai_processed). On any failure the original
        content comes back unchanged.
        """
        if not self.available:
            logger.warning("Mistral unavailable, using basic processing")
            return content, False

        try:
            response = self.client.chat.completions.create(
                model=MISTRAL_DOCUMENT_MODEL,
                messages=[
                    {"role": "system", "content": DOCUMENT_PROCESSING_SYSTEM_PROMPT},
                    {
                        "role": "user",
                        "content": build_document_prompt(content, file_type, file_name),
                    },
                ],
                temperature=DOCUMENT_TEMPERATURE,
                max_tokens=DOCUMENT_MAX_TOKENS,
            )

        except APIStatusError as e:
            logger.error(
                "Mistral API error",
                extra={"status_code": e.status_code, "file_name": file_name},
            )
            return content, False

        except Exception as e:
            logger.error(
                "Error processing with Mistral AI",
                extra={"error": str(e), "file_name": file_name},
            )
            return content, False

        processed = response.choices[0].message.content if response.choices else None

        if not processed:
            return content, False

        logger.info(
            "Document structured with Mistral AI",
            extra={"file_name": file_name, "length": len(processed)},
        )

        return processed, True

    def ocr_image(
        self,
        image_bytes: bytes,
        file_name: str,
        mime_type: str = "image/jpeg",
    ) -> Tuple[str, bool]:
        """
        Returns (text, ai_processed). The text always starts with an
        ``Image Document:`` header so it reads well in chat context.
        """
        header = f"Image Document: {file_name}"

        if not self.available:
            logger.warning("Mistral unavailable, skipping OCR")
            return (
                f"{header}\nContent: This image contains visual information "
                "relevant to the college. OCR processing is not available "
                "without Mistral API key."
            ), False

        image_b64 = base64.b64encode(image_bytes).decode("ascii")

        try:
            response = self.client.chat.completions.create(
                model=MISTRAL_VISION_MODEL,
                messages=[
                    {"role": "system", "content": OCR_SYSTEM_PROMPT},
                    {
                        "role": "user",
                        "content": [
                            {"type": "text", "text": OCR_INSTRUCTIONS},
                            {
                                "type": "image_url",
                                "image_url": {
                                    "url": f"data:{mime_type};base64,{image_b64}"
                                },
                            },
                        ],
                    },
                ],
                temperature=DOCUMENT_TEMPERATURE,
                max_tokens=DOCUMENT_MAX_TOKENS,
            )

        except APIStatusError as e:
            logger.error(
                "Mistral Vision API error",
                extra={"status_code": e.status_code, "file_name": file_name},
            )
            return (
                f"{header}\nContent: This image contains visual information "
                "but OCR processing failed."
            ), False

        except Exception as e:
            logger.error(
                "Error processing image with OCR",
                extra={"error": str(e), "file_name": file_name},
            )
            return (
                f"{header}\nContent: This image contains visual information "
                "but OCR processing failed due to an error."
            ), False

        extracted = response.choices[0].message.content if response.choices else None

        if not extracted:
            return (
                f"{header}\nContent: This image contains visual information "
                "but no text was extracted."
            ), False

        logger.info(
            "Extracted text via OCR",
            extra={"file_name": file_name, "length": len(extracted)},
        )

        return f"{header}\n\nExtracted Content:\n{extracted}", True
