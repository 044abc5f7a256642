# campus_buddy/llm/multi_model_client.py

import os
import logging
import time
from typing import Callable, Dict, List, Optional, Tuple

from openai import OpenAI
import google.generativeai as genai

from campus_buddy.config import (
    GEMINI_CHAT_MODEL,
    GEMINI_GENERATION_CONFIG,
    MISTRAL_BASE_URL,
    MISTRAL_CHAT_MAX_TOKENS,
    MISTRAL_CHAT_MODEL,
    MISTRAL_CHAT_TEMPERATURE,
)

logger = logging.getLogger(__name__)


class NoProviderAvailable(RuntimeError):
    """Every configured provider failed, or none is configured."""


class MultiModelLLMClient:
    """
    Chat answer generator with provider fallback.

    Fallback order:

    1. Mistral (primary, OpenAI-compatible endpoint)
    2. Gemini (secondary)

    A provider without an API key is skipped. A provider that raises
    or returns an empty answer hands over to the next one.
    """

    def __init__(
        self,
        mistral_api_key: Optional[str] = None,
        gemini_api_key: Optional[str] = None,
    ):

        self.mistral: Optional[OpenAI] = None
        self.gemini_model = None

        self.mistral_available = False
        self.gemini_available = False

        self._init_mistral(mistral_api_key or os.getenv("MISTRAL_API_KEY"))
        self._init_gemini(gemini_api_key or os.getenv("GEMINI_API_KEY"))

        logger.info(
            "LLM initialization complete",
            extra=self.get_usage_stats(),
        )

    # ============================================================
    # INITIALIZATION
    # ============================================================

    def _init_mistral(self, key: Optional[str]):

        if not key:
            logger.warning("Mistral API key missing")
            return

        try:

            self.mistral = OpenAI(api_key=key, base_url=MISTRAL_BASE_URL)

            self.mistral_available = True

            logger.info("Mistral initialized successfully")

        except Exception as e:

            logger.error(
                "Mistral initialization failed",
                extra={"error": str(e)},
            )

    def _init_gemini(self, key: Optional[str]):

        if not key:
            logger.warning("Gemini API key missing")
            return

        try:

            genai.configure(api_key=key)

            self.gemini_model = genai.GenerativeModel(
                model_name=GEMINI_CHAT_MODEL,
                generation_config=GEMINI_GENERATION_CONFIG,
            )

            self.gemini_available = True

            logger.info("Gemini initialized successfully")

        except Exception as e:

            logger.error(
                "Gemini initialization failed",
                extra={"error": str(e)},
            )

    # ============================================================
    # PUBLIC API
    # ============================================================

    def generate_with_provider(self, prompt: str) -> Tuple[str, str]:
        """
        Returns (answer, provider name).

        Raises NoProviderAvailable when the whole chain is exhausted.
        """

        logger.info(
            "LLM request started",
            extra={
                **self.get_usage_stats(),
                "prompt_length": len(prompt),
            },
        )

        errors: List[str] = []

        for provider, available, fn in self._chain():

            if not available:
                continue

            try:

                return self._timed_call(provider, fn, prompt), provider

            except Exception as e:

                errors.append(f"{provider}: {e}")

                logger.warning(
                    f"{provider.capitalize()} failed",
                    extra={"provider": provider, "error": str(e)},
                )

        if not errors:
            raise NoProviderAvailable("No LLM backend configured")

        raise NoProviderAvailable("All LLM backends failed: " + "; ".join(errors))

    def _chain(self) -> List[Tuple[str, bool, Callable[[str], str]]]:

        return [
            ("mistral", self.mistral_available, self._generate_mistral),
            ("gemini", self.gemini_available, self._generate_gemini),
        ]

    # ============================================================
    # PROVIDERS
    # ============================================================

    def _generate_mistral(self, prompt: str) -> str:

        response = self.mistral.chat.completions.create(
            model=MISTRAL_CHAT_MODEL,
            messages=[
                {
                    "role": "user",
                    "content": prompt,
                },
            ],
            temperature=MISTRAL_CHAT_TEMPERATURE,
            max_tokens=MISTRAL_CHAT_MAX_TOKENS,
        )

        text = response.choices[0].message.content if response.choices else None

        if not text:
            raise RuntimeError("Mistral returned empty response")

        return text.strip()

    def _generate_gemini(self, prompt: str) -> str:

        response = self.gemini_model.generate_content(prompt)

        # .text raises ValueError when the candidate was blocked
        if not response or not response.text:
            raise RuntimeError("Gemini returned empty response")

        return response.text.strip()

    # ============================================================
    # LATENCY OBSERVABILITY
    # ============================================================

    def _timed_call(self, provider: str, fn, prompt: str) -> str:

        start = time.time()

        result = fn(prompt)

        latency = time.time() - start

        logger.info(
            "LLM provider success",
            extra={
                "provider": provider,
                "latency_seconds": round(latency, 3),
            },
        )

        return result

    # ============================================================
    # STATUS
    # ============================================================

    def get_usage_stats(self) -> Dict:

        return {
            "mistral_available": self.mistral_available,
            "gemini_available": self.gemini_available,
        }
