"""
StudySpark Backend — Google Gemini Service Implementation
==========================================================

What:  Concrete LLMService on the Google Generative AI SDK.
Why:   Gemini covers both needs of the app with one key: JSON-mode chat
       completions for the AI Gateway and vision/PDF reading for uploads.
How:   A GenerativeModel is built per call because the system instruction
       changes with every gateway operation. Calls are async
       (generate_content_async) with a per-request timeout.
Who:   Built once in create_app() and handed to AIGateway.

Failure policy:
    No retries and no circuit breaker. SDK exceptions propagate to
    AIGateway, which wraps them in LLMServiceError (HTTP 500).
"""

import asyncio
import logging
import time
import uuid
from pathlib import Path
from typing import Dict, List

import google.generativeai as genai

from studyspark.config import settings
from studyspark.services.llm_base import LLMService

logger = logging.getLogger(__name__)

# Gemini calls the assistant side of a conversation "model"
ROLE_MAP = {"user": "user", "assistant": "model"}


class GeminiService(LLMService):
    """Google Gemini implementation of LLMService."""

    # Tuned for lecture notes, scanned handouts and photographed whiteboards
    EXTRACT_PROMPT = """You are an expert document transcription system. Read this study material
and extract ALL of its text with high accuracy.

Instructions:
1. Preserve the original structure (headings, paragraphs, line breaks, bullet points)
2. If text is unclear, provide your best interpretation with [unclear] markers
3. Maintain any numbering, bullets, or list formatting
4. Preserve mathematical notation and formulas
5. Return ONLY the extracted text, with no commentary or description of the document
6. If no text is found, return an empty response

Extract the text from this document:"""

    def __init__(self, api_key: str = "", model_name: str = ""):
        api_key = api_key or settings.gemini_api_key
        self.model_name = model_name or settings.gemini_model
        # The SDK keeps auth in module-level state
        if api_key and api_key != "your_gemini_api_key_here":
            genai.configure(api_key=api_key)
        else:
            logger.warning("GEMINI_API_KEY not set; AI requests will fail")
        logger.info("GeminiService initialized with model=%s", self.model_name)

    @staticmethod
    def _to_contents(messages: List[Dict[str, str]]) -> List[dict]:
        return [
            {"role": ROLE_MAP.get(m["role"], "user"), "parts": [m["content"]]}
            for m in messages
        ]

    @staticmethod
    def _response_text(response, request_id: str) -> str:
        # .text raises ValueError when the candidate was blocked or has no parts
        try:
            text = response.text
        except ValueError as e:
            logger.warning("[%s] Gemini returned no text: %s", request_id, str(e))
            return ""
        return (text or "").strip()

    async def complete(
        self,
        system_prompt: str,
        messages: List[Dict[str, str]],
        *,
        temperature: float,
        max_tokens: int,
        json_mode: bool = False,
    ) -> str:
        request_id = str(uuid.uuid4())[:8]
        start_time = time.time()

        model = genai.GenerativeModel(self.model_name, system_instruction=system_prompt)
        generation_config = {"temperature": temperature, "max_output_tokens": max_tokens}
        if json_mode:
            generation_config["response_mime_type"] = "application/json"

        try:
            response = await model.generate_content_async(
                self._to_contents(messages),
                generation_config=generation_config,
                request_options={"timeout": settings.gemini_timeout},
            )
        except Exception as e:
            logger.warning(
                "[%s] Gemini completion failed after %.0fms: %s",
                request_id,
                (time.time() - start_time) * 1000,
                str(e),
            )
            raise

        text = self._response_text(response, request_id)
        logger.info(
            "[%s] Gemini completion in %.0fms, %d chars (json_mode=%s)",
            request_id,
            (time.time() - start_time) * 1000,
            len(text),
            json_mode,
        )
        return text

    async def extract_text(self, file_path: str, mime_type: str) -> str:
        request_id = str(uuid.uuid4())[:8]
        start_time = time.time()
        logger.info(
            "[%s] Starting Gemini extraction for %s (%s)",
            request_id,
            Path(file_path).name,  # filename only, not full path
            mime_type,
        )

        # upload_file is a blocking HTTP call
        uploaded = await asyncio.to_thread(genai.upload_file, path=file_path, mime_type=mime_type)
        model = genai.GenerativeModel(self.model_name)
        response = await model.generate_content_async(
            [self.EXTRACT_PROMPT, uploaded],
            request_options={"timeout": settings.gemini_timeout},
        )

        text = self._response_text(response, request_id)
        logger.info(
            "[%s] Gemini extraction completed in %.0fms, extracted %d chars",
            request_id,
            (time.time() - start_time) * 1000,
            len(text),
        )
        return text

    async def health_check(self) -> bool:
        """
        Check if Gemini API is reachable.

        How:     Lists available models (lightweight API call, no token cost).
        Returns: True if reachable and authenticated, False otherwise.
        """
        try:
            models = await asyncio.to_thread(lambda: [m.name for m in genai.list_models()])
            target = f"models/{self.model_name}"
            if target not in models:
                logger.warning("Configured model %s not found in available models", target)
            return True
        except Exception as e:
            logger.warning("Gemini health check failed: %s", str(e))
            return False
