"""
StudySpark Backend — Abstract LLM Service Interface
=====================================================

What:  Abstract base class defining the contract for the LLM provider.
Why:   The AI Gateway owns prompts and parsing; the provider only moves text
       in and out. Swapping Gemini for another vendor touches one class.
How:   Concrete implementations inherit from LLMService and implement
       complete(), extract_text() and health_check().
Who:   Called by AIGateway (studyspark.services.ai_service).

Message format:
    A conversation is a list of {"role": "user" | "assistant", "content": str}
    dicts, oldest first. Providers map "assistant" onto their own role name.
"""

from abc import ABC, abstractmethod
from typing import Dict, List


class LLMService(ABC):
    """
    Abstract interface for text generation and document text extraction.

    Contract:
        - complete() returns the model's raw text (possibly empty, never None)
        - Provider-specific exceptions propagate; AIGateway wraps them in
          LLMServiceError with the operation name
        - No retries at this layer
    """

    @abstractmethod
    async def complete(
        self,
        system_prompt: str,
        messages: List[Dict[str, str]],
        *,
        temperature: float,
        max_tokens: int,
        json_mode: bool = False,
    ) -> str:
        """
        Run one chat completion.

        Args:
            system_prompt: Instructions applied to the whole conversation.
            messages:      Conversation turns, the last one being the user's request.
            temperature:   Sampling temperature.
            max_tokens:    Upper bound on generated tokens.
            json_mode:     Ask the provider for a JSON object response.

        Returns:
            The generated text, or "" when the provider produced nothing.
        """
        ...

    @abstractmethod
    async def extract_text(self, file_path: str, mime_type: str) -> str:
        """
        Read the text out of an uploaded image or PDF.

        Args:
            file_path: Absolute path of the scratch copy on disk.
            mime_type: e.g. "application/pdf", "image/png".
        """
        ...

    @abstractmethod
    async def health_check(self) -> bool:
        """
        Check if the provider is reachable and the key is accepted.

        Who:     Called by GET /health.
        Returns: True if the service is reachable, False otherwise.
        """
        ...
