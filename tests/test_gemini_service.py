"""
StudySpark Backend — Gemini Service Unit Tests (Mocked)
=========================================================

What:  Tests for GeminiService with the Google Generative AI SDK patched out.
Why:   Tests should not make real API calls (costs money, requires network).
How:   Patches the genai module and inspects what the service hands to it.

What we test:
    ✅ Chat roles are mapped to Gemini's user/model roles
    ✅ JSON mode sets response_mime_type; every call carries the timeout
    ✅ Blocked responses (.text raising ValueError) come back as ""
    ✅ SDK errors propagate to the caller
    ✅ Text extraction uploads the file and prompts the vision model
    ✅ Health check returns True/False without raising
    ❌ Real API calls (use integration tests for that)
"""

import pytest
from unittest.mock import AsyncMock, MagicMock, PropertyMock, patch

from studyspark.config import settings
from studyspark.services.gemini_service import GeminiService


def _mock_model(mock_genai, text="ok"):
    response = MagicMock()
    response.text = text
    model = MagicMock()
    model.generate_content_async = AsyncMock(return_value=response)
    mock_genai.GenerativeModel.return_value = model
    return model, response


class TestGeminiComplete:

    @pytest.mark.asyncio
    async def test_roles_and_system_instruction(self):
        with patch("studyspark.services.gemini_service.genai") as mock_genai:
            model, _ = _mock_model(mock_genai, text="  Mitochondria make ATP.  ")
            service = GeminiService(api_key="test-key", model_name="gemini-test")

            result = await service.complete(
                "You are a tutor.",
                [
                    {"role": "user", "content": "Hi"},
                    {"role": "assistant", "content": "Hello!"},
                    {"role": "user", "content": "What do mitochondria do?"},
                ],
                temperature=0.7,
                max_tokens=2048,
            )

            assert result == "Mitochondria make ATP."
            mock_genai.configure.assert_called_once_with(api_key="test-key")
            mock_genai.GenerativeModel.assert_called_once_with(
                "gemini-test", system_instruction="You are a tutor."
            )
            contents = model.generate_content_async.await_args.args[0]
            assert [c["role"] for c in contents] == ["user", "model", "user"]
            assert contents[1]["parts"] == ["Hello!"]

            kwargs = model.generate_content_async.await_args.kwargs
            assert kwargs["generation_config"] == {"temperature": 0.7, "max_output_tokens": 2048}
            assert kwargs["request_options"] == {"timeout": settings.gemini_timeout}

    @pytest.mark.asyncio
    async def test_json_mode_sets_mime_type(self):
        with patch("studyspark.services.gemini_service.genai") as mock_genai:
            model, _ = _mock_model(mock_genai, text='{"flashcards": []}')
            service = GeminiService(api_key="test-key")

            result = await service.complete(
                "Respond with JSON.",
                [{"role": "user", "content": "cards please"}],
                temperature=0.3,
                max_tokens=2000,
                json_mode=True,
            )

            assert result == '{"flashcards": []}'
            config = model.generate_content_async.await_args.kwargs["generation_config"]
            assert config["response_mime_type"] == "application/json"

    @pytest.mark.asyncio
    async def test_blocked_response_returns_empty_string(self):
        with patch("studyspark.services.gemini_service.genai") as mock_genai:
            _, response = _mock_model(mock_genai)
            type(response).text = PropertyMock(side_effect=ValueError("no parts"))
            service = GeminiService(api_key="test-key")

            result = await service.complete(
                "system", [{"role": "user", "content": "hi"}], temperature=0.7, max_tokens=10
            )
            assert result == ""

    @pytest.mark.asyncio
    async def test_sdk_error_propagates(self):
        with patch("studyspark.services.gemini_service.genai") as mock_genai:
            model, _ = _mock_model(mock_genai)
            model.generate_content_async.side_effect = RuntimeError("429 quota exceeded")
            service = GeminiService(api_key="test-key")

            with pytest.raises(RuntimeError, match="quota"):
                await service.complete(
                    "system", [{"role": "user", "content": "hi"}], temperature=0.7, max_tokens=10
                )

    def test_placeholder_key_is_not_configured(self):
        with patch("studyspark.services.gemini_service.genai") as mock_genai:
            with patch.object(settings, "gemini_api_key", "your_gemini_api_key_here"):
                GeminiService()
            mock_genai.configure.assert_not_called()


class TestGeminiExtractText:

    @pytest.mark.asyncio
    async def test_uploads_file_and_prompts_vision_model(self):
        with patch("studyspark.services.gemini_service.genai") as mock_genai:
            model, _ = _mock_model(mock_genai, text="Photosynthesis\n- light reactions")
            uploaded = MagicMock()
            mock_genai.upload_file.return_value = uploaded
            service = GeminiService(api_key="test-key")

            result = await service.extract_text("/tmp/notes.png", "image/png")

            assert result == "Photosynthesis\n- light reactions"
            mock_genai.upload_file.assert_called_once_with(
                path="/tmp/notes.png", mime_type="image/png"
            )
            prompt, file_part = model.generate_content_async.await_args.args[0]
            assert prompt == GeminiService.EXTRACT_PROMPT
            assert file_part is uploaded


class TestGeminiHealthCheck:

    @pytest.mark.asyncio
    async def test_reachable(self):
        with patch("studyspark.services.gemini_service.genai") as mock_genai:
            listed = MagicMock()
            listed.name = "models/gemini-1.5-flash"
            mock_genai.list_models.return_value = [listed]

            service = GeminiService(api_key="test-key", model_name="gemini-1.5-flash")
            assert await service.health_check() is True

    @pytest.mark.asyncio
    async def test_unreachable(self):
        with patch("studyspark.services.gemini_service.genai") as mock_genai:
            mock_genai.list_models.side_effect = ConnectionError("network down")

            service = GeminiService(api_key="test-key")
            assert await service.health_check() is False
