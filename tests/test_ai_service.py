"""
StudySpark Backend — AI Gateway Unit Tests (Mocked Provider)
==============================================================

What:  Prompt parameters and the parse-with-defaults step of AIGateway.
How:   The LLM provider is an AsyncMock (see conftest.mock_llm); tests set
       what the "model" replies and inspect how complete() was called.

What we test:
    ✅ Missing JSON fields fall back to defaults instead of raising
    ✅ Flashcards capped at 10, questions at 8
    ✅ Invalid question type/difficulty and task priority are normalised,
       including values of the wrong JSON type
    ✅ Plan and task dates are coerced to YYYY-MM-DD
    ✅ Provider failures and non-JSON replies raise LLMServiceError
    ❌ Real API calls (see test_gemini_service.py for the SDK wiring)
"""

import json
from datetime import datetime, timedelta, timezone

import pytest

from studyspark.exceptions import LLMServiceError
from studyspark.schemas.ai import ChatMessage
from studyspark.services.ai_service import CHAT_FALLBACK


def _kwargs(mock_llm):
    return mock_llm.complete.await_args.kwargs


class TestSummarize:

    @pytest.mark.asyncio
    async def test_missing_fields_get_defaults(self, ai_gateway, mock_llm):
        mock_llm.complete.return_value = json.dumps({"keyPoints": ["Cells divide"]})

        result = await ai_gateway.summarize("Cells are the basic unit of life.", "Cells")

        assert result.key_points == ["Cells divide"]
        assert result.definitions == []
        assert result.formulas == []
        assert result.main_concepts == []
        assert result.full_summary == "Summary not available."

    @pytest.mark.asyncio
    async def test_empty_reply_is_empty_object(self, ai_gateway, mock_llm):
        mock_llm.complete.return_value = ""
        result = await ai_gateway.summarize("text", "title")
        assert result.full_summary == "Summary not available."

    @pytest.mark.asyncio
    async def test_request_parameters(self, ai_gateway, mock_llm):
        await ai_gateway.summarize("x" * 5000, "Long note")

        system_prompt, messages = mock_llm.complete.await_args.args
        assert "valid JSON" in system_prompt
        prompt = messages[-1]["content"]
        assert "x" * 3000 in prompt
        assert "x" * 3001 not in prompt
        assert "Title: Long note" in prompt
        assert _kwargs(mock_llm) == {"temperature": 0.3, "max_tokens": 2000, "json_mode": True}

    @pytest.mark.asyncio
    async def test_definitions_parsed(self, ai_gateway, mock_llm):
        mock_llm.complete.return_value = json.dumps({
            "definitions": [
                {"term": "Mitosis", "definition": "Cell division"},
                {"term": "incomplete"},
            ],
            "fullSummary": "Cells divide by mitosis.",
        })
        result = await ai_gateway.summarize("text", "title")
        assert [d.term for d in result.definitions] == ["Mitosis"]
        assert result.full_summary == "Cells divide by mitosis."

    @pytest.mark.asyncio
    async def test_malformed_definitions_ignored(self, ai_gateway, mock_llm):
        mock_llm.complete.return_value = json.dumps({"definitions": True, "keyPoints": "one"})
        result = await ai_gateway.summarize("content", "Cells")
        assert result.definitions == []
        assert result.key_points == []

    @pytest.mark.asyncio
    async def test_invalid_json_raises(self, ai_gateway, mock_llm):
        mock_llm.complete.return_value = "Sure! Here is your summary:"
        with pytest.raises(LLMServiceError) as exc_info:
            await ai_gateway.summarize("text", "title")
        assert exc_info.value.operation == "summary"
        assert exc_info.value.public_message == "Failed to generate summary"

    @pytest.mark.asyncio
    async def test_provider_error_is_wrapped(self, ai_gateway, mock_llm):
        mock_llm.complete.side_effect = RuntimeError("quota exceeded")
        with pytest.raises(LLMServiceError, match="Failed to generate summary: quota exceeded"):
            await ai_gateway.summarize("text", "title")


class TestChat:

    @pytest.mark.asyncio
    async def test_history_replayed_before_message(self, ai_gateway, mock_llm):
        mock_llm.complete.return_value = "Mitochondria make ATP."
        history = [
            ChatMessage(role="user", content="Hi"),
            ChatMessage(role="assistant", content="Hello! What are we studying?"),
        ]

        reply = await ai_gateway.chat("What do mitochondria do?", history)

        assert reply == "Mitochondria make ATP."
        system_prompt, messages = mock_llm.complete.await_args.args
        assert "StudySpark AI" in system_prompt
        assert [m["role"] for m in messages] == ["user", "assistant", "user"]
        assert messages[-1]["content"] == "What do mitochondria do?"
        assert _kwargs(mock_llm) == {"temperature": 0.7, "max_tokens": 2048}

    @pytest.mark.asyncio
    async def test_empty_reply_uses_fallback(self, ai_gateway, mock_llm):
        mock_llm.complete.return_value = ""
        assert await ai_gateway.chat("Hello") == CHAT_FALLBACK

    @pytest.mark.asyncio
    async def test_provider_error(self, ai_gateway, mock_llm):
        mock_llm.complete.side_effect = TimeoutError("timed out")
        with pytest.raises(LLMServiceError):
            await ai_gateway.chat("Hello")


class TestFlashcards:

    @pytest.mark.asyncio
    async def test_capped_at_ten(self, ai_gateway, mock_llm):
        mock_llm.complete.return_value = json.dumps(
            {"flashcards": [{"front": f"Q{i}", "back": f"A{i}"} for i in range(25)]}
        )

        cards = await ai_gateway.generate_flashcards("content", count=25)

        assert len(cards) == 10
        assert "Create 10 flashcards" in mock_llm.complete.await_args.args[1][0]["content"]

    @pytest.mark.asyncio
    async def test_smaller_count_respected(self, ai_gateway, mock_llm):
        mock_llm.complete.return_value = json.dumps(
            {"flashcards": [{"front": f"Q{i}", "back": f"A{i}"} for i in range(5)]}
        )
        assert len(await ai_gateway.generate_flashcards("content", count=3)) == 3

    @pytest.mark.asyncio
    async def test_incomplete_cards_skipped(self, ai_gateway, mock_llm):
        mock_llm.complete.return_value = json.dumps({
            "flashcards": [
                {"front": "What is DNA?", "back": "Genetic material"},
                {"front": "No back"},
                "not a card",
            ]
        })
        cards = await ai_gateway.generate_flashcards("content")
        assert [(c.front, c.back) for c in cards] == [("What is DNA?", "Genetic material")]

    @pytest.mark.asyncio
    async def test_missing_key_returns_empty(self, ai_gateway, mock_llm):
        assert await ai_gateway.generate_flashcards("content") == []

    @pytest.mark.asyncio
    async def test_content_truncated(self, ai_gateway, mock_llm):
        await ai_gateway.generate_flashcards("y" * 4000)
        prompt = mock_llm.complete.await_args.args[1][0]["content"]
        assert "y" * 2000 in prompt
        assert "y" * 2001 not in prompt
        assert _kwargs(mock_llm)["temperature"] == 0.3


class TestQuestions:

    @pytest.mark.asyncio
    async def test_capped_at_eight(self, ai_gateway, mock_llm):
        mock_llm.complete.return_value = json.dumps({
            "questions": [
                {"type": "short", "question": f"Q{i}", "answer": f"A{i}", "difficulty": "easy"}
                for i in range(20)
            ]
        })

        questions = await ai_gateway.generate_questions("content", ["short"], count=20)

        assert len(questions) == 8
        assert _kwargs(mock_llm)["temperature"] == 0.4

    @pytest.mark.asyncio
    async def test_type_descriptions_in_prompt(self, ai_gateway, mock_llm):
        await ai_gateway.generate_questions("content", ["mcq", "numerical"], count=4)
        prompt = mock_llm.complete.await_args.args[1][0]["content"]
        assert "Multiple choice questions with 4 options, Numerical/calculation problems" in prompt
        assert "Create 4 practice questions" in prompt

    @pytest.mark.asyncio
    async def test_invalid_type_and_difficulty_normalised(self, ai_gateway, mock_llm):
        mock_llm.complete.return_value = json.dumps({
            "questions": [
                {
                    "type": "essay",
                    "question": "Explain osmosis.",
                    "answer": "Water moves across a membrane.",
                    "difficulty": "brutal",
                },
                {
                    "type": "mcq",
                    "question": "Which organelle makes ATP?",
                    "options": ["A) Nucleus", "B) Mitochondrion"],
                    "answer": "B",
                    "explanation": "Cellular respiration.",
                    "difficulty": "hard",
                },
            ]
        })

        first, second = await ai_gateway.generate_questions("content", ["long", "mcq"])

        assert first.type == "long"
        assert first.difficulty == "medium"
        assert first.options is None
        assert second.type == "mcq"
        assert second.options == ["A) Nucleus", "B) Mitochondrion"]
        assert second.explanation == "Cellular respiration."

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "item",
        [
            {"question": "Q", "type": {"k": 1}, "difficulty": ["hard"]},
            {"question": "Q", "type": ["mcq"], "difficulty": {"level": "hard"}},
            {"question": "Q", "type": 3, "difficulty": None},
        ],
    )
    async def test_unhashable_fields_fall_back(self, ai_gateway, mock_llm, item):
        mock_llm.complete.return_value = json.dumps({"questions": [item]})

        (question,) = await ai_gateway.generate_questions("content", ["short", "mcq"])

        assert question.type == "short"
        assert question.difficulty == "medium"


class TestStudyPlan:

    @pytest.mark.asyncio
    async def test_defaults_for_empty_reply(self, ai_gateway, mock_llm):
        today = datetime.now(timezone.utc).date()

        plan = await ai_gateway.generate_study_plan("Prepare for finals")

        assert plan.title == "Study Plan"
        assert plan.description == "Your personalized study plan"
        assert plan.start_date == today.isoformat()
        assert plan.end_date == (today + timedelta(days=7)).isoformat()
        assert plan.tasks == []

    @pytest.mark.asyncio
    async def test_task_defaults(self, ai_gateway, mock_llm):
        mock_llm.complete.return_value = json.dumps({
            "title": "Finals",
            "startDate": "2030-05-01",
            "endDate": "2030-05-10",
            "tasks": [
                {},
                {"topic": "Genetics", "subject": "Biology", "duration": "2 hours",
                 "priority": "high", "date": "2030-05-02", "timeSlot": "Morning"},
                {"topic": "Review", "priority": "urgent"},
            ],
        })
        today = datetime.now(timezone.utc).date().isoformat()

        plan = await ai_gateway.generate_study_plan("Finals in May", ["Biology"])

        blank, full, odd = plan.tasks
        assert (blank.topic, blank.subject, blank.duration, blank.priority, blank.date) == (
            "Study session", "General", "1 hour", "medium", today,
        )
        assert blank.time_slot is None
        assert full.time_slot == "Morning"
        assert full.priority == "high"
        assert odd.priority == "medium"
        assert plan.start_date == "2030-05-01"

    @pytest.mark.asyncio
    async def test_prompt_context(self, ai_gateway, mock_llm):
        await ai_gateway.generate_study_plan(
            "Two weeks of revision", ["Biology", "Chemistry"], start_date="2030-01-01"
        )

        system_prompt, messages = mock_llm.complete.await_args.args
        today = datetime.now(timezone.utc).date().isoformat()
        assert f"Today's date is: {today}" in system_prompt
        assert "Available subjects: Biology, Chemistry" in system_prompt
        assert '"Two weeks of revision"' in messages[0]["content"]
        assert "Requested start date: 2030-01-01" in messages[0]["content"]
        assert _kwargs(mock_llm) == {"temperature": 0.5, "max_tokens": 4096, "json_mode": True}

    @pytest.mark.asyncio
    async def test_without_subjects_model_invents_them(self, ai_gateway, mock_llm):
        await ai_gateway.generate_study_plan("Learn Spanish")
        system_prompt = mock_llm.complete.await_args.args[0]
        assert "Create appropriate subject names based on the request" in system_prompt

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "reply",
        [
            {"tasks": 5},
            {"tasks": {"topic": "Genetics"}},
            {"tasks": [["Genetics"], "Genetics", 7]},
        ],
    )
    async def test_malformed_task_list_ignored(self, ai_gateway, mock_llm, reply):
        mock_llm.complete.return_value = json.dumps(reply)
        plan = await ai_gateway.generate_study_plan("Finals")
        assert plan.tasks == []

    @pytest.mark.asyncio
    async def test_unhashable_priority_falls_back(self, ai_gateway, mock_llm):
        mock_llm.complete.return_value = json.dumps({
            "tasks": [{"topic": "Genetics", "priority": ["high"]}, {"priority": {"p": 1}}],
        })
        plan = await ai_gateway.generate_study_plan("Finals")
        assert [t.priority for t in plan.tasks] == ["medium", "medium"]

    @pytest.mark.asyncio
    async def test_dates_normalised_to_iso(self, ai_gateway, mock_llm):
        mock_llm.complete.return_value = json.dumps({
            "startDate": "2030-05-01T00:00:00Z",
            "endDate": "next Friday",
            "tasks": [
                {"date": "2030-05-02T09:30:00+02:00"},
                {"date": "Tomorrow"},
                {"date": "05/02/2030"},
                {"date": "2030-02-30"},
                {"date": ["2030-05-03"]},
            ],
        })
        today = datetime.now(timezone.utc).date()

        plan = await ai_gateway.generate_study_plan("Finals")

        assert plan.start_date == "2030-05-01"
        assert plan.end_date == (today + timedelta(days=7)).isoformat()
        assert [t.date for t in plan.tasks] == ["2030-05-02"] + [today.isoformat()] * 4
        assert all(len(t.date) == 10 for t in plan.tasks)


class TestExtractNoteText:

    @pytest.mark.asyncio
    async def test_delegates_to_provider(self, ai_gateway, mock_llm):
        mock_llm.extract_text.return_value = "Photosynthesis converts light to energy."
        text = await ai_gateway.extract_note_text("/tmp/note.png", "image/png")
        assert text == "Photosynthesis converts light to energy."
        mock_llm.extract_text.assert_awaited_once_with("/tmp/note.png", "image/png")

    @pytest.mark.asyncio
    async def test_provider_error_is_wrapped(self, ai_gateway, mock_llm):
        mock_llm.extract_text.side_effect = RuntimeError("upload failed")
        with pytest.raises(LLMServiceError, match="note text"):
            await ai_gateway.extract_note_text("/tmp/note.pdf", "application/pdf")
