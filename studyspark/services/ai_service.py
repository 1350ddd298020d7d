"""
StudySpark Backend — AI Gateway
=================================

What:  Every AI feature of the app: summaries, tutoring chat, flashcards,
       practice questions, study plans and note text extraction.
How:   Each operation builds its prompt, calls the LLMService once and runs
       the model's JSON through a parse-with-defaults step, so callers always
       receive fully populated result objects.
Who:   Called by the /api/ai/* routes and by NoteService for uploads.

Failure semantics:
    - A missing or malformed field never raises; it falls back to a default.
    - Provider exceptions and replies that are not JSON raise LLMServiceError
      tagged with the operation ("summary", "flashcards", ...).
    - No retries, no caching.
"""

import json
import logging
from datetime import date, datetime, timedelta, timezone
from typing import Any, Dict, List, Optional

from studyspark.exceptions import LLMServiceError
from studyspark.schemas.ai import (
    ChatMessage,
    FlashcardResult,
    QuestionResult,
    StudyPlanResult,
    StudyTaskResult,
    SummaryResult,
)
from studyspark.schemas.summary import Definition
from studyspark.services.llm_base import LLMService

logger = logging.getLogger(__name__)

# ── Generation limits ─────────────────────────────────────────────────────
SUMMARY_CONTENT_LIMIT = 3000
GENERATION_CONTENT_LIMIT = 2000
MAX_FLASHCARDS = 10
MAX_QUESTIONS = 8

CHAT_FALLBACK = "I couldn't generate a response. Please try again."

QUESTION_TYPE_DESCRIPTIONS = {
    "mcq": "Multiple choice questions with 4 options",
    "short": "Short answer questions (1-2 sentences)",
    "long": "Long answer questions requiring detailed explanation",
    "numerical": "Numerical/calculation problems",
}
DIFFICULTIES = {"easy", "medium", "hard"}
PRIORITIES = {"high", "medium", "low"}


# ── Prompts ───────────────────────────────────────────────────────────────

SUMMARY_SYSTEM_PROMPT = (
    "You are a helpful study assistant that creates clear, structured summaries. "
    "Always respond with valid JSON only, no additional text."
)

SUMMARY_PROMPT = """You are an expert study assistant. Analyze the following study material and create a comprehensive summary.

Title: {title}

Content:
{content}

Create a structured summary with the following format. Respond with valid JSON only:
{{
  "keyPoints": ["key point 1", "key point 2", ...],
  "definitions": [{{"term": "term1", "definition": "definition1"}}, ...],
  "formulas": ["formula1", "formula2", ...],
  "mainConcepts": ["concept1", "concept2", ...],
  "fullSummary": "A comprehensive 2-3 paragraph summary of the content"
}}

Rules:
- Extract 5-10 key points that capture the main ideas
- Identify important terms and their definitions
- Extract any formulas or equations mentioned
- List the main concepts covered
- Write a clear, comprehensive summary that a student can use for revision
- If there are no formulas, return an empty array
- If there are no definitions, return an empty array"""

CHAT_SYSTEM_PROMPT = """You are StudySpark AI, a friendly and knowledgeable study tutor. Your role is to:
- Explain concepts clearly and simply
- Provide helpful examples and analogies
- Break down complex topics into digestible parts
- Answer questions with patience and encouragement
- Help students understand rather than just memorize
- Use step-by-step explanations for problems
- Be supportive and motivating

Always respond in a clear, educational manner suitable for students."""

FLASHCARD_SYSTEM_PROMPT = "You are an expert educator. Respond with valid JSON only."

FLASHCARD_PROMPT = """Create {count} flashcards from the following study material. Each flashcard should test understanding of a key concept.

Content:
{content}

Respond with valid JSON only in this format:
{{
  "flashcards": [
    {{"front": "Question or term", "back": "Answer or definition"}},
    ...
  ]
}}

Rules:
- Create exactly {count} flashcards
- Questions should be clear and specific
- Answers should be concise but complete
- Cover the most important concepts
- Include a mix of definitions, concepts, and application questions"""

QUESTION_SYSTEM_PROMPT = "Create practice questions. Respond with valid JSON only."

QUESTION_PROMPT = """Create {count} practice questions from the following study material.

Question types to include: {types}

Content:
{content}

Respond with valid JSON only with these questions:
{{
  "questions": [
    {{
      "type": "mcq|short|long|numerical",
      "question": "The question text",
      "options": ["A) option1", "B) option2", "C) option3", "D) option4"],
      "answer": "The correct answer",
      "explanation": "Brief explanation",
      "difficulty": "easy|medium|hard"
    }}
  ]
}}"""

STUDY_PLAN_SYSTEM_PROMPT = """You are a study planning expert. Create personalized, realistic study plans for students.

Today's date is: {today}
{subject_context}

When creating study plans:
- Be realistic about time requirements
- Prioritize based on urgency and difficulty
- Include breaks and review sessions
- Consider spaced repetition principles
- Create manageable daily chunks"""

STUDY_PLAN_PROMPT = """Create a detailed study plan based on this request: "{prompt}"
{date_hints}
Respond with valid JSON only in this format:
{{
  "title": "Plan title",
  "description": "Brief description of the plan",
  "startDate": "YYYY-MM-DD",
  "endDate": "YYYY-MM-DD",
  "tasks": [
    {{
      "topic": "What to study",
      "subject": "Subject name",
      "duration": "1-2 hours",
      "priority": "high|medium|low",
      "date": "YYYY-MM-DD",
      "timeSlot": "Morning|Afternoon|Evening"
    }},
    ...
  ]
}}

Rules:
- Start date should be today ({today}) unless specified otherwise
- Create 5-15 tasks depending on the timeframe
- Distribute tasks evenly across the available days
- High priority for urgent/difficult topics
- Include review sessions for previously covered material
- Each task should be achievable in the given duration"""


# ── Coercion helpers ──────────────────────────────────────────────────────


def _text(value: Any) -> Optional[str]:
    """Non-empty string or None."""
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _string_list(value: Any) -> List[str]:
    if not isinstance(value, list):
        return []
    return [str(item) for item in value if _text(item)]


def _items(data: Any, key: str) -> List[Any]:
    """The list under `key`; a bare top-level list is accepted too."""
    if isinstance(data, list):
        return data
    if isinstance(data, dict) and isinstance(data.get(key), list):
        return data[key]
    return []


def _choice(value: Any, allowed, default: str) -> str:
    """`value` if it is one of the allowed strings, else `default`."""
    return value if isinstance(value, str) and value in allowed else default


def _iso_date(value: Any, default: str) -> str:
    """
    Normalize to YYYY-MM-DD; anything that does not start with an ISO date
    falls back to `default`. "2030-05-01T09:00:00Z" becomes "2030-05-01".
    """
    text = _text(value)
    if text is None:
        return default
    try:
        return date.fromisoformat(text[:10]).isoformat()
    except ValueError:
        return default


class AIGateway:
    """
    Prompt building and parse-with-defaults over an LLMService.

    Args:
        llm: The provider. GeminiService in production, AsyncMock in tests.
    """

    def __init__(self, llm: LLMService):
        self.llm = llm

    # ── Plumbing ──────────────────────────────────────────────────────────

    async def _complete(self, operation: str, system_prompt: str, messages, **kwargs) -> str:
        try:
            return await self.llm.complete(system_prompt, messages, **kwargs)
        except LLMServiceError:
            raise
        except Exception as e:
            logger.error("AI %s request failed: %s", operation, str(e), exc_info=True)
            raise LLMServiceError(operation=operation, cause=str(e)) from e

    @staticmethod
    def _parse_json(raw: str, operation: str) -> Any:
        """Decode the model's reply; an empty reply counts as an empty object."""
        try:
            return json.loads(raw or "{}")
        except json.JSONDecodeError as e:
            logger.error(
                "AI %s reply was not valid JSON (%d chars): %s", operation, len(raw), str(e)
            )
            raise LLMServiceError(operation=operation, cause=f"invalid JSON from model: {e}") from e

    async def _complete_json(
        self, operation: str, system_prompt: str, prompt: str, **kwargs
    ) -> Any:
        raw = await self._complete(
            operation,
            system_prompt,
            [{"role": "user", "content": prompt}],
            json_mode=True,
            **kwargs,
        )
        return self._parse_json(raw, operation)

    # ── Operations ────────────────────────────────────────────────────────

    async def summarize(self, content: str, title: str) -> SummaryResult:
        prompt = SUMMARY_PROMPT.format(title=title, content=content[:SUMMARY_CONTENT_LIMIT])
        data = await self._complete_json(
            "summary", SUMMARY_SYSTEM_PROMPT, prompt, temperature=0.3, max_tokens=2000
        )
        if not isinstance(data, dict):
            data = {}

        definitions = []
        for item in _items(data, "definitions"):
            if isinstance(item, dict) and _text(item.get("term")) and _text(item.get("definition")):
                definitions.append(
                    Definition(term=str(item["term"]), definition=str(item["definition"]))
                )

        return SummaryResult(
            key_points=_string_list(data.get("keyPoints")),
            definitions=definitions,
            formulas=_string_list(data.get("formulas")),
            main_concepts=_string_list(data.get("mainConcepts")),
            full_summary=_text(data.get("fullSummary")) or "Summary not available.",
        )

    async def chat(self, message: str, history: Optional[List[ChatMessage]] = None) -> str:
        messages = [{"role": m.role, "content": m.content} for m in history or []]
        messages.append({"role": "user", "content": message})
        reply = await self._complete(
            "AI response", CHAT_SYSTEM_PROMPT, messages, temperature=0.7, max_tokens=2048
        )
        return reply or CHAT_FALLBACK

    async def generate_flashcards(self, content: str, count: int = 10) -> List[FlashcardResult]:
        count = min(count, MAX_FLASHCARDS)
        prompt = FLASHCARD_PROMPT.format(count=count, content=content[:GENERATION_CONTENT_LIMIT])
        data = await self._complete_json(
            "flashcards", FLASHCARD_SYSTEM_PROMPT, prompt, temperature=0.3, max_tokens=2000
        )

        cards = []
        for item in _items(data, "flashcards"):
            if not isinstance(item, dict):
                continue
            front, back = _text(item.get("front")), _text(item.get("back"))
            if front and back:
                cards.append(FlashcardResult(front=front, back=back))
        if len(cards) > count:
            logger.info("Model returned %d flashcards, keeping %d", len(cards), count)
        return cards[:count]

    async def generate_questions(
        self, content: str, types: Optional[List[str]] = None, count: int = 10
    ) -> List[QuestionResult]:
        types = [t for t in (types or ["mcq", "short"]) if t in QUESTION_TYPE_DESCRIPTIONS]
        if not types:
            types = ["mcq", "short"]
        count = min(count, MAX_QUESTIONS)
        prompt = QUESTION_PROMPT.format(
            count=count,
            types=", ".join(QUESTION_TYPE_DESCRIPTIONS[t] for t in types),
            content=content[:GENERATION_CONTENT_LIMIT],
        )
        data = await self._complete_json(
            "questions", QUESTION_SYSTEM_PROMPT, prompt, temperature=0.4, max_tokens=2000
        )

        questions = []
        for item in _items(data, "questions"):
            if not isinstance(item, dict) or not _text(item.get("question")):
                continue
            qtype = _choice(item.get("type"), QUESTION_TYPE_DESCRIPTIONS, types[0])
            difficulty = _choice(item.get("difficulty"), DIFFICULTIES, "medium")
            options = _string_list(item.get("options")) or None
            questions.append(
                QuestionResult(
                    type=qtype,
                    question=str(item["question"]),
                    options=options,
                    answer=_text(item.get("answer")) or "",
                    explanation=_text(item.get("explanation")),
                    difficulty=difficulty,
                )
            )
        return questions[:count]

    async def generate_study_plan(
        self,
        prompt: str,
        subjects: Optional[List[str]] = None,
        start_date: Optional[str] = None,
        end_date: Optional[str] = None,
    ) -> StudyPlanResult:
        today = datetime.now(timezone.utc).date()
        today_str = today.isoformat()

        subject_context = (
            f"Available subjects: {', '.join(subjects)}"
            if subjects
            else "Create appropriate subject names based on the request"
        )
        hints = []
        if start_date:
            hints.append(f"Requested start date: {start_date}")
        if end_date:
            hints.append(f"Requested end date: {end_date}")
        date_hints = "".join(f"{h}\n" for h in hints)

        data = await self._complete_json(
            "study plan",
            STUDY_PLAN_SYSTEM_PROMPT.format(today=today_str, subject_context=subject_context),
            STUDY_PLAN_PROMPT.format(prompt=prompt, date_hints=date_hints, today=today_str),
            temperature=0.5,
            max_tokens=4096,
        )
        if not isinstance(data, dict):
            data = {}

        tasks = []
        for item in _items(data, "tasks"):
            if not isinstance(item, dict):
                continue
            priority = _choice(item.get("priority"), PRIORITIES, "medium")
            tasks.append(
                StudyTaskResult(
                    topic=_text(item.get("topic")) or "Study session",
                    subject=_text(item.get("subject")) or "General",
                    duration=_text(item.get("duration")) or "1 hour",
                    priority=priority,
                    date=_iso_date(item.get("date"), today_str),
                    time_slot=_text(item.get("timeSlot")),
                )
            )

        return StudyPlanResult(
            title=_text(data.get("title")) or "Study Plan",
            description=_text(data.get("description")) or "Your personalized study plan",
            start_date=_iso_date(data.get("startDate"), today_str),
            end_date=_iso_date(data.get("endDate"), (today + timedelta(days=7)).isoformat()),
            tasks=tasks,
        )

    async def extract_note_text(self, file_path: str, mime_type: str) -> str:
        """Text of an uploaded image or PDF, read by the provider's vision model."""
        try:
            return await self.llm.extract_text(file_path, mime_type)
        except LLMServiceError:
            raise
        except Exception as e:
            logger.error("AI note text extraction failed: %s", str(e), exc_info=True)
            raise LLMServiceError(operation="note text", cause=str(e)) from e
