"""
StudySpark Backend — AI Route Handlers
========================================

What:  The five /api/ai/* endpoints.
How:   Each handler asks the AI Gateway for typed results, then (except chat)
       persists them through the StorageRepository and returns the stored
       records with 201.

Error mapping:
    LLMServiceError → 500 with a generic "Failed to generate ..." message;
    the provider's error text is only logged.
"""

import logging
from typing import List

from fastapi import APIRouter, Depends, status

from studyspark.dependencies import get_ai_gateway, get_storage
from studyspark.schemas.ai import (
    ChatRequest,
    ChatResponse,
    GenerateFlashcardsRequest,
    GenerateQuestionsRequest,
    GenerateStudyPlanRequest,
    SummarizeRequest,
)
from studyspark.schemas.base import ErrorResponse
from studyspark.schemas.flashcard import FlashcardCreate, FlashcardResponse
from studyspark.schemas.question import QuestionCreate, QuestionResponse
from studyspark.schemas.study_plan import StudyPlanCreate, StudyPlanResponse, StudyTaskCreate
from studyspark.schemas.summary import SummaryCreate, SummaryResponse
from studyspark.services.ai_service import AIGateway
from studyspark.storage.base import StorageRepository

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/ai", tags=["AI"])

AI_ERRORS = {
    400: {"description": "Invalid request body", "model": ErrorResponse},
    500: {"description": "AI provider failed", "model": ErrorResponse},
}


@router.post(
    "/summarize",
    response_model=SummaryResponse,
    status_code=status.HTTP_201_CREATED,
    responses=AI_ERRORS,
    summary="Summarize a note and store the summary",
)
async def summarize(
    data: SummarizeRequest,
    storage: StorageRepository = Depends(get_storage),
    ai_gateway: AIGateway = Depends(get_ai_gateway),
):
    result = await ai_gateway.summarize(data.content, data.title)
    return await storage.create_summary(
        SummaryCreate(
            note_id=data.note_id,
            subject_id=data.subject_id,
            title=data.title,
            **result.model_dump(),
        )
    )


@router.post("/chat", response_model=ChatResponse, responses=AI_ERRORS, summary="Ask the AI tutor")
async def chat(data: ChatRequest, ai_gateway: AIGateway = Depends(get_ai_gateway)):
    reply = await ai_gateway.chat(data.message, data.history)
    return ChatResponse(response=reply)


@router.post(
    "/flashcards",
    response_model=List[FlashcardResponse],
    status_code=status.HTTP_201_CREATED,
    responses=AI_ERRORS,
    summary="Generate and store flashcards",
)
async def generate_flashcards(
    data: GenerateFlashcardsRequest,
    storage: StorageRepository = Depends(get_storage),
    ai_gateway: AIGateway = Depends(get_ai_gateway),
):
    cards = await ai_gateway.generate_flashcards(data.content, data.count)
    return await storage.create_flashcards(
        [
            FlashcardCreate(
                subject_id=data.subject_id,
                summary_id=data.summary_id,
                front=card.front,
                back=card.back,
                difficulty="medium",
            )
            for card in cards
        ]
    )


@router.post(
    "/questions",
    response_model=List[QuestionResponse],
    status_code=status.HTTP_201_CREATED,
    responses=AI_ERRORS,
    summary="Generate and store practice questions",
)
async def generate_questions(
    data: GenerateQuestionsRequest,
    storage: StorageRepository = Depends(get_storage),
    ai_gateway: AIGateway = Depends(get_ai_gateway),
):
    questions = await ai_gateway.generate_questions(data.content, data.types, data.count)
    return await storage.create_questions(
        [
            QuestionCreate(subject_id=data.subject_id, summary_id=data.summary_id, **q.model_dump())
            for q in questions
        ]
    )


@router.post(
    "/study-plan",
    response_model=StudyPlanResponse,
    status_code=status.HTTP_201_CREATED,
    responses=AI_ERRORS,
    summary="Generate and store a study plan",
)
async def generate_study_plan(
    data: GenerateStudyPlanRequest,
    storage: StorageRepository = Depends(get_storage),
    ai_gateway: AIGateway = Depends(get_ai_gateway),
):
    plan = await ai_gateway.generate_study_plan(
        data.prompt, data.subjects, data.start_date, data.end_date
    )
    logger.info("Generated study plan with %d tasks", len(plan.tasks))
    return await storage.create_study_plan(
        StudyPlanCreate(
            title=plan.title,
            description=plan.description,
            start_date=plan.start_date,
            end_date=plan.end_date,
            tasks=[StudyTaskCreate(completed=False, **task.model_dump()) for task in plan.tasks],
        )
    )
