"""
StudySpark Backend — FastAPI Dependencies
===========================================

What:  Hands the process-wide storage backend and AI Gateway to route handlers.
How:   Both are attached to app.state by create_app(); tests pass their own
       instances to create_app() instead of overriding dependencies.
"""

from fastapi import Request

from studyspark.services.ai_service import AIGateway
from studyspark.storage.base import StorageRepository


def get_storage(request: Request) -> StorageRepository:
    return request.app.state.storage


def get_ai_gateway(request: Request) -> AIGateway:
    return request.app.state.ai_gateway
