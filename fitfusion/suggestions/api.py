# -*- coding: utf-8 -*-
"""Suggestions — API endpoint."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from ..auth.security import get_current_user
from ..errors import InternalError
from .gateway import Failed, Raw, request_suggestion
from .models import SuggestionRequest, SuggestionResponse

router = APIRouter(prefix="/api", tags=["Suggestions"])


@router.post("/gemini-suggestions", response_model=SuggestionResponse, summary="AI suggestions (advisory)")
def gemini_suggestions(request: SuggestionRequest, user: dict = Depends(get_current_user)):  # noqa: ARG001
    result = request_suggestion(request.type, request.data or {}, request.user_profile or {})
    if isinstance(result, Failed):
        raise InternalError("Failed to generate suggestions")
    if isinstance(result, Raw):
        return SuggestionResponse(suggestions={"text": result.text})
    return SuggestionResponse(suggestions=result.data)
