from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

from fastapi import Depends, HTTPException, Request, Security, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from metawave.core.analysis import (
    AdvancedEmotionScorer,
    BiasEvaluator,
    LoopClusterer,
    PatternAnalyzer,
    Predictor,
    PruningScorer,
    RuleBasedTagger,
)
from metawave.core.repositories.implementations.supabase.note_repository import (
    SupabaseNoteRepository,
)
from metawave.core.schemas.auth import AuthUser
from metawave.core.services.analysis_service import AnalysisService
from metawave.db.base import create_request_supabase_client
from metawave.utils.logging import get_logger

logger = get_logger(__name__)

# Use auto_error=False to handle missing tokens gracefully
http_bearer = HTTPBearer(auto_error=False)

if TYPE_CHECKING:
    from supabase import Client

    from metawave.core.analysis import LexicalTagger
    from metawave.core.repositories.note_repository import NoteRepository


def get_request_supabase_client(request: Request) -> Client:
    """Create a request-scoped Supabase client and set PostgREST bearer.

    Extracts the Authorization: Bearer <jwt> header if present and configures
    PostgREST to enforce RLS for the user.
    """
    auth_header = request.headers.get("authorization") or request.headers.get("Authorization")
    jwt: str | None = None
    if auth_header and auth_header.lower().startswith("bearer "):
        jwt = auth_header.split(" ", 1)[1].strip()
    return create_request_supabase_client(jwt)


def get_note_repository(client: Client = Depends(get_request_supabase_client)) -> NoteRepository:
    """Get a request-scoped note repository instance using request client."""
    return SupabaseNoteRepository(client)


# Analyzers are cheap to build (keyword tables are cached after the first
# load) and hold no state, so each request gets its own set.

def get_tagger() -> LexicalTagger:
    return RuleBasedTagger()


def get_emotion_scorer() -> AdvancedEmotionScorer:
    return AdvancedEmotionScorer()


def get_bias_evaluator() -> BiasEvaluator:
    return BiasEvaluator()


def get_loop_clusterer(tagger: LexicalTagger = Depends(get_tagger)) -> LoopClusterer:
    return LoopClusterer(tagger)


def get_pruning_scorer() -> PruningScorer:
    return PruningScorer()


def get_pattern_analyzer() -> PatternAnalyzer:
    return PatternAnalyzer()


def get_predictor() -> Predictor:
    return Predictor()


def get_analysis_service(
    repo: NoteRepository = Depends(get_note_repository),
    emotion: AdvancedEmotionScorer = Depends(get_emotion_scorer),
    biases: BiasEvaluator = Depends(get_bias_evaluator),
    loops: LoopClusterer = Depends(get_loop_clusterer),
    pruning: PruningScorer = Depends(get_pruning_scorer),
    patterns: PatternAnalyzer = Depends(get_pattern_analyzer),
    predictor: Predictor = Depends(get_predictor),
) -> AnalysisService:
    """Get a request-scoped analysis service instance."""
    return AnalysisService(repo, emotion, biases, loops, pruning, patterns, predictor)


async def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Security(http_bearer),
) -> AuthUser:
    """Validate JWT via Supabase and return authenticated user."""
    if not credentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication required",
            headers={"WWW-Authenticate": "Bearer"},
        )
    jwt = credentials.credentials
    if not jwt or len(jwt.split(".")) != 3:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token format",
            headers={"WWW-Authenticate": "Bearer"},
        )
    supabase = create_request_supabase_client(jwt)
    try:
        resp = await asyncio.to_thread(lambda: supabase.auth.get_user(jwt))
    except Exception as err:
        error_msg = str(err).lower()
        logger.warning(
            "JWT validation failed",
            extra={
                "error_type": type(err).__name__,
                "error_summary": error_msg[:100] if error_msg else "Unknown error",
            },
        )
        detail = "Token is invalid or expired" if ("invalid" in error_msg or "expired" in error_msg) else "Authentication failed"
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail,
            headers={"WWW-Authenticate": "Bearer"},
        ) from err

    user = getattr(resp, "user", None)
    user_id = getattr(user, "id", None)
    if not user or not user_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid user data",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return AuthUser(
        id=user_id,
        email=getattr(user, "email", None) or "",
        role=getattr(user, "role", None),
    )
