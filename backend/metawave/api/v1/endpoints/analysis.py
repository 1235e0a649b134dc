from __future__ import annotations

from typing import TYPE_CHECKING
from uuid import UUID  # noqa: TCH003

from fastapi import APIRouter, Depends, HTTPException, status

from metawave.api.v1.schemas.analysis import (
    BiasReport,
    EmotionAnalysisResponse,
    EmotionRequest,
    NoteEmotionRead,
    PruningExecuteRequest,
    PruningExecuteResponse,
)
from metawave.core.errors import NoteNotFoundError, PersistenceError
from metawave.core.models.analysis import (
    AnalysisReport,
    LoopCluster,
    PatternReport,
    Prediction,
    PruningCandidate,
)
from metawave.dependencies import get_analysis_service, get_current_user
from metawave.utils.logging import get_logger

if TYPE_CHECKING:
    from metawave.core.schemas.auth import AuthUser
    from metawave.core.services.analysis_service import AnalysisService

router = APIRouter()
logger = get_logger(__name__)

STORAGE_UNAVAILABLE = "Note storage is unavailable, try again later"


def _unavailable(err: PersistenceError) -> HTTPException:
    logger.warning("Analysis request failed on storage: %s", err)
    return HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=STORAGE_UNAVAILABLE)


@router.post("/emotion", response_model=EmotionAnalysisResponse)
async def analyze_emotion(
    payload: EmotionRequest,
    current_user: AuthUser = Depends(get_current_user),
    service: AnalysisService = Depends(get_analysis_service),
):
    result = service.analyze_multiple_emotions(payload.text)
    return EmotionAnalysisResponse(
        score=result.base_score,
        emotions=result.scores,
        primary_emotion=result.primary_emotion,
        secondary_emotions=result.secondary_emotions,
        intensity=result.intensity,
        emotion_intensity=service.emotion_intensity(payload.text),
        context=result.context,
        shift=service.detect_emotional_shift(payload.text),
    )


@router.post("/notes/{note_id}/emotion", response_model=NoteEmotionRead)
async def score_note_emotion(
    note_id: UUID,
    current_user: AuthUser = Depends(get_current_user),
    service: AnalysisService = Depends(get_analysis_service),
):
    try:
        note = await service.score_note(note_id)
    except NoteNotFoundError as err:
        raise HTTPException(status_code=404, detail="Note not found") from err
    except PersistenceError as err:
        raise _unavailable(err) from err
    return NoteEmotionRead(note_id=note.id, emotion_score=note.emotion_score)


@router.get("/loops", response_model=list[LoopCluster])
async def detect_loops(
    current_user: AuthUser = Depends(get_current_user),
    service: AnalysisService = Depends(get_analysis_service),
):
    try:
        return await service.detect_loops(current_user.id)
    except PersistenceError as err:
        raise _unavailable(err) from err


@router.get("/biases", response_model=BiasReport)
async def detect_biases(
    current_user: AuthUser = Depends(get_current_user),
    service: AnalysisService = Depends(get_analysis_service),
):
    try:
        signals = await service.detect_biases(current_user.id)
    except PersistenceError as err:
        raise _unavailable(err) from err
    return BiasReport(signals=signals)


@router.get("/pruning", response_model=list[PruningCandidate])
async def find_pruning_candidates(
    current_user: AuthUser = Depends(get_current_user),
    service: AnalysisService = Depends(get_analysis_service),
):
    try:
        return await service.find_pruning_candidates(current_user.id)
    except PersistenceError as err:
        raise _unavailable(err) from err


@router.post("/pruning/execute", response_model=PruningExecuteResponse)
async def execute_pruning(
    payload: PruningExecuteRequest,
    current_user: AuthUser = Depends(get_current_user),
    service: AnalysisService = Depends(get_analysis_service),
):
    try:
        deleted = await service.execute_pruning(payload.candidates)
    except PersistenceError as err:
        raise _unavailable(err) from err
    return PruningExecuteResponse(deleted=deleted)


@router.get("/report", response_model=AnalysisReport)
async def comprehensive_report(
    current_user: AuthUser = Depends(get_current_user),
    service: AnalysisService = Depends(get_analysis_service),
):
    try:
        return await service.comprehensive_analysis(current_user.id)
    except PersistenceError as err:
        raise _unavailable(err) from err


@router.get("/patterns", response_model=PatternReport)
async def time_patterns(
    current_user: AuthUser = Depends(get_current_user),
    service: AnalysisService = Depends(get_analysis_service),
):
    try:
        return await service.analyze_patterns(current_user.id)
    except PersistenceError as err:
        raise _unavailable(err) from err


@router.get("/predictions", response_model=list[Prediction])
async def predictions(
    current_user: AuthUser = Depends(get_current_user),
    service: AnalysisService = Depends(get_analysis_service),
):
    try:
        return await service.predict(current_user.id)
    except PersistenceError as err:
        raise _unavailable(err) from err
