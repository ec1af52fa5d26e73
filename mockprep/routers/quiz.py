from typing import Optional
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from mockprep import config
from mockprep.database import get_db
from mockprep.dependencies import get_current_user
from mockprep.models.user import User
from mockprep.schemas.quiz import (
    AttemptItemsResponse,
    AttemptDetail,
    AttemptSummary,
    RetryQuizRequest,
    StartQuizRequest,
    SubmitQuizRequest,
    SubmitQuizResponse,
)
from mockprep.errors import UsageLimitExceeded
from mockprep.services import quiz_attempts
from mockprep.services.packages import can_use_service
from mockprep.services.shuffler import strip_correctness

router = APIRouter(prefix="/api/quiz", tags=["quiz"])


def _check_quiz_credit(db: Session, user: User) -> None:
    if config.ENFORCE_PACKAGE_LIMITS and not can_use_service(db, user.id, "test_quiz_eq"):
        raise UsageLimitExceeded("test_quiz_eq usage limit reached")


def _quiz_charge() -> Optional[str]:
    return "test_quiz_eq" if config.ENFORCE_PACKAGE_LIMITS else None


@router.post("/start", response_model=AttemptItemsResponse)
async def start_quiz(
    request: StartQuizRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Start an attempt from a published set or from filters."""
    _check_quiz_credit(db, current_user)
    attempt, items = quiz_attempts.start_attempt(
        db=db,
        user=current_user,
        question_set_id=request.question_set_id,
        category=request.category,
        topic=request.topic,
        level=request.level,
        tags=request.tags,
        count=request.count,
        charge_service=_quiz_charge(),
    )
    return AttemptItemsResponse(attempt_id=attempt.id, items=items)


@router.post("/retry", response_model=AttemptItemsResponse)
async def retry_quiz(
    request: RetryQuizRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Start a new attempt with the same questions, reshuffled."""
    _check_quiz_credit(db, current_user)
    attempt, items = quiz_attempts.retry_attempt(
        db=db,
        user=current_user,
        attempt_id=request.attempt_id,
        question_ids=[item.question_id for item in request.items] if request.items is not None else None,
        charge_service=_quiz_charge(),
    )
    return AttemptItemsResponse(attempt_id=attempt.id, items=items)


@router.post("/submit", response_model=SubmitQuizResponse)
async def submit_quiz(
    request: SubmitQuizRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Grade an attempt server-side and mark it completed."""
    attempt, result = quiz_attempts.submit_attempt(
        db=db,
        user=current_user,
        attempt_id=request.attempt_id,
        responses=[r.model_dump() for r in request.responses],
        time_used=request.time_used,
    )
    return SubmitQuizResponse(attempt_id=attempt.id, **result)


@router.get("/history", response_model=list[AttemptSummary])
async def get_quiz_history(
    limit: int = 50,
    offset: int = 0,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Completed attempts, newest first."""
    return quiz_attempts.get_history(db, current_user, limit=limit, offset=offset)


@router.get("/attempts/{attempt_id}", response_model=AttemptDetail)
async def get_attempt(
    attempt_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """An attempt the caller owns. Correct options are shown once completed."""
    attempt = quiz_attempts.get_owned_attempt(db, attempt_id, current_user)
    snapshot = attempt.items_snapshot or []
    if attempt.status == "completed":
        items = snapshot
    else:
        items = [strip_correctness(item) for item in snapshot]

    summary = AttemptSummary.model_validate(attempt)
    return AttemptDetail(**summary.model_dump(), items=items, responses=attempt.responses)


@router.delete("/attempts/{attempt_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_attempt(
    attempt_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    quiz_attempts.delete_attempt(db, current_user, attempt_id)
