from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from mockprep import config
from mockprep.database import get_db
from mockprep.dependencies import get_current_user, get_llm_client
from mockprep.errors import UsageLimitExceeded
from mockprep.models.user import User
from mockprep.schemas.interview import (
    InterviewAnswerRequest,
    InterviewDetail,
    InterviewSummary,
    InterviewTurnResponse,
    StartInterviewRequest,
    StartInterviewResponse,
)
from mockprep.services import interviews
from mockprep.services.packages import can_use_service

router = APIRouter(prefix="/api/interview", tags=["interview"])


@router.post("/start", response_model=StartInterviewResponse)
async def start_interview(
    request: StartInterviewRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    client=Depends(get_llm_client),
):
    """Start a mock interview; the first question comes back immediately."""
    enforce = config.ENFORCE_PACKAGE_LIMITS
    if enforce and not can_use_service(db, current_user.id, "avatar_interview"):
        raise UsageLimitExceeded("avatar_interview usage limit reached")

    session = await interviews.start_interview(
        db,
        current_user,
        role=request.role,
        company=request.company,
        level=request.level,
        max_questions=request.max_questions,
        client=client,
        charge_service="avatar_interview" if enforce else None,
    )
    return StartInterviewResponse(
        session_id=session.id,
        question=session.conversation[-1]["content"],
        question_number=session.questions_asked,
        total_questions=session.max_questions,
    )


@router.post("/{session_id}/respond", response_model=InterviewTurnResponse)
async def respond(
    session_id: str,
    request: InterviewAnswerRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    client=Depends(get_llm_client),
):
    """Answer the current question. Returns the next one, or the evaluation."""
    session, score = await interviews.answer_question(
        db, current_user, session_id, request.answer, client=client
    )
    completed = session.status == "completed"
    return InterviewTurnResponse(
        session_id=session.id,
        completed=completed,
        answer_score=score,
        next_question=None if completed else session.conversation[-1]["content"],
        question_number=session.questions_asked,
        total_questions=session.max_questions,
        final_score=session.final_score,
        evaluation=session.evaluation,
    )


@router.get("/history", response_model=list[InterviewSummary])
async def get_interview_history(
    limit: int = 50,
    offset: int = 0,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return interviews.list_interviews(db, current_user, limit=limit, offset=offset)


@router.get("/{session_id}", response_model=InterviewDetail)
async def get_interview(
    session_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return interviews.get_owned_interview(db, session_id, current_user)
