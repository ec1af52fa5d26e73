from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime
from mockprep.config import INTERVIEW_QUESTIONS, MAX_INTERVIEW_QUESTIONS


class StartInterviewRequest(BaseModel):
    role: str
    company: Optional[str] = None
    level: str = "junior"
    max_questions: int = Field(default=INTERVIEW_QUESTIONS, ge=1, le=MAX_INTERVIEW_QUESTIONS)


class StartInterviewResponse(BaseModel):
    session_id: str
    question: str
    question_number: int
    total_questions: int


class InterviewAnswerRequest(BaseModel):
    answer: str


class InterviewTurnResponse(BaseModel):
    session_id: str
    completed: bool
    answer_score: float
    next_question: Optional[str] = None
    question_number: int
    total_questions: int
    final_score: Optional[int] = None
    evaluation: Optional[dict] = None


class InterviewSummary(BaseModel):
    id: str
    role: str
    company: Optional[str]
    level: Optional[str]
    status: str
    questions_asked: int
    max_questions: int
    final_score: Optional[int]
    started_at: datetime
    completed_at: Optional[datetime]

    class Config:
        from_attributes = True


class InterviewDetail(InterviewSummary):
    conversation: list[dict]
    scores: list[float]
    evaluation: Optional[dict] = None
