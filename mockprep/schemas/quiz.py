from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel
from typing import Optional, Union
from datetime import datetime
from mockprep.config import DEFAULT_QUIZ_QUESTIONS


class CamelModel(BaseModel):
    """Quiz payloads use camelCase on the wire."""

    class Config:
        alias_generator = to_camel
        populate_by_name = True


class OptionForUI(CamelModel):
    text: str


class QuizItem(CamelModel):
    question_id: str
    stem: str
    type: str
    options: list[OptionForUI] = []


class AttemptItemsResponse(CamelModel):
    attempt_id: str
    items: list[QuizItem]


class StartQuizRequest(CamelModel):
    question_set_id: Optional[str] = None
    category: Optional[str] = None
    topic: Optional[str] = None
    level: Optional[str] = None
    tags: Optional[str] = None  # comma separated
    count: int = DEFAULT_QUIZ_QUESTIONS


class RetryItem(CamelModel):
    question_id: str


class RetryQuizRequest(CamelModel):
    attempt_id: Optional[str] = None
    items: Optional[list[RetryItem]] = None


class ResponseItem(CamelModel):
    question_id: str
    answer: Union[list[int], int, None] = None


class SubmitQuizRequest(CamelModel):
    attempt_id: str
    responses: list[ResponseItem]
    time_used: int = Field(default=0, ge=0)


class GradedQuestion(CamelModel):
    question_id: str
    given: list[int]
    correct: list[int]
    is_right: bool
    explanation: Optional[str] = None


class SubmitQuizResponse(CamelModel):
    attempt_id: str
    score: int
    correct_count: int
    total_questions: int
    details: list[GradedQuestion]


class AttemptSummary(CamelModel):
    id: str
    status: str
    question_set_id: Optional[str]
    score: Optional[int]
    correct_count: Optional[int]
    total_questions: int
    time_used: Optional[int]
    retry_of_id: Optional[str]
    retry_count: int
    started_at: datetime
    completed_at: Optional[datetime]

    class Config:
        alias_generator = to_camel
        populate_by_name = True
        from_attributes = True


class AttemptDetail(AttemptSummary):
    items: list[dict]
    responses: Optional[list[dict]] = None
