from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime


class OptionIn(BaseModel):
    text: str
    is_correct: bool = False


class QuestionCreate(BaseModel):
    type: str = "single_choice"
    stem: str
    explanation: Optional[str] = None
    category: Optional[str] = None
    level: Optional[str] = None
    difficulty: Optional[str] = None
    topics: list[str] = []
    tags: list[str] = []
    options: list[OptionIn] = []


class QuestionUpdate(BaseModel):
    type: Optional[str] = None
    stem: Optional[str] = None
    explanation: Optional[str] = None
    category: Optional[str] = None
    level: Optional[str] = None
    difficulty: Optional[str] = None
    topics: Optional[list[str]] = None
    tags: Optional[list[str]] = None
    is_archived: Optional[bool] = None
    options: Optional[list[OptionIn]] = None


class OptionResponse(BaseModel):
    id: int
    text: str
    is_correct: bool
    order: int

    class Config:
        from_attributes = True


class QuestionResponse(BaseModel):
    id: str
    type: str
    stem: str
    explanation: Optional[str]
    category: Optional[str]
    level: Optional[str]
    difficulty: Optional[str]
    topics: list[str]
    tags: list[str]
    is_archived: bool
    options: list[OptionResponse]
    created_at: datetime

    class Config:
        from_attributes = True


class QuestionListResponse(BaseModel):
    items: list[QuestionResponse]
    total: int
    page: int
    page_size: int


class BulkDeleteRequest(BaseModel):
    ids: list[str]


class QuestionSetCreate(BaseModel):
    name: str
    description: Optional[str] = None
    level: Optional[str] = None
    topics: list[str] = []
    question_ids: list[str] = []


class QuestionSetItemsRequest(BaseModel):
    question_ids: list[str]


class QuestionSetResponse(BaseModel):
    id: str
    name: str
    description: Optional[str]
    level: Optional[str]
    topics: list[str]
    status: str
    question_ids: list[str]
    created_at: datetime


class GenerateQuestionsRequest(BaseModel):
    topic: str
    level: str = "junior"
    category: Optional[str] = None
    type: str = "single_choice"
    count: int = Field(default=5, ge=1, le=20)
