import uuid
from sqlalchemy import Column, Integer, String, DateTime, Boolean, Text, ForeignKey, JSON
from sqlalchemy.orm import relationship
from datetime import datetime
from mockprep.database import Base


CHOICE_TYPES = ("single_choice", "multiple_choice")
QUESTION_TYPES = CHOICE_TYPES + ("open_ended",)


def _uuid() -> str:
    return str(uuid.uuid4())


class QuestionItem(Base):
    __tablename__ = "question_items"

    id = Column(String(36), primary_key=True, default=_uuid)
    type = Column(String(30), nullable=False, default="single_choice")
    stem = Column(Text, nullable=False)
    explanation = Column(Text, nullable=True)

    # Classification
    category = Column(String(255), nullable=True, index=True)
    level = Column(String(50), nullable=True)  # intern, junior, middle, senior
    difficulty = Column(String(20), nullable=True)  # easy, medium, hard
    topics = Column(JSON, default=list)
    tags = Column(JSON, default=list)

    is_archived = Column(Boolean, default=False)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    options = relationship(
        "QuestionOption",
        back_populates="question",
        cascade="all, delete-orphan",
        order_by="QuestionOption.order",
    )


class QuestionOption(Base):
    __tablename__ = "question_options"

    id = Column(Integer, primary_key=True, index=True)
    question_id = Column(String(36), ForeignKey("question_items.id"), nullable=False, index=True)
    text = Column(Text, nullable=False)
    is_correct = Column(Boolean, default=False, nullable=False)
    order = Column(Integer, default=0, nullable=False)

    question = relationship("QuestionItem", back_populates="options")


class QuestionSet(Base):
    __tablename__ = "question_sets"

    id = Column(String(36), primary_key=True, default=_uuid)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    level = Column(String(50), nullable=True)
    topics = Column(JSON, default=list)
    status = Column(String(20), default="draft", nullable=False)  # draft, published

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    items = relationship(
        "QuestionSetQuestion",
        back_populates="question_set",
        cascade="all, delete-orphan",
        order_by="QuestionSetQuestion.order",
    )


class QuestionSetQuestion(Base):
    __tablename__ = "question_set_questions"

    id = Column(Integer, primary_key=True, index=True)
    question_set_id = Column(String(36), ForeignKey("question_sets.id"), nullable=False, index=True)
    question_id = Column(String(36), ForeignKey("question_items.id"), nullable=False)
    order = Column(Integer, default=0, nullable=False)

    question_set = relationship("QuestionSet", back_populates="items")
    question = relationship("QuestionItem")
