"""Admin question bank and question set management."""

import logging
from typing import Optional
from sqlalchemy.orm import Session
from mockprep.errors import InvalidInput, NotFound
from mockprep.models.question import (
    QuestionItem,
    QuestionOption,
    QuestionSet,
    QuestionSetQuestion,
    CHOICE_TYPES,
    QUESTION_TYPES,
)

logger = logging.getLogger(__name__)

DIFFICULTIES = ("easy", "medium", "hard")


def normalize_difficulty(value, fallback: Optional[str] = None) -> Optional[str]:
    """Accept a label or a 1-5 rating and return easy/medium/hard."""
    if value is None:
        return fallback
    label = str(value).strip().lower()
    if label in DIFFICULTIES:
        return label
    try:
        rating = float(label)
    except ValueError:
        return fallback
    if rating <= 2:
        return "easy"
    if rating <= 3:
        return "medium"
    return "hard"


def _validate_question(question_type: str, options: list[dict]) -> None:
    if question_type not in QUESTION_TYPES:
        raise InvalidInput(f"Unknown question type: {question_type}")
    if question_type not in CHOICE_TYPES:
        return
    if len(options) < 2:
        raise InvalidInput("Choice questions need at least two options")
    correct = sum(1 for o in options if o.get("is_correct"))
    if correct == 0:
        raise InvalidInput("Choice questions need at least one correct option")
    if question_type == "single_choice" and correct != 1:
        raise InvalidInput("Single choice questions need exactly one correct option")


def _build_options(options: list[dict]) -> list[QuestionOption]:
    return [
        QuestionOption(text=o["text"], is_correct=bool(o.get("is_correct")), order=index)
        for index, o in enumerate(options)
    ]


def create_question(db: Session, data: dict, commit: bool = True) -> QuestionItem:
    options = data.get("options") or []
    question_type = data.get("type") or "single_choice"
    _validate_question(question_type, options)

    question = QuestionItem(
        type=question_type,
        stem=data["stem"],
        explanation=data.get("explanation"),
        category=data.get("category"),
        level=data.get("level"),
        difficulty=normalize_difficulty(data.get("difficulty")),
        topics=list(data.get("topics") or []),
        tags=list(data.get("tags") or []),
        options=_build_options(options),
    )
    db.add(question)
    if commit:
        db.commit()
        db.refresh(question)
    return question


def get_question(db: Session, question_id: str) -> QuestionItem:
    question = db.query(QuestionItem).filter(QuestionItem.id == question_id).first()
    if not question:
        raise NotFound("Question not found")
    return question


def list_questions(
    db: Session,
    search: Optional[str] = None,
    category: Optional[str] = None,
    level: Optional[str] = None,
    question_type: Optional[str] = None,
    include_archived: bool = False,
    page: int = 1,
    page_size: int = 20,
) -> tuple[list[QuestionItem], int]:
    query = db.query(QuestionItem)
    if search:
        query = query.filter(QuestionItem.stem.ilike(f"%{search}%"))
    if category:
        query = query.filter(QuestionItem.category == category)
    if level:
        query = query.filter(QuestionItem.level == level)
    if question_type:
        query = query.filter(QuestionItem.type == question_type)
    if not include_archived:
        query = query.filter(QuestionItem.is_archived == False)  # noqa: E712

    total = query.count()
    page = max(1, page)
    items = (
        query.order_by(QuestionItem.created_at.desc())
        .offset((page - 1) * page_size)
        .limit(page_size)
        .all()
    )
    return items, total


def update_question(db: Session, question_id: str, data: dict) -> QuestionItem:
    """Update fields that are present; a given option list replaces the old one."""
    question = get_question(db, question_id)

    question_type = data.get("type") or question.type
    options = data.get("options")
    if options is not None:
        _validate_question(question_type, options)
    elif question_type != question.type:
        _validate_question(
            question_type,
            [{"text": o.text, "is_correct": o.is_correct} for o in question.options],
        )

    for field in ("stem", "explanation", "category", "level", "topics", "tags", "is_archived"):
        if data.get(field) is not None:
            setattr(question, field, data[field])
    question.type = question_type
    if "difficulty" in data and data["difficulty"] is not None:
        question.difficulty = normalize_difficulty(data["difficulty"], question.difficulty)

    if options is not None:
        question.options = _build_options(options)

    db.commit()
    db.refresh(question)
    return question


def delete_questions(db: Session, question_ids: list[str]) -> int:
    """Delete questions and their set memberships. Returns the count removed."""
    if not question_ids:
        raise InvalidInput("No question ids provided")
    questions = db.query(QuestionItem).filter(QuestionItem.id.in_(question_ids)).all()
    if not questions:
        raise NotFound("Question not found")

    db.query(QuestionSetQuestion).filter(
        QuestionSetQuestion.question_id.in_([q.id for q in questions])
    ).delete(synchronize_session=False)
    for question in questions:
        db.delete(question)
    db.commit()

    logger.info("Deleted %d questions", len(questions))
    return len(questions)


# Question sets

def get_question_set(db: Session, set_id: str) -> QuestionSet:
    question_set = db.query(QuestionSet).filter(QuestionSet.id == set_id).first()
    if not question_set:
        raise NotFound("Question set not found")
    return question_set


def _set_items(db: Session, question_set: QuestionSet, question_ids: list[str]) -> None:
    if len(set(question_ids)) != len(question_ids):
        raise InvalidInput("Duplicate question ids in set")
    existing = {
        q.id for q in db.query(QuestionItem.id).filter(QuestionItem.id.in_(question_ids)).all()
    }
    missing = [qid for qid in question_ids if qid not in existing]
    if missing:
        raise NotFound(f"Questions not found: {', '.join(missing)}")
    question_set.items = [
        QuestionSetQuestion(question_id=qid, order=index)
        for index, qid in enumerate(question_ids)
    ]


def create_question_set(db: Session, data: dict) -> QuestionSet:
    question_set = QuestionSet(
        name=data["name"],
        description=data.get("description"),
        level=data.get("level"),
        topics=list(data.get("topics") or []),
        status="draft",
    )
    db.add(question_set)
    _set_items(db, question_set, list(data.get("question_ids") or []))
    db.commit()
    db.refresh(question_set)
    return question_set


def replace_set_items(db: Session, set_id: str, question_ids: list[str]) -> QuestionSet:
    question_set = get_question_set(db, set_id)
    _set_items(db, question_set, question_ids)
    db.commit()
    db.refresh(question_set)
    return question_set


def publish_question_set(db: Session, set_id: str) -> QuestionSet:
    question_set = get_question_set(db, set_id)
    if not question_set.items:
        raise InvalidInput("Cannot publish an empty question set")
    question_set.status = "published"
    db.commit()
    db.refresh(question_set)
    logger.info("Published question set %s", set_id)
    return question_set


def question_set_to_dict(question_set: QuestionSet) -> dict:
    return {
        "id": question_set.id,
        "name": question_set.name,
        "description": question_set.description,
        "level": question_set.level,
        "topics": question_set.topics or [],
        "status": question_set.status,
        "question_ids": [entry.question_id for entry in question_set.items],
        "created_at": question_set.created_at,
    }
