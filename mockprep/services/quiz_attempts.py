"""Quiz attempt lifecycle: start, retry, submit, history."""

import logging
import random
from datetime import datetime
from typing import Optional
from sqlalchemy.orm import Session
from mockprep.config import MAX_QUIZ_QUESTIONS
from mockprep.errors import InvalidInput, NotFound, Unauthorized
from mockprep.models.question import QuestionItem, QuestionSet, CHOICE_TYPES
from mockprep.models.quiz_attempt import QuizAttempt
from mockprep.models.user import User
from mockprep.services.grading import grade_attempt
from mockprep.services.packages import consume_service
from mockprep.services.shuffler import shuffle_for_retry, strip_correctness, validate_items

logger = logging.getLogger(__name__)


def snapshot_item(question: QuestionItem) -> dict:
    """Freeze a bank question into an attempt snapshot item."""
    return {
        "question_id": question.id,
        "stem": question.stem,
        "type": question.type,
        "explanation": question.explanation,
        "options": [
            {"text": option.text, "is_correct": bool(option.is_correct)}
            for option in question.options
        ],
    }


def _choice_questions(db: Session):
    return db.query(QuestionItem).filter(
        QuestionItem.type.in_(CHOICE_TYPES),
        QuestionItem.is_archived == False,  # noqa: E712
    )


def _select_from_set(db: Session, question_set_id: str) -> list[QuestionItem]:
    question_set = db.query(QuestionSet).filter(QuestionSet.id == question_set_id).first()
    if not question_set or question_set.status != "published":
        raise NotFound("Question set not available")
    return [
        entry.question
        for entry in question_set.items
        if entry.question.type in CHOICE_TYPES and not entry.question.is_archived
    ]


def _select_by_filters(
    db: Session,
    category: Optional[str],
    topic: Optional[str],
    level: Optional[str],
    tags: Optional[str],
    count: int,
    rng: random.Random,
) -> list[QuestionItem]:
    query = _choice_questions(db)
    if category:
        query = query.filter(QuestionItem.category == category)
    if level:
        query = query.filter(QuestionItem.level == level)
    pool = query.all()

    # JSON list columns are filtered in Python to stay portable across backends
    if topic:
        pool = [q for q in pool if topic in (q.topics or [])]
    if tags:
        wanted = {t.strip() for t in tags.split(",") if t.strip()}
        pool = [q for q in pool if wanted.intersection(q.tags or [])]

    count = max(1, min(MAX_QUIZ_QUESTIONS, count))
    rng.shuffle(pool)
    return pool[:count]


def start_attempt(
    db: Session,
    user: User,
    question_set_id: Optional[str] = None,
    category: Optional[str] = None,
    topic: Optional[str] = None,
    level: Optional[str] = None,
    tags: Optional[str] = None,
    count: int = 10,
    rng: Optional[random.Random] = None,
    charge_service: Optional[str] = None,
) -> tuple[QuizAttempt, list[dict]]:
    """Create an in-progress attempt from a published set or from filters.

    When ``charge_service`` is given, one credit of it is spent in the same
    commit that stores the attempt.
    """
    rng = rng or random.SystemRandom()
    if question_set_id:
        questions = _select_from_set(db, question_set_id)
    else:
        questions = _select_by_filters(db, category, topic, level, tags, count, rng)

    if not questions:
        raise NotFound("No questions found for the specified criteria")

    items = [snapshot_item(q) for q in questions]
    validate_items(items)

    attempt = QuizAttempt(
        user_id=user.id,
        question_set_id=question_set_id,
        status="in_progress",
        items_snapshot=items,
        answer_mapping=None,
        total_questions=len(items),
    )
    if charge_service:
        consume_service(db, user.id, charge_service, commit=False)
    db.add(attempt)
    db.commit()
    db.refresh(attempt)

    logger.info("Started attempt %s for user %s with %d questions", attempt.id, user.id, len(items))
    return attempt, [strip_correctness(item) for item in items]


def get_owned_attempt(db: Session, attempt_id: str, user: User) -> QuizAttempt:
    attempt = db.query(QuizAttempt).filter(QuizAttempt.id == attempt_id).first()
    if not attempt:
        raise NotFound("Attempt not found")
    if attempt.user_id != user.id:
        raise Unauthorized("You do not have access to this attempt")
    return attempt


def _items_from_bank(db: Session, question_ids: list[str]) -> list[dict]:
    if not question_ids:
        raise InvalidInput("No questions provided")
    if len(set(question_ids)) != len(question_ids):
        raise InvalidInput("Duplicate question ids in retry request")

    found = {
        q.id: q
        for q in db.query(QuestionItem).filter(QuestionItem.id.in_(question_ids)).all()
    }
    missing = [qid for qid in question_ids if qid not in found or found[qid].is_archived]
    if missing:
        raise NotFound(f"Questions not found: {', '.join(missing)}")
    not_gradable = [qid for qid in question_ids if found[qid].type not in CHOICE_TYPES]
    if not_gradable:
        raise InvalidInput(f"Only choice questions can be retried: {', '.join(not_gradable)}")
    return [snapshot_item(found[qid]) for qid in question_ids]


def retry_attempt(
    db: Session,
    user: User,
    attempt_id: Optional[str] = None,
    question_ids: Optional[list[str]] = None,
    rng: Optional[random.Random] = None,
    charge_service: Optional[str] = None,
) -> tuple[QuizAttempt, list[dict]]:
    """Create a new attempt with the same questions, reshuffled.

    The source is either a previous attempt owned by ``user`` (its served
    snapshot is reshuffled) or a list of bank question ids. Nothing is
    persisted when the source is invalid.
    """
    original = None
    if attempt_id:
        original = get_owned_attempt(db, attempt_id, user)
        source_items = original.items_snapshot or []
    elif question_ids is not None:
        source_items = _items_from_bank(db, question_ids)
    else:
        raise InvalidInput("Provide an attempt id or a list of questions")

    shuffled = shuffle_for_retry(source_items, rng=rng)

    attempt = QuizAttempt(
        user_id=user.id,
        question_set_id=original.question_set_id if original else None,
        status="in_progress",
        items_snapshot=shuffled.shuffled_questions,
        answer_mapping=shuffled.answer_mapping,
        total_questions=len(shuffled.shuffled_questions),
        retry_of_id=original.id if original else None,
        retry_count=(original.retry_count + 1) if original else 0,
    )
    if charge_service:
        consume_service(db, user.id, charge_service, commit=False)
    db.add(attempt)
    db.commit()
    db.refresh(attempt)

    logger.info(
        "Created retry attempt %s for user %s (source attempt %s)",
        attempt.id, user.id, original.id if original else None,
    )
    return attempt, shuffled.questions_for_ui


def submit_attempt(
    db: Session,
    user: User,
    attempt_id: str,
    responses: list[dict],
    time_used: int = 0,
) -> tuple[QuizAttempt, dict]:
    """Grade and complete an in-progress attempt."""
    attempt = get_owned_attempt(db, attempt_id, user)
    if attempt.status != "in_progress":
        raise InvalidInput("Attempt is already completed")

    result = grade_attempt(attempt.items_snapshot or [], attempt.answer_mapping, responses)

    attempt.responses = responses
    attempt.score = result["score"]
    attempt.correct_count = result["correct_count"]
    attempt.time_used = time_used
    attempt.status = "completed"
    attempt.completed_at = datetime.utcnow()
    db.commit()
    db.refresh(attempt)

    logger.info(
        "Attempt %s completed: %d/%d correct, score %d",
        attempt.id, result["correct_count"], result["total_questions"], result["score"],
    )
    return attempt, result


def get_history(db: Session, user: User, limit: int = 50, offset: int = 0) -> list[QuizAttempt]:
    return (
        db.query(QuizAttempt)
        .filter(QuizAttempt.user_id == user.id, QuizAttempt.status == "completed")
        .order_by(QuizAttempt.completed_at.desc())
        .offset(offset)
        .limit(limit)
        .all()
    )


def delete_attempt(db: Session, user: User, attempt_id: str) -> None:
    attempt = get_owned_attempt(db, attempt_id, user)
    # Later retries keep their own snapshot; only the back-reference goes
    db.query(QuizAttempt).filter(QuizAttempt.retry_of_id == attempt.id).update(
        {QuizAttempt.retry_of_id: None}, synchronize_session=False
    )
    db.delete(attempt)
    db.commit()
    logger.info("Deleted attempt %s for user %s", attempt_id, user.id)
