"""Text mock interviews: the LLM asks, scores each answer and evaluates at the end."""

import logging
import math
import re
from collections import Counter
from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session

from mockprep.config import GEMINI_MODEL, MAX_INTERVIEW_QUESTIONS
from mockprep.errors import GenerationError, InvalidInput, NotFound, Unauthorized
from mockprep.models.interview import InterviewSession
from mockprep.models.user import User
from mockprep.services.packages import consume_service
from mockprep.services.question_generator import (
    call_gemini_with_retry_async,
    extract_first_json_object,
    get_client,
)

logger = logging.getLogger(__name__)

HIRING_RECOMMENDATIONS = ("strong_hire", "hire", "consider", "reject")
SKILL_SCORES = ("technical", "communication", "problem_solving", "culture_fit")

# Used when the model's answer score cannot be read
FALLBACK_ANSWER_SCORE = 50.0


def _norm_text(text: str) -> str:
    return re.sub(r"\s+", " ", (text or "").strip())


def is_non_answer(text: str) -> bool:
    """Spot filler, skips and keyboard mashing without asking the model."""
    text = _norm_text(text)
    if not text:
        return True
    lower = text.casefold()

    if re.search(r"\b(pass|skip|n/?a|no\s+comment|prefer\s+not\s+to\s+say)\b", lower):
        return True
    if re.search(r"\b(idk|i\s+don'?t\s+know|no\s+idea|whatever)\b", lower) and len(lower) < 120:
        return True
    if re.search(r"\b(asdf|qwer|lorem|ipsum|blah)\b", lower):
        return True

    words = re.findall(r"[a-zA-Z']+", lower)
    if len(words) < 6:
        return True
    top = Counter(words).most_common(1)[0][1]
    if len(words) >= 10 and top / len(words) >= 0.45:
        return True

    alpha = len(re.findall(r"[A-Za-z]", text))
    non_space = len(re.findall(r"\S", text))
    if alpha / non_space < 0.35:
        return True
    if len(words) >= 25 and len(set(words)) / len(words) < 0.25:
        return True
    return False


def parse_score(text: str) -> Optional[float]:
    """First number in a model reply, clamped to 0-100."""
    match = re.search(r"-?\d+(?:\.\d+)?", text or "")
    if not match:
        return None
    return max(0.0, min(100.0, float(match.group())))


def average_score(scores: list[float]) -> int:
    if not scores:
        return 0
    return int(math.floor(sum(scores) / len(scores) + 0.5))


def transcript(conversation: list[dict]) -> str:
    return "\n".join(f"{m['role'].title()}: {m['content']}" for m in conversation)


def build_first_question_prompt(role: str, company: Optional[str], level: str) -> str:
    return f"""You are an interviewer at {company or "a software company"} conducting an interview
for a {level} {role} position. Ask the first question. Make it relevant to the role
and keep it concise and professional (1-2 sentences). Return only the question."""


def build_next_question_prompt(session: InterviewSession, conversation: list[dict]) -> str:
    number = session.questions_asked + 1
    return f"""You are an interviewer at {session.company or "a software company"} interviewing a
{session.level} candidate for a {session.role} position.

Conversation so far:
{transcript(conversation)}

Ask question {number} of {session.max_questions}. Make it different from the previous
questions, mix technical and behavioral angles, and follow up on the candidate's last
answer where it helps. Keep it to 1-2 sentences. Return only the question."""


def build_answer_score_prompt(question: str, answer: str) -> str:
    return f"""You are an expert interview evaluator. Rate the candidate's answer from 0 to 100.

Criteria, 25 points each:
1. Communication and clarity
2. Relevance and specificity (concrete examples)
3. Problem-solving approach
4. Professionalism

Question: "{question}"
Answer: "{answer}"

Respond with only a number from 0 to 100."""


def build_evaluation_prompt(session: InterviewSession, conversation: list[dict]) -> str:
    return f"""You interviewed a {session.level} candidate for a {session.role} position.

Transcript:
{transcript(conversation)}

Evaluate the candidate. Respond with JSON only, in this shape:
{{"technical": 1-10, "communication": 1-10, "problem_solving": 1-10, "culture_fit": 1-10,
"strengths": ["..."], "weaknesses": ["..."], "recommendations": ["..."],
"hiring_recommendation": "strong_hire|hire|consider|reject", "summary": "..."}}"""


def _string_list(value) -> list[str]:
    if not isinstance(value, list):
        return []
    return [str(v).strip() for v in value if str(v).strip()]


def validate_evaluation(payload: dict) -> dict:
    """Clamp skill scores to 1-10 and drop anything malformed."""
    evaluation = {}
    for skill in SKILL_SCORES:
        try:
            evaluation[skill] = max(1, min(10, int(round(float(payload.get(skill))))))
        except (TypeError, ValueError):
            evaluation[skill] = None

    recommendation = str(payload.get("hiring_recommendation") or "").strip().lower()
    evaluation["hiring_recommendation"] = (
        recommendation if recommendation in HIRING_RECOMMENDATIONS else "consider"
    )
    evaluation["strengths"] = _string_list(payload.get("strengths"))
    evaluation["weaknesses"] = _string_list(payload.get("weaknesses"))
    evaluation["recommendations"] = _string_list(payload.get("recommendations"))
    evaluation["summary"] = str(payload.get("summary") or "").strip() or None
    return evaluation


async def _ask(client, prompt: str) -> str:
    response = await call_gemini_with_retry_async(client, GEMINI_MODEL, prompt)
    text = (response.text or "").strip()
    if not text:
        raise GenerationError("Model returned an empty reply")
    return text


async def start_interview(
    db: Session,
    user: User,
    role: str,
    company: Optional[str] = None,
    level: str = "junior",
    max_questions: int = 3,
    client=None,
    charge_service: Optional[str] = None,
) -> InterviewSession:
    """Open a session with the model's first question.

    When ``charge_service`` is given, one credit of it is spent in the same
    commit that stores the session.
    """
    role = (role or "").strip()
    if not role:
        raise InvalidInput("Role is required")
    if max_questions < 1 or max_questions > MAX_INTERVIEW_QUESTIONS:
        raise InvalidInput(f"max_questions must be between 1 and {MAX_INTERVIEW_QUESTIONS}")

    client = client or get_client()
    first_question = await _ask(client, build_first_question_prompt(role, company, level))

    session = InterviewSession(
        user_id=user.id,
        role=role,
        company=company,
        level=level,
        status="in_progress",
        max_questions=max_questions,
        questions_asked=1,
        conversation=[{"role": "interviewer", "content": first_question}],
        scores=[],
    )
    if charge_service:
        consume_service(db, user.id, charge_service, commit=False)
    db.add(session)
    db.commit()
    db.refresh(session)

    logger.info("Started interview %s for user %s (%s)", session.id, user.id, role)
    return session


def get_owned_interview(db: Session, session_id: str, user: User) -> InterviewSession:
    session = db.query(InterviewSession).filter(InterviewSession.id == session_id).first()
    if not session:
        raise NotFound("Interview not found")
    if session.user_id != user.id:
        raise Unauthorized("You do not have access to this interview")
    return session


async def answer_question(
    db: Session,
    user: User,
    session_id: str,
    answer: str,
    client=None,
) -> tuple[InterviewSession, float]:
    """Score the answer to the current question, then ask the next one or finish.

    Returns the updated session and the score given to this answer. The
    session is only written once every model call has succeeded.
    """
    session = get_owned_interview(db, session_id, user)
    if session.status != "in_progress":
        raise InvalidInput("Interview is already completed")
    answer = _norm_text(answer)
    if not answer:
        raise InvalidInput("Answer is empty")

    client = client or get_client()
    conversation = list(session.conversation or [])
    question = next(
        (m["content"] for m in reversed(conversation) if m["role"] == "interviewer"), ""
    )
    conversation.append({"role": "candidate", "content": answer})

    if is_non_answer(answer):
        score = 0.0
    else:
        score = parse_score(await _ask(client, build_answer_score_prompt(question, answer)))
        if score is None:
            logger.warning("Unreadable answer score for interview %s, using %s", session.id, FALLBACK_ANSWER_SCORE)
            score = FALLBACK_ANSWER_SCORE
    scores = list(session.scores or []) + [score]

    if len(scores) >= session.max_questions:
        reply = await _ask(client, build_evaluation_prompt(session, conversation))
        session.evaluation = validate_evaluation(extract_first_json_object(reply))
        session.final_score = average_score(scores)
        session.status = "completed"
        session.completed_at = datetime.utcnow()
        logger.info("Interview %s completed with score %d", session.id, session.final_score)
    else:
        next_question = await _ask(client, build_next_question_prompt(session, conversation))
        conversation.append({"role": "interviewer", "content": next_question})
        session.questions_asked += 1

    # JSON columns are reassigned so the change is flushed
    session.conversation = conversation
    session.scores = scores
    db.commit()
    db.refresh(session)
    return session, score


def list_interviews(db: Session, user: User, limit: int = 50, offset: int = 0) -> list[InterviewSession]:
    return (
        db.query(InterviewSession)
        .filter(InterviewSession.user_id == user.id)
        .order_by(InterviewSession.started_at.desc())
        .offset(offset)
        .limit(limit)
        .all()
    )
