"""LLM-backed question generation (JD interview questions, bank questions)."""

import asyncio
import io
import json
import logging
import time
from typing import Any, Optional

import PyPDF2
from google import genai

from mockprep.config import GEMINI_API_KEY, GEMINI_MODEL
from mockprep.errors import GenerationError, InvalidInput
from mockprep.models.question import CHOICE_TYPES

logger = logging.getLogger(__name__)

MAX_JD_CHARS = 12000

_client: Optional[genai.Client] = None


def get_client() -> genai.Client:
    """Lazily build the Gemini client so the app starts without a key."""
    global _client
    if _client is None:
        if not GEMINI_API_KEY:
            raise GenerationError("GEMINI_API_KEY is not configured")
        _client = genai.Client(api_key=GEMINI_API_KEY)
    return _client


def extract_text_from_pdf(pdf_file: bytes) -> str:
    """Extract text from PDF file bytes."""
    pdf_reader = PyPDF2.PdfReader(io.BytesIO(pdf_file))
    text = ""
    for page in pdf_reader.pages:
        text += (page.extract_text() or "") + "\n"
    return text


def extract_text(file_content: bytes, content_type: str) -> str:
    """Extract text from uploaded file based on content type."""
    if content_type == "application/pdf":
        return extract_text_from_pdf(file_content)
    try:
        return file_content.decode("utf-8")
    except UnicodeDecodeError:
        raise InvalidInput("Job description must be a PDF or UTF-8 text file")


def _is_rate_limit(error: Exception) -> bool:
    text = str(error).lower()
    code = getattr(error, "status_code", None) or getattr(error, "code", None)
    return (
        code == 429
        or "429" in text
        or "resource exhausted" in text
        or "quota" in text
        or "rate limit" in text
    )


def _is_unavailable(error: Exception) -> bool:
    text = str(error).lower()
    code = getattr(error, "status_code", None) or getattr(error, "code", None)
    return code == 503 or "503" in text or "unavailable" in text or "overloaded" in text


def call_gemini_with_retry(
    client,
    model: str,
    contents,
    max_retries: int = 3,
    initial_delay: float = 1,
    timeout: float = 60,
    sleep=time.sleep,
):
    """
    Call Gemini with retries for 429/503 errors and an overall timeout.

    Rate limit errors back off twice as long as unavailability errors, and
    each delay is capped at 10 seconds. Non-retryable errors are raised as
    ``GenerationError`` straight away.
    """
    start_time = time.monotonic()

    for attempt in range(max_retries + 1):
        if time.monotonic() - start_time > timeout:
            raise GenerationError("Request timed out. Please try again in a few moments.")

        try:
            return client.models.generate_content(model=model, contents=contents)
        except Exception as e:
            rate_limited = _is_rate_limit(e)
            retryable = rate_limited or _is_unavailable(e)

            if not retryable:
                raise GenerationError(f"Question generation failed: {e}") from e

            if attempt >= max_retries:
                if rate_limited:
                    raise GenerationError(
                        "Server is currently busy due to high demand. Please try again in a few moments."
                    ) from e
                raise GenerationError("Service temporarily unavailable. Please try again in a few moments.") from e

            base_delay = initial_delay * 2 if rate_limited else initial_delay
            delay = min(base_delay * (2 ** attempt), 10)
            if time.monotonic() - start_time + delay > timeout:
                raise GenerationError("Request timed out. Please try again in a few moments.") from e

            logger.warning(
                "[Gemini] Retrying in %ss (attempt %d/%d) - %s",
                delay, attempt + 1, max_retries, str(e)[:100],
            )
            sleep(delay)


async def call_gemini_with_retry_async(client, model: str, contents, **kwargs):
    """Async wrapper for call_gemini_with_retry to avoid blocking the event loop."""
    return await asyncio.to_thread(call_gemini_with_retry, client, model, contents, **kwargs)


def extract_first_json_object(text: Any) -> dict:
    """Extract the first JSON object from a model response."""
    if not isinstance(text, str):
        raise GenerationError("Model response was not text")
    start = text.find("{")
    end = text.rfind("}")
    if start < 0 or end < 0 or end <= start:
        raise GenerationError("No JSON object found in model response")
    try:
        return json.loads(text[start : end + 1])
    except json.JSONDecodeError as e:
        raise GenerationError(f"Model returned invalid JSON: {e}") from e


def build_jd_prompt(jd_text: str, role: Optional[str], level: str, count: int) -> str:
    return f"""You are an experienced technical interviewer.
Read the job description below and write {count} interview questions a {level}
candidate{f" for the {role} role" if role else ""} should be ready to answer.
Mix technical, situational and behavioral questions that map to the stated
requirements. For each question give the skill it probes and a short note on
what a strong answer covers.

Respond with JSON only, in this shape:
{{"questions": [{{"question": "...", "skill": "...", "type": "technical|behavioral|situational", "answer_guide": "..."}}]}}

Job description:
{jd_text[:MAX_JD_CHARS]}
"""


def build_bank_prompt(topic: str, level: str, category: Optional[str], question_type: str, count: int) -> str:
    rule = (
        "exactly one option is correct"
        if question_type == "single_choice"
        else "two or more options are correct"
    )
    return f"""Write {count} {question_type.replace("_", " ")} quiz questions about {topic}
for a {level} {category or "software"} candidate. Each question has four options and {rule}.
Add a one or two sentence explanation.

Respond with JSON only, in this shape:
{{"questions": [{{"stem": "...", "explanation": "...", "options": [{{"text": "...", "is_correct": true}}]}}]}}
"""


def validate_jd_questions(payload: dict) -> list[dict]:
    raw = payload.get("questions")
    if not isinstance(raw, list):
        raise GenerationError("Generated payload has no question list")

    questions = []
    for item in raw:
        if not isinstance(item, dict):
            continue
        text = str(item.get("question") or "").strip()
        if not text:
            continue
        questions.append({
            "question": text,
            "skill": str(item.get("skill") or "").strip() or None,
            "type": str(item.get("type") or "technical").strip().lower(),
            "answer_guide": str(item.get("answer_guide") or "").strip() or None,
        })
    if not questions:
        raise GenerationError("Model returned no usable questions")
    return questions


def validate_bank_questions(payload: dict, question_type: str) -> list[dict]:
    """Keep only generated questions that would pass bank validation."""
    raw = payload.get("questions")
    if not isinstance(raw, list):
        raise GenerationError("Generated payload has no question list")

    questions = []
    for item in raw:
        if not isinstance(item, dict) or not str(item.get("stem") or "").strip():
            continue
        options = [
            {"text": str(o.get("text")).strip(), "is_correct": bool(o.get("is_correct"))}
            for o in item.get("options") or []
            if isinstance(o, dict) and str(o.get("text") or "").strip()
        ]
        correct = sum(1 for o in options if o["is_correct"])
        if len(options) < 2 or correct == 0:
            continue
        if question_type == "single_choice" and correct != 1:
            continue
        questions.append({
            "type": question_type,
            "stem": str(item["stem"]).strip(),
            "explanation": str(item.get("explanation") or "").strip() or None,
            "options": options,
        })
    if not questions:
        raise GenerationError("Model returned no usable questions")
    return questions


async def generate_jd_questions(
    jd_text: str,
    role: Optional[str] = None,
    level: str = "junior",
    count: int = 10,
    client=None,
) -> list[dict]:
    if not jd_text.strip():
        raise InvalidInput("Job description is empty")
    client = client or get_client()
    response = await call_gemini_with_retry_async(
        client, GEMINI_MODEL, build_jd_prompt(jd_text, role, level, count)
    )
    questions = validate_jd_questions(extract_first_json_object(response.text))
    logger.info("Generated %d JD questions", len(questions))
    return questions[:count]


async def generate_bank_questions(
    topic: str,
    level: str = "junior",
    category: Optional[str] = None,
    question_type: str = "single_choice",
    count: int = 5,
    client=None,
) -> list[dict]:
    if question_type not in CHOICE_TYPES:
        raise InvalidInput("Only choice questions can be generated for the bank")
    client = client or get_client()
    response = await call_gemini_with_retry_async(
        client, GEMINI_MODEL, build_bank_prompt(topic, level, category, question_type, count)
    )
    questions = validate_bank_questions(extract_first_json_object(response.text), question_type)
    logger.info("Generated %d bank questions on %s", len(questions), topic)
    return questions[:count]
