from typing import Optional
from fastapi import APIRouter, Depends, File, Form, UploadFile
from sqlalchemy.orm import Session
from mockprep import config
from mockprep.database import get_db
from mockprep.dependencies import get_current_user, get_llm_client
from mockprep.errors import InvalidInput, UsageLimitExceeded
from mockprep.models.user import User
from mockprep.services.packages import can_use_service, consume_service
from mockprep.services.question_generator import extract_text, generate_jd_questions

router = APIRouter(prefix="/api/jd", tags=["jd"])


@router.post("/questions")
async def generate_questions_from_jd(
    file: UploadFile = File(...),
    role: Optional[str] = Form(None),
    level: str = Form("junior"),
    count: int = Form(10),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    client=Depends(get_llm_client),
):
    """Generate interview questions from an uploaded job description."""
    if count < 1 or count > 30:
        raise InvalidInput("count must be between 1 and 30")
    if config.ENFORCE_PACKAGE_LIMITS and not can_use_service(db, current_user.id, "jd_upload"):
        raise UsageLimitExceeded("jd_upload usage limit reached")

    content = await file.read()
    jd_text = extract_text(content, file.content_type or "")
    if not jd_text.strip():
        raise InvalidInput("File does not have any content")

    questions = await generate_jd_questions(jd_text, role=role, level=level, count=count, client=client)

    if config.ENFORCE_PACKAGE_LIMITS:
        consume_service(db, current_user.id, "jd_upload")

    return {"role": role, "level": level, "questions": questions}
