from typing import Optional
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from mockprep.database import get_db
from mockprep.dependencies import require_admin, get_llm_client
from mockprep.schemas.question import (
    BulkDeleteRequest,
    GenerateQuestionsRequest,
    QuestionCreate,
    QuestionListResponse,
    QuestionResponse,
    QuestionSetCreate,
    QuestionSetItemsRequest,
    QuestionSetResponse,
    QuestionUpdate,
)
from mockprep.services import question_bank
from mockprep.services.question_generator import generate_bank_questions

router = APIRouter(
    prefix="/api/admin",
    tags=["question-bank"],
    dependencies=[Depends(require_admin)],
)


@router.post("/questions", response_model=QuestionResponse, status_code=status.HTTP_201_CREATED)
async def create_question(payload: QuestionCreate, db: Session = Depends(get_db)):
    return question_bank.create_question(db, payload.model_dump())


@router.get("/questions", response_model=QuestionListResponse)
async def list_questions(
    search: Optional[str] = None,
    category: Optional[str] = None,
    level: Optional[str] = None,
    type: Optional[str] = None,
    include_archived: bool = False,
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    db: Session = Depends(get_db),
):
    items, total = question_bank.list_questions(
        db,
        search=search,
        category=category,
        level=level,
        question_type=type,
        include_archived=include_archived,
        page=page,
        page_size=page_size,
    )
    return QuestionListResponse(items=items, total=total, page=page, page_size=page_size)


@router.get("/questions/{question_id}", response_model=QuestionResponse)
async def get_question(question_id: str, db: Session = Depends(get_db)):
    return question_bank.get_question(db, question_id)


@router.put("/questions/{question_id}", response_model=QuestionResponse)
async def update_question(question_id: str, payload: QuestionUpdate, db: Session = Depends(get_db)):
    """Update a question. A given option list replaces the existing options."""
    return question_bank.update_question(db, question_id, payload.model_dump(exclude_unset=True))


@router.delete("/questions/{question_id}")
async def delete_question(question_id: str, db: Session = Depends(get_db)):
    question_bank.delete_questions(db, [question_id])
    return {"ok": True}


@router.post("/questions/bulk-delete")
async def bulk_delete_questions(payload: BulkDeleteRequest, db: Session = Depends(get_db)):
    deleted = question_bank.delete_questions(db, payload.ids)
    return {"deleted": deleted}


@router.post("/questions/ai-generate", response_model=list[QuestionResponse], status_code=status.HTTP_201_CREATED)
async def ai_generate_questions(
    payload: GenerateQuestionsRequest,
    db: Session = Depends(get_db),
    client=Depends(get_llm_client),
):
    """Generate choice questions with the LLM and store them in the bank."""
    generated = await generate_bank_questions(
        topic=payload.topic,
        level=payload.level,
        category=payload.category,
        question_type=payload.type,
        count=payload.count,
        client=client,
    )
    created = [
        question_bank.create_question(
            db,
            {
                **item,
                "category": payload.category,
                "level": payload.level,
                "topics": [payload.topic],
                "tags": ["ai-generated"],
            },
            commit=False,
        )
        for item in generated
    ]
    db.commit()
    for question in created:
        db.refresh(question)
    return created


@router.post("/question-sets", response_model=QuestionSetResponse, status_code=status.HTTP_201_CREATED)
async def create_question_set(payload: QuestionSetCreate, db: Session = Depends(get_db)):
    question_set = question_bank.create_question_set(db, payload.model_dump())
    return question_bank.question_set_to_dict(question_set)


@router.get("/question-sets/{set_id}", response_model=QuestionSetResponse)
async def get_question_set(set_id: str, db: Session = Depends(get_db)):
    return question_bank.question_set_to_dict(question_bank.get_question_set(db, set_id))


@router.put("/question-sets/{set_id}/items", response_model=QuestionSetResponse)
async def replace_question_set_items(
    set_id: str, payload: QuestionSetItemsRequest, db: Session = Depends(get_db)
):
    question_set = question_bank.replace_set_items(db, set_id, payload.question_ids)
    return question_bank.question_set_to_dict(question_set)


@router.post("/question-sets/{set_id}/publish", response_model=QuestionSetResponse)
async def publish_question_set(set_id: str, db: Session = Depends(get_db)):
    return question_bank.question_set_to_dict(question_bank.publish_question_set(db, set_id))
