import uuid
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, JSON
from sqlalchemy.orm import relationship
from datetime import datetime
from mockprep.database import Base


class InterviewSession(Base):
    __tablename__ = "interview_sessions"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    role = Column(String(255), nullable=False)
    company = Column(String(255), nullable=True)
    level = Column(String(50), default="junior")

    status = Column(String(20), default="in_progress", nullable=False)  # in_progress, completed
    max_questions = Column(Integer, default=3, nullable=False)
    questions_asked = Column(Integer, default=0, nullable=False)

    # [{"role": "interviewer" | "candidate", "content": "..."}]
    conversation = Column(JSON, nullable=False, default=list)
    # One 0-100 score per candidate answer
    scores = Column(JSON, nullable=False, default=list)

    final_score = Column(Integer, nullable=True)
    evaluation = Column(JSON, nullable=True)

    started_at = Column(DateTime, default=datetime.utcnow)
    completed_at = Column(DateTime, nullable=True)

    user = relationship("User", back_populates="interviews")
