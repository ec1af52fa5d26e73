import uuid
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, JSON
from sqlalchemy.orm import relationship
from datetime import datetime
from mockprep.database import Base


class QuizAttempt(Base):
    __tablename__ = "quiz_attempts"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    question_set_id = Column(String(36), ForeignKey("question_sets.id"), nullable=True)

    status = Column(String(20), default="in_progress", nullable=False)  # in_progress, completed

    # Served questions with correctness flags, in presentation order
    items_snapshot = Column(JSON, nullable=False)
    # {question_id: [old_index for each new_index]}; None means identity
    answer_mapping = Column(JSON, nullable=True)

    # Results
    responses = Column(JSON, nullable=True)
    score = Column(Integer, nullable=True)
    correct_count = Column(Integer, nullable=True)
    total_questions = Column(Integer, nullable=False, default=0)
    time_used = Column(Integer, default=0)

    # Retry chain
    retry_of_id = Column(String(36), ForeignKey("quiz_attempts.id"), nullable=True)
    retry_count = Column(Integer, default=0, nullable=False)

    # Timestamps
    started_at = Column(DateTime, default=datetime.utcnow)
    completed_at = Column(DateTime, nullable=True)

    user = relationship("User", back_populates="quiz_attempts")
    question_set = relationship("QuestionSet")
