from mockprep.models.user import User
from mockprep.models.question import QuestionItem, QuestionOption, QuestionSet, QuestionSetQuestion
from mockprep.models.quiz_attempt import QuizAttempt
from mockprep.models.service_package import ServicePackage, UserPackage
from mockprep.models.interview import InterviewSession

__all__ = [
    "User",
    "QuestionItem",
    "QuestionOption",
    "QuestionSet",
    "QuestionSetQuestion",
    "QuizAttempt",
    "ServicePackage",
    "UserPackage",
    "InterviewSession",
]
