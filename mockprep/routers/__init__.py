from mockprep.routers.auth import router as auth_router
from mockprep.routers.users import router as users_router
from mockprep.routers.quiz import router as quiz_router
from mockprep.routers.jd import router as jd_router
from mockprep.routers.question_bank import router as question_bank_router
from mockprep.routers.admin import router as admin_router
from mockprep.routers.interview import router as interview_router

__all__ = [
    "auth_router",
    "users_router",
    "quiz_router",
    "jd_router",
    "question_bank_router",
    "admin_router",
    "interview_router",
]
