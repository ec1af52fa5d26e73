from mockprep.schemas.user import (
    UserCreate,
    UserResponse,
    TokenResponse,
    RefreshTokenRequest,
    RoleUpdateRequest,
)
from mockprep.schemas.quiz import (
    AttemptItemsResponse,
    StartQuizRequest,
    RetryQuizRequest,
    SubmitQuizRequest,
    SubmitQuizResponse,
    AttemptSummary,
    AttemptDetail,
)

__all__ = [
    "UserCreate",
    "UserResponse",
    "TokenResponse",
    "RefreshTokenRequest",
    "RoleUpdateRequest",
    "AttemptItemsResponse",
    "StartQuizRequest",
    "RetryQuizRequest",
    "SubmitQuizRequest",
    "SubmitQuizResponse",
    "AttemptSummary",
    "AttemptDetail",
]
