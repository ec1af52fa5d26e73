from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime


class ServicePackageCreate(BaseModel):
    name: str
    description: Optional[str] = None
    price: float = Field(ge=0)
    duration: int = Field(default=30, ge=1)
    avatar_interview_limit: int = Field(default=0, ge=0)
    test_quiz_eq_limit: int = Field(default=0, ge=0)
    jd_upload_limit: int = Field(default=0, ge=0)
    highlight: bool = False
    is_active: bool = True


class ServicePackageUpdate(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None
    price: Optional[float] = Field(default=None, ge=0)
    duration: Optional[int] = Field(default=None, ge=1)
    avatar_interview_limit: Optional[int] = Field(default=None, ge=0)
    test_quiz_eq_limit: Optional[int] = Field(default=None, ge=0)
    jd_upload_limit: Optional[int] = Field(default=None, ge=0)
    highlight: Optional[bool] = None
    is_active: Optional[bool] = None


class ServicePackageResponse(BaseModel):
    id: int
    name: str
    description: Optional[str]
    price: float
    duration: int
    avatar_interview_limit: int
    test_quiz_eq_limit: int
    jd_upload_limit: int
    highlight: bool
    is_active: bool

    class Config:
        from_attributes = True


class AssignPackageRequest(BaseModel):
    service_package_id: int


class UserPackageResponse(BaseModel):
    id: int
    user_id: int
    service_package_id: int
    start_date: datetime
    end_date: datetime
    avatar_interview_used: int
    test_quiz_eq_used: int
    jd_upload_used: int
    is_active: bool
    service_package: ServicePackageResponse

    class Config:
        from_attributes = True


class PackageUsageResponse(BaseModel):
    has_active_package: bool
    package: Optional[UserPackageResponse] = None
    usage: dict[str, str] = {}  # {"jd_upload": "1/5", ...}
    can_use: dict[str, bool] = {}
    days_remaining: Optional[int] = None
