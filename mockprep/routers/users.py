from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from mockprep.database import get_db
from mockprep.dependencies import get_current_user
from mockprep.models.user import User
from mockprep.schemas.package import PackageUsageResponse, ServicePackageResponse
from mockprep.services.packages import usage_summary, list_service_packages

router = APIRouter(prefix="/api/users", tags=["users"])


@router.get("/me/usage", response_model=PackageUsageResponse)
async def get_my_usage(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Current package, usage per service and days remaining."""
    return usage_summary(db, current_user.id)


@router.get("/packages", response_model=list[ServicePackageResponse])
async def get_available_packages(db: Session = Depends(get_db)):
    """Active service packages, cheapest first."""
    return list_service_packages(db)
