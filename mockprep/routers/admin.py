from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from mockprep.database import get_db
from mockprep.dependencies import require_admin
from mockprep.models.user import User
from mockprep.schemas.package import (
    AssignPackageRequest,
    ServicePackageCreate,
    ServicePackageResponse,
    ServicePackageUpdate,
    UserPackageResponse,
)
from mockprep.schemas.user import RoleUpdateRequest, UserResponse
from mockprep.services import packages

router = APIRouter(
    prefix="/api/admin",
    tags=["admin"],
    dependencies=[Depends(require_admin)],
)

ROLES = ("user", "admin")


def _get_user(db: Session, user_id: int) -> User:
    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return user


# Service packages

@router.get("/packages", response_model=list[ServicePackageResponse])
async def list_packages(include_inactive: bool = True, db: Session = Depends(get_db)):
    return packages.list_service_packages(db, include_inactive=include_inactive)


@router.post("/packages", response_model=ServicePackageResponse, status_code=status.HTTP_201_CREATED)
async def create_package(payload: ServicePackageCreate, db: Session = Depends(get_db)):
    return packages.create_service_package(db, **payload.model_dump())


@router.put("/packages/{package_id}", response_model=ServicePackageResponse)
async def update_package(package_id: int, payload: ServicePackageUpdate, db: Session = Depends(get_db)):
    return packages.update_service_package(db, package_id, **payload.model_dump(exclude_unset=True))


@router.delete("/packages/{package_id}", response_model=ServicePackageResponse)
async def delete_package(package_id: int, db: Session = Depends(get_db)):
    """Soft delete; refused while any user holds the package actively."""
    return packages.deactivate_service_package(db, package_id)


# Users

@router.get("/users", response_model=list[UserResponse])
async def list_users(limit: int = 50, offset: int = 0, db: Session = Depends(get_db)):
    return db.query(User).order_by(User.created_at.desc()).offset(offset).limit(limit).all()


@router.put("/users/{user_id}/role", response_model=UserResponse)
async def set_user_role(
    user_id: int,
    payload: RoleUpdateRequest,
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    if payload.role not in ROLES:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Unknown role")
    user = _get_user(db, user_id)
    if user.id == current_user.id and payload.role != "admin":
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Admins cannot remove their own admin role",
        )
    user.role = payload.role
    db.commit()
    db.refresh(user)
    return user


@router.post("/users/{user_id}/packages", response_model=UserPackageResponse, status_code=status.HTTP_201_CREATED)
async def assign_user_package(user_id: int, payload: AssignPackageRequest, db: Session = Depends(get_db)):
    """Activate a package for a user, replacing their current one."""
    user = _get_user(db, user_id)
    return packages.assign_package(db, user, payload.service_package_id)
