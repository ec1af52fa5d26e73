"""Service packages and per-user usage limits."""

import logging
import math
from datetime import datetime, timedelta
from typing import Optional
from sqlalchemy.orm import Session
from mockprep.errors import InvalidInput, NotFound, UsageLimitExceeded
from mockprep.models.service_package import ServicePackage, UserPackage, SERVICE_TYPES
from mockprep.models.user import User

logger = logging.getLogger(__name__)


def _check_service_type(service_type: str) -> None:
    if service_type not in SERVICE_TYPES:
        raise InvalidInput(f"Unknown service type: {service_type}")


def get_service_package(db: Session, package_id: int) -> ServicePackage:
    package = db.query(ServicePackage).filter(ServicePackage.id == package_id).first()
    if not package:
        raise NotFound("Service package not found")
    return package


def list_service_packages(db: Session, include_inactive: bool = False) -> list[ServicePackage]:
    query = db.query(ServicePackage)
    if not include_inactive:
        query = query.filter(ServicePackage.is_active == True)  # noqa: E712
    return query.order_by(ServicePackage.price.asc()).all()


def create_service_package(db: Session, **fields) -> ServicePackage:
    package = ServicePackage(**fields)
    db.add(package)
    db.commit()
    db.refresh(package)
    logger.info("Created service package %s (%s)", package.id, package.name)
    return package


def update_service_package(db: Session, package_id: int, **fields) -> ServicePackage:
    package = get_service_package(db, package_id)
    for key, value in fields.items():
        if value is not None:
            setattr(package, key, value)
    db.commit()
    db.refresh(package)
    return package


def deactivate_service_package(db: Session, package_id: int) -> ServicePackage:
    """Soft delete a package that no user is actively holding."""
    package = get_service_package(db, package_id)
    active_users = (
        db.query(UserPackage)
        .filter(UserPackage.service_package_id == package_id, UserPackage.is_active == True)  # noqa: E712
        .count()
    )
    if active_users > 0:
        raise InvalidInput(f"Cannot delete package: {active_users} users are currently using it")

    package.is_active = False
    db.commit()
    db.refresh(package)
    logger.info("Deactivated service package %s", package.id)
    return package


def get_active_packages(db: Session, user_id: int, now: Optional[datetime] = None) -> list[UserPackage]:
    """Active, unexpired packages for a user, newest first."""
    now = now or datetime.utcnow()
    return (
        db.query(UserPackage)
        .filter(
            UserPackage.user_id == user_id,
            UserPackage.is_active == True,  # noqa: E712
            UserPackage.end_date >= now,
        )
        .order_by(UserPackage.created_at.desc(), UserPackage.id.desc())
        .all()
    )


def assign_package(db: Session, user: User, package_id: int) -> UserPackage:
    """Give a user a package, deactivating whatever they held before."""
    package = get_service_package(db, package_id)
    if not package.is_active:
        raise InvalidInput("Service package is not active")

    db.query(UserPackage).filter(
        UserPackage.user_id == user.id,
        UserPackage.is_active == True,  # noqa: E712
    ).update({UserPackage.is_active: False}, synchronize_session=False)

    now = datetime.utcnow()
    user_package = UserPackage(
        user_id=user.id,
        service_package_id=package.id,
        start_date=now,
        end_date=now + timedelta(days=package.duration),
        is_active=True,
    )
    db.add(user_package)
    db.commit()
    db.refresh(user_package)

    logger.info("Assigned package %s to user %s", package.id, user.id)
    return user_package


def can_use_service(db: Session, user_id: int, service_type: str) -> bool:
    _check_service_type(service_type)
    return any(
        p.used(service_type) < p.limit(service_type)
        for p in get_active_packages(db, user_id)
    )


def consume_service(db: Session, user_id: int, service_type: str, commit: bool = True) -> UserPackage:
    """Spend one credit of ``service_type`` from the first package with room.

    The counter is bumped with a conditional UPDATE, so two requests racing
    for the last credit cannot both succeed. With ``commit=False`` the
    increment joins the caller's transaction.
    """
    _check_service_type(service_type)
    used_column = getattr(UserPackage, f"{service_type}_used")
    for user_package in get_active_packages(db, user_id):
        limit = user_package.limit(service_type)
        if user_package.used(service_type) >= limit:
            continue
        updated = (
            db.query(UserPackage)
            .filter(UserPackage.id == user_package.id, used_column < limit)
            .update({used_column: used_column + 1}, synchronize_session=False)
        )
        if not updated:
            continue
        if commit:
            db.commit()
        db.refresh(user_package)
        return user_package

    logger.info("User %s hit the %s usage limit", user_id, service_type)
    raise UsageLimitExceeded(f"{service_type} usage limit reached")


def usage_summary(db: Session, user_id: int) -> dict:
    packages = get_active_packages(db, user_id)
    if not packages:
        return {"has_active_package": False}

    current = packages[0]
    remaining = current.end_date - datetime.utcnow()
    return {
        "has_active_package": True,
        "package": current,
        "usage": {s: f"{current.used(s)}/{current.limit(s)}" for s in SERVICE_TYPES},
        "can_use": {s: current.used(s) < current.limit(s) for s in SERVICE_TYPES},
        "days_remaining": max(0, math.ceil(remaining.total_seconds() / 86400)),
    }
