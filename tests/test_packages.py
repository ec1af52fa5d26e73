from datetime import datetime, timedelta

import pytest

from mockprep.errors import InvalidInput, NotFound, UsageLimitExceeded
from mockprep.models.service_package import UserPackage
from mockprep.services import packages


@pytest.fixture
def starter(db):
    return packages.create_service_package(
        db,
        name="Starter",
        price=9.0,
        duration=30,
        avatar_interview_limit=1,
        test_quiz_eq_limit=2,
        jd_upload_limit=0,
    )


def test_no_package_means_no_access(db, user):
    assert packages.can_use_service(db, user.id, "test_quiz_eq") is False
    with pytest.raises(UsageLimitExceeded):
        packages.consume_service(db, user.id, "test_quiz_eq")
    assert packages.usage_summary(db, user.id) == {"has_active_package": False}


def test_unknown_service_type(db, user):
    with pytest.raises(InvalidInput):
        packages.can_use_service(db, user.id, "karaoke")


def test_consume_until_limit(db, user, starter):
    packages.assign_package(db, user, starter.id)

    packages.consume_service(db, user.id, "test_quiz_eq")
    user_package = packages.consume_service(db, user.id, "test_quiz_eq")
    assert user_package.test_quiz_eq_used == 2

    assert packages.can_use_service(db, user.id, "test_quiz_eq") is False
    with pytest.raises(UsageLimitExceeded):
        packages.consume_service(db, user.id, "test_quiz_eq")

    assert packages.can_use_service(db, user.id, "avatar_interview") is True
    assert packages.can_use_service(db, user.id, "jd_upload") is False


def test_assign_replaces_previous_package(db, user, starter):
    pro = packages.create_service_package(db, name="Pro", price=29.0, duration=90, jd_upload_limit=10)

    first = packages.assign_package(db, user, starter.id)
    second = packages.assign_package(db, user, pro.id)

    db.expire_all()
    assert db.get(UserPackage, first.id).is_active is False
    assert db.get(UserPackage, second.id).is_active is True
    assert [p.id for p in packages.get_active_packages(db, user.id)] == [second.id]


def test_assign_inactive_or_missing_package(db, user, starter):
    with pytest.raises(NotFound):
        packages.assign_package(db, user, 999)

    packages.update_service_package(db, starter.id, is_active=False)
    with pytest.raises(InvalidInput):
        packages.assign_package(db, user, starter.id)


def test_expired_package_is_ignored(db, user, starter):
    user_package = packages.assign_package(db, user, starter.id)
    user_package.end_date = datetime.utcnow() - timedelta(days=1)
    db.commit()

    assert packages.get_active_packages(db, user.id) == []
    assert packages.can_use_service(db, user.id, "test_quiz_eq") is False


def test_usage_summary(db, user, starter):
    packages.assign_package(db, user, starter.id)
    packages.consume_service(db, user.id, "avatar_interview")

    summary = packages.usage_summary(db, user.id)
    assert summary["has_active_package"] is True
    assert summary["usage"] == {
        "avatar_interview": "1/1",
        "test_quiz_eq": "0/2",
        "jd_upload": "0/0",
    }
    assert summary["can_use"] == {
        "avatar_interview": False,
        "test_quiz_eq": True,
        "jd_upload": False,
    }
    assert summary["days_remaining"] == 30


def test_deactivate_refused_while_in_use(db, user, starter):
    packages.assign_package(db, user, starter.id)
    with pytest.raises(InvalidInput):
        packages.deactivate_service_package(db, starter.id)


def test_deactivate_hides_package_from_listing(db, starter):
    packages.deactivate_service_package(db, starter.id)
    assert packages.list_service_packages(db) == []
    assert [p.id for p in packages.list_service_packages(db, include_inactive=True)] == [starter.id]


def test_usage_endpoint(client, db, user, auth_headers, starter):
    packages.assign_package(db, user, starter.id)

    response = client.get("/api/users/me/usage", headers=auth_headers)
    assert response.status_code == 200
    data = response.json()
    assert data["has_active_package"] is True
    assert data["package"]["service_package"]["name"] == "Starter"
    assert data["usage"]["test_quiz_eq"] == "0/2"


def test_public_package_listing(client, starter):
    response = client.get("/api/users/packages")
    assert response.status_code == 200
    assert [p["name"] for p in response.json()] == ["Starter"]


def test_consume_without_commit_joins_the_caller_transaction(db, user, starter):
    user_package = packages.assign_package(db, user, starter.id)

    packages.consume_service(db, user.id, "test_quiz_eq", commit=False)
    assert user_package.test_quiz_eq_used == 1
    db.rollback()

    db.expire_all()
    assert db.get(UserPackage, user_package.id).test_quiz_eq_used == 0
