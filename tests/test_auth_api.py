from datetime import timedelta

from mockprep.services.auth import create_token, decode_token, verify_password


def _register(client, email="carol@example.com", password="s3cret-pass"):
    return client.post(
        "/api/auth/register",
        json={"email": email, "password": password, "username": "carol"},
    )


def test_register_returns_tokens(client):
    response = _register(client)
    assert response.status_code == 200
    tokens = response.json()
    assert tokens["token_type"] == "bearer"
    assert decode_token(tokens["access_token"])["type"] == "access"
    assert decode_token(tokens["refresh_token"])["type"] == "refresh"


def test_register_rejects_duplicates_and_short_passwords(client, user):
    assert _register(client, email=user.email).status_code == 400
    assert _register(client, password="short").status_code == 400


def test_login_and_me(client, db):
    _register(client)

    bad = client.post("/api/auth/login", data={"username": "carol@example.com", "password": "nope"})
    assert bad.status_code == 401

    response = client.post(
        "/api/auth/login", data={"username": "carol@example.com", "password": "s3cret-pass"}
    )
    assert response.status_code == 200
    access = response.json()["access_token"]

    me = client.get("/api/auth/me", headers={"Authorization": f"Bearer {access}"})
    assert me.status_code == 200
    assert me.json()["email"] == "carol@example.com"
    assert me.json()["role"] == "user"
    assert me.json()["last_login"] is not None


def test_refresh_token(client):
    tokens = _register(client).json()

    refreshed = client.post("/api/auth/refresh", json={"refresh_token": tokens["refresh_token"]})
    assert refreshed.status_code == 200

    wrong_type = client.post("/api/auth/refresh", json={"refresh_token": tokens["access_token"]})
    assert wrong_type.status_code == 401


def test_refresh_token_is_not_an_access_token(client, user):
    refresh = create_token(user.id, "refresh", timedelta(days=1))
    response = client.get("/api/auth/me", headers={"Authorization": f"Bearer {refresh}"})
    assert response.status_code == 401


def test_expired_and_garbage_tokens(client, user):
    expired = create_token(user.id, "access", timedelta(seconds=-5))
    assert client.get("/api/auth/me", headers={"Authorization": f"Bearer {expired}"}).status_code == 401
    assert client.get("/api/auth/me", headers={"Authorization": "Bearer not-a-jwt"}).status_code == 401


def test_password_hash_round_trip(user):
    assert verify_password("password123", user.hashed_password)
    assert not verify_password("password124", user.hashed_password)


def test_health_check(client):
    assert client.get("/").json() == {"message": "MockPrep API is running"}
