# tests/test_auth.py
import uuid
from datetime import timedelta

from fastapi import status
from jose import jwt

from auth_utils import create_access_token, verify_password
from config import SECRET_KEY, ALGORITHM
from models.models import User as UserModel

from conftest import TEST_PASSWORD


def _register(client, email="New.User@Example.com", name="New User", password=TEST_PASSWORD):
    return client.post(
        "/api/auth/register",
        json={"name": name, "email": email, "password": password},
    )


def _login(client, email, password=TEST_PASSWORD):
    return client.post(
        "/api/auth/login",
        data={"username": email, "password": password},
    )


# =====================================================================================
# ==                                 REGISTER                                        ==
# =====================================================================================

def test_register_user_success(client, db_session):
    """
    GIVEN a valid name, email and password
    WHEN the user registers
    THEN the user is stored with a normalized email and a hashed password
    """
    response = _register(client)

    assert response.status_code == status.HTTP_201_CREATED, response.text
    data = response.json()
    assert data["email"] == "new.user@example.com"
    assert data["name"] == "New User"
    assert "hashed_password" not in data
    assert "password" not in data
    uuid.UUID(data["id"])

    user_in_db = db_session.query(UserModel).filter(UserModel.email == "new.user@example.com").first()
    assert user_in_db is not None
    assert user_in_db.hashed_password != TEST_PASSWORD
    assert verify_password(TEST_PASSWORD, user_in_db.hashed_password)

def test_register_duplicate_email_is_conflict(client):
    assert _register(client).status_code == status.HTTP_201_CREATED

    # Same address, different case and padding.
    response = _register(client, email="  NEW.USER@example.com ")

    assert response.status_code == status.HTTP_409_CONFLICT
    assert response.json() == {"detail": "Email already registered"}

def test_register_rejects_invalid_email(client):
    for email in ("not-an-email", "a@b", "two words@example.com"):
        response = _register(client, email=email)
        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY, email

def test_register_rejects_short_name(client):
    response = _register(client, name="  Al ")
    assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY

def test_register_rejects_weak_password(client):
    for password in ("short1A", "alllowercase123", "ALLUPPERCASE123", "NoDigitsHere"):
        response = _register(client, password=password)
        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY, password


# =====================================================================================
# ==                                   LOGIN                                         ==
# =====================================================================================

def test_login_returns_token_for_user(client):
    user_id = _register(client).json()["id"]

    response = _login(client, "new.user@example.com")

    assert response.status_code == status.HTTP_200_OK, response.text
    data = response.json()
    assert data["token_type"] == "bearer"
    payload = jwt.decode(data["access_token"], SECRET_KEY, algorithms=[ALGORITHM])
    assert payload["user_id"] == user_id
    assert payload["sub"] == "new.user@example.com"
    assert payload["name"] == "New User"
    assert "exp" in payload

def test_login_email_is_case_insensitive(client):
    _register(client)
    assert _login(client, "NEW.USER@EXAMPLE.COM").status_code == status.HTTP_200_OK

def test_login_wrong_password(client):
    _register(client)

    response = _login(client, "new.user@example.com", password="WrongPassword999")

    assert response.status_code == status.HTTP_401_UNAUTHORIZED
    assert response.json() == {"detail": "Incorrect email or password"}

def test_login_unknown_user(client):
    response = _login(client, "nobody@example.com")
    assert response.status_code == status.HTTP_401_UNAUTHORIZED


# =====================================================================================
# ==                                   VERIFY                                        ==
# =====================================================================================

def test_verify_returns_current_user(client, user_a):
    user_id, headers = user_a

    response = client.get("/api/auth/verify", headers=headers)

    assert response.status_code == status.HTTP_200_OK
    assert response.json()["id"] == user_id
    assert response.json()["email"] == "alice@example.com"

def test_verify_after_login_round_trip(client):
    _register(client)
    token = _login(client, "new.user@example.com").json()["access_token"]

    response = client.get("/api/auth/verify", headers={"Authorization": f"Bearer {token}"})

    assert response.status_code == status.HTTP_200_OK
    assert response.json()["email"] == "new.user@example.com"

def test_verify_without_token(client):
    assert client.get("/api/auth/verify").status_code == status.HTTP_401_UNAUTHORIZED

def test_verify_with_expired_token(client, user_a):
    user_id, _ = user_a
    token = create_access_token({"sub": "alice@example.com", "user_id": user_id}, expires_delta=timedelta(minutes=-5))

    response = client.get("/api/auth/verify", headers={"Authorization": f"Bearer {token}"})

    assert response.status_code == status.HTTP_401_UNAUTHORIZED
    assert response.json() == {"detail": "Token has expired"}

def test_verify_with_token_for_missing_user(client, db_session):
    token = create_access_token({"sub": "ghost@example.com", "user_id": str(uuid.uuid4())})

    response = client.get("/api/auth/verify", headers={"Authorization": f"Bearer {token}"})

    assert response.status_code == status.HTTP_401_UNAUTHORIZED
    assert response.json() == {"detail": "User not found"}

def test_verify_with_token_without_user_id(client):
    token = create_access_token({"sub": "alice@example.com"})

    response = client.get("/api/auth/verify", headers={"Authorization": f"Bearer {token}"})

    assert response.status_code == status.HTTP_401_UNAUTHORIZED
