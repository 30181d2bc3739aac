# tests/test_models.py
import pytest
from sqlalchemy.exc import IntegrityError

from db import crud
from models.models import DEFAULT_STORAGE_PATH, SavedImage, UploadedImage
from schemas.user_schemas import UserCreate

from conftest import TEST_PASSWORD


@pytest.fixture
def owner(db_session):
    return crud.create_user(db_session, UserCreate(name="Owner", email="owner@example.com", password=TEST_PASSWORD))


def test_uploaded_image_defaults(db_session, owner):
    image = UploadedImage(user_id=owner.id, title="Harbour at dusk", placeholder_url="https://placehold.co/600x400")
    db_session.add(image)
    db_session.commit()
    db_session.refresh(image)

    assert image.id is not None
    assert image.storage_path == DEFAULT_STORAGE_PATH
    assert image.description is None
    assert image.created_at is not None

def test_uploaded_image_requires_title(db_session, owner):
    db_session.add(UploadedImage(user_id=owner.id, placeholder_url="https://placehold.co/600x400"))
    with pytest.raises(IntegrityError):
        db_session.commit()
    db_session.rollback()

def test_saved_image_unique_per_user_and_external_id(db_session, owner):
    db_session.add(SavedImage(user_id=owner.id, external_id="5", url="http://x/5.jpg"))
    db_session.commit()

    db_session.add(SavedImage(user_id=owner.id, external_id="5", url="http://x/5-other.jpg"))
    with pytest.raises(IntegrityError):
        db_session.commit()
    db_session.rollback()

    assert db_session.query(SavedImage).count() == 1
    assert db_session.query(SavedImage).first().source == "External API"

def test_user_email_is_stored_lowercased(db_session):
    user = crud.create_user(db_session, UserCreate(name="Mixed", email=" Mixed.Case@Example.COM ", password=TEST_PASSWORD))
    assert user.email == "mixed.case@example.com"
    assert crud.get_user_by_email(db_session, "MIXED.case@example.com").id == user.id
