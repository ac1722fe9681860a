import pytest
from sqlalchemy.exc import SQLAlchemyError

import users
from errors import NotFoundError, ValidationError
from models import db


def test_create_then_merge_profile(app):
    created = users.create_or_update_user("user-1", {"display_name": "Asha", "email": "asha@example.com"})
    assert created.uid == "user-1"
    assert created.kyc_verified is False

    merged = users.create_or_update_user("user-1", {"phone_number": "9876543210", "email": None})
    assert merged.display_name == "Asha"
    assert merged.email == "asha@example.com"
    assert merged.phone_number == "9876543210"


def test_unknown_profile_fields_are_rejected(app):
    with pytest.raises(ValidationError):
        users.create_or_update_user("user-1", {"uid": "someone-else"})
    assert users.get_user_profile("user-1") is None


def test_update_requires_existing_profile(app):
    with pytest.raises(NotFoundError):
        users.update_user_profile("ghost", {"display_name": "Nobody"})

    users.create_or_update_user("user-1", {})
    updated = users.update_user_profile("user-1", {"kyc_verified": True, "preferred_class": "2A"})
    assert updated.kyc_verified is True
    assert updated.to_dict()["preferred_class"] == "2A"


def test_last_login_creates_profile(app):
    users.update_last_login("user-1")
    assert users.get_user_profile("user-1").last_login is not None


def test_last_login_failure_is_logged_not_raised(app, monkeypatch, caplog):
    def broken_commit():
        raise SQLAlchemyError("database went away")

    monkeypatch.setattr(db.session(), "commit", broken_commit)
    users.update_last_login("user-1")
    assert "Failed to update last login for user-1" in caplog.text


@pytest.mark.parametrize("data", [
    {"kyc_verified": "yes"},
    {"display_name": 42},
    {"phone_number": "9" * 21},
])
def test_badly_typed_profile_values_are_rejected(app, data):
    with pytest.raises(ValidationError):
        users.create_or_update_user("user-1", data)
    assert users.get_user_profile("user-1") is None

    users.create_or_update_user("user-1", {"display_name": "Asha"})
    with pytest.raises(ValidationError):
        users.update_user_profile("user-1", data)
    assert users.get_user_profile("user-1").display_name == "Asha"


def test_failed_profile_write_rolls_back(app, monkeypatch):
    def broken_commit():
        raise SQLAlchemyError("database went away")

    monkeypatch.setattr(db.session(), "commit", broken_commit)
    with pytest.raises(SQLAlchemyError):
        users.create_or_update_user("user-1", {"display_name": "Asha"})
    monkeypatch.undo()

    assert users.get_user_profile("user-1") is None
