from datetime import datetime

from flask import current_app
from sqlalchemy.exc import SQLAlchemyError

from errors import NotFoundError, ValidationError
from models import db, UserProfile


def _clean(data):
    unknown = set(data) - set(UserProfile.EDITABLE)
    if unknown:
        raise ValidationError(f"Unknown profile fields: {', '.join(sorted(unknown))}")

    cleaned = {k: v for k, v in data.items() if v is not None}
    for field, value in cleaned.items():
        if field == 'kyc_verified':
            if not isinstance(value, bool):
                raise ValidationError("kyc_verified must be true or false.")
            continue
        if not isinstance(value, str):
            raise ValidationError(f"{field} must be a string.")
        limit = UserProfile.__table__.c[field].type.length
        if limit and len(value) > limit:
            raise ValidationError(f"{field} must be at most {limit} characters.")
    return cleaned


def create_or_update_user(uid, data):
    """Creates the profile on first sight of `uid`, otherwise merges `data` into it."""
    data = _clean(data)
    try:
        user = db.session.get(UserProfile, uid)
        if user is None:
            user = UserProfile(uid=uid)
            db.session.add(user)
            current_app.logger.info("Creating profile for user %s", uid)

        for field, value in data.items():
            setattr(user, field, value)
        user.updated_at = datetime.now()
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise
    return user


def get_user_profile(uid):
    return db.session.get(UserProfile, uid)


def update_user_profile(uid, data):
    data = _clean(data)
    user = get_user_profile(uid)
    if user is None:
        raise NotFoundError(f"No profile for user {uid}.")
    try:
        for field, value in data.items():
            setattr(user, field, value)
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise
    return user


def update_last_login(uid):
    try:
        user = db.session.get(UserProfile, uid)
        if user is None:
            user = UserProfile(uid=uid)
            db.session.add(user)
        user.last_login = datetime.now()
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        current_app.logger.warning("Failed to update last login for %s: %s", uid, e)
