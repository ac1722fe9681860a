import os
from datetime import date, timedelta

os.environ["DATABASE_URL"] = "sqlite://"

import pytest

from app import app as flask_app
from models import db
from seed import populate_sample_data


@pytest.fixture
def app():
    flask_app.config.update(TESTING=True, RANDOM_AVAILABILITY=False, WAITING_LIST_LIMIT=200)
    with flask_app.app_context():
        db.create_all()
        populate_sample_data()
        yield flask_app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def journey_date():
    return date.today() + timedelta(days=10)


@pytest.fixture
def next_weekday():
    def _next(weekday):
        day = date.today() + timedelta(days=1)
        while day.weekday() != weekday:
            day += timedelta(days=1)
        return day
    return _next
