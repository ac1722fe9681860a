import pytest

import tracking
from errors import ValidationError
from models import LiveTrainStatus, db


def test_missing_status_is_created_with_defaults(app):
    assert db.session.get(LiveTrainStatus, "12723") is None

    status = tracking.get_live_status("12723")
    assert status.current_station_code == "NDLS"
    assert status.next_station_code == "GZB"
    assert status.delay == 5

    nested = status.to_dict()
    assert nested["current_location"]["latitude"] == 28.6431
    assert nested["next_station"]["estimated_time"] == "10:35"
    assert db.session.get(LiveTrainStatus, "12723") is not None


def test_update_overwrites_given_fields_only(app):
    tracking.update_live_status("12759", {"current_station_code": "BZA", "delay": -3})
    status = tracking.get_live_status("12759")
    assert status.current_station_code == "BZA"
    assert status.delay == -3
    assert status.speed == 85


def test_update_rejects_unknown_fields(app):
    with pytest.raises(ValidationError):
        tracking.update_live_status("12759", {"train_name": "renamed"})


@pytest.mark.parametrize("delay,text", [
    (0, "On Time"),
    (12, "Late by 12 min"),
    (-4, "Early by 4 min"),
])
def test_delay_text(delay, text):
    assert tracking.delay_text(delay) == text


def test_numeric_fields_are_coerced(app):
    status = tracking.update_live_status("12759", {"delay": "12", "latitude": "17.43"})
    assert status.delay == 12
    assert status.latitude == 17.43
    assert tracking.delay_text(status.delay) == "Late by 12 min"


@pytest.mark.parametrize("data", [
    {"delay": "late"},
    {"speed": None},
    {"delay": True},
    {"latitude": "nan"},
    {"longitude": float("inf")},
    {"current_station_code": None},
    {"platform": 3},
])
def test_badly_typed_values_are_rejected(app, data):
    with pytest.raises(ValidationError):
        tracking.update_live_status("12759", data)
    assert db.session.get(LiveTrainStatus, "12759") is None
