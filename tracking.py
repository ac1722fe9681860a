import math

from errors import ValidationError
from models import db, LiveTrainStatus

NUMERIC_FIELDS = {"latitude": float, "longitude": float, "delay": int, "speed": int}
REQUIRED_FIELDS = ("current_station_code", "current_station_name")

DEFAULT_STATUS = {
    "current_station_code": "NDLS",
    "current_station_name": "New Delhi",
    "latitude": 28.6431,
    "longitude": 77.2197,
    "next_station_code": "GZB",
    "next_station_name": "Ghaziabad",
    "scheduled_time": "10:30",
    "estimated_time": "10:35",
    "platform": "3",
    "delay": 5,
    "speed": 85,
}


def get_live_status(train_number):
    """
    Returns the stored running status, creating and storing the demo status
    when the train has none yet.
    """
    status = db.session.get(LiveTrainStatus, train_number)
    if status is None:
        status = LiveTrainStatus(train_number=train_number, **DEFAULT_STATUS)
        db.session.add(status)
        db.session.commit()
    return status


def _coerce_fields(data):
    unknown = set(data) - set(LiveTrainStatus.FIELDS)
    if unknown:
        raise ValidationError(f"Unknown status fields: {', '.join(sorted(unknown))}")

    cleaned = {}
    for field, value in data.items():
        kind = NUMERIC_FIELDS.get(field)
        if kind is None:
            if not isinstance(value, str) and (value is not None or field in REQUIRED_FIELDS):
                raise ValidationError(f"{field} must be a string.")
            cleaned[field] = value
            continue
        if value is None or isinstance(value, bool):
            raise ValidationError(f"{field} must be a number.")
        try:
            number = kind(value)
        except (TypeError, ValueError, OverflowError):
            raise ValidationError(f"{field} must be a number.")
        if not math.isfinite(number):
            raise ValidationError(f"{field} must be a finite number.")
        cleaned[field] = number
    return cleaned


def update_live_status(train_number, data):
    data = _coerce_fields(data)

    status = db.session.get(LiveTrainStatus, train_number)
    if status is None:
        status = LiveTrainStatus(train_number=train_number, **DEFAULT_STATUS)
        db.session.add(status)
    for field, value in data.items():
        setattr(status, field, value)
    db.session.commit()
    return status


def delay_text(delay_minutes):
    if delay_minutes == 0:
        return "On Time"
    if delay_minutes > 0:
        return f"Late by {delay_minutes} min"
    return f"Early by {abs(delay_minutes)} min"

