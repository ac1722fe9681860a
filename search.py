from datetime import date

from sqlalchemy import and_, or_

from errors import NotFoundError, ValidationError
from fares import Quota, TravelClass, calculate_distance, calculate_fare
from models import Station, Train
import railway_data


def parse_choice(enum_cls, value, field):
    for candidate in (value, str(value).upper()):
        try:
            return enum_cls(candidate)
        except ValueError:
            continue
    raise ValidationError(f"Unknown {field}: {value}")


def parse_date(value, field="journey_date"):
    if value is None or isinstance(value, date):
        return value
    try:
        return date.fromisoformat(value)
    except (TypeError, ValueError):
        raise ValidationError(f"Invalid {field}: {value} (expected YYYY-MM-DD)")


def search_stations(query):
    if not query:
        return Station.query.order_by(Station.id).limit(20).all()

    term = f"%{query}%"
    return Station.query.filter(
        Station.name.ilike(term)
        | Station.code.ilike(term)
        | Station.city.ilike(term)
        | Station.state.ilike(term)
    ).order_by(Station.id).all()


def get_station(code):
    station = Station.query.filter_by(code=code.upper()).first()
    if not station:
        raise NotFoundError(f"Station {code} not found.")
    return station


def get_train(number):
    train = Train.query.filter_by(number=number).first()
    if not train:
        raise NotFoundError(f"Train {number} not found.")
    return train


def runs_on(train, journey_date):
    if journey_date is None:
        return True
    return railway_data.ALL_DAYS[journey_date.weekday()] in train.run_days


def _minutes(hhmm):
    hours, minutes = hhmm.split(':')
    return int(hours) * 60 + int(minutes)


def journey_minutes(from_stop, to_stop):
    start = from_stop.departure_time or from_stop.arrival_time or '00:00'
    end = to_stop.arrival_time or to_stop.departure_time or '00:00'
    return (to_stop.day_number - from_stop.day_number) * 24 * 60 + _minutes(end) - _minutes(start)


def format_minutes(total):
    return f"{total // 60}h {total % 60}m"


def segment(train, from_code, to_code):
    """
    Returns (from_stop, to_stop, distance) for a journey on `train`.

    Trains without a stored schedule can still be travelled end to end,
    in which case both stops are None and the distance comes from the
    station distance matrix.
    """
    if not train.stops:
        if (from_code, to_code) == (train.source_code, train.destination_code):
            return None, None, calculate_distance(from_code, to_code)
        raise ValidationError(f"Train {train.number} does not run from {from_code} to {to_code}.")

    from_stop = train.stop_at(from_code)
    to_stop = train.stop_at(to_code)
    if not from_stop or not to_stop or from_stop.distance_from_source >= to_stop.distance_from_source:
        raise ValidationError(f"Train {train.number} does not run from {from_code} to {to_code}.")
    return from_stop, to_stop, to_stop.distance_from_source - from_stop.distance_from_source


def availability_label(seats, rng=None):
    """
    Returns (seats available, status label) for a class inventory.

    Passing an `rng` switches to demo mode: the stored inventory is ignored
    and a random count is drawn, with one class in ten shown as RAC and one
    in ten as waiting list.
    """
    if rng is not None:
        availability = int(rng.random() * seats.total_seats)
        roll = rng.random()
        if roll < 0.1:
            return 0, f"RAC {rng.randint(1, 20)}"
        if roll < 0.2:
            return 0, f"Waiting List {rng.randint(1, 50)}"
        return availability, "Available"

    if seats.available_seats > 0:
        return seats.available_seats, "Available"
    if seats.rac_booked < seats.rac_limit:
        return 0, f"RAC {seats.rac_booked + 1}"
    return 0, f"Waiting List {seats.waiting_list + 1}"


def search_trains(from_code, to_code, journey_date=None, travel_class=None, rng=None):
    from_code, to_code = from_code.upper(), to_code.upper()
    journey_date = parse_date(journey_date)
    if travel_class is not None:
        travel_class = parse_choice(TravelClass, travel_class, "class")

    candidates = Train.query.filter(or_(
        and_(Train.stops.any(station_code=from_code), Train.stops.any(station_code=to_code)),
        and_(~Train.stops.any(), Train.source_code == from_code, Train.destination_code == to_code),
    )).all()
    names = {s.code: s.name for s in Station.query.filter(Station.code.in_([from_code, to_code])).all()}

    results = []
    for train in candidates:
        try:
            from_stop, to_stop, distance = segment(train, from_code, to_code)
        except ValidationError:
            continue
        if not runs_on(train, journey_date):
            continue

        classes = {}
        for seats in train.classes:
            if travel_class is not None and seats.class_code != travel_class:
                continue
            availability, status = availability_label(seats, rng)
            classes[seats.class_code] = {
                "fare": calculate_fare(train.train_type, seats.class_code, Quota.GENERAL, distance).final_fare,
                "availability": availability,
                "status": status,
            }
        if not classes:
            continue

        results.append({
            "train_number": train.number,
            "train_name": train.name,
            "train_type": train.train_type,
            "source_station_code": train.source_code,
            "destination_station_code": train.destination_code,
            "from": from_code,
            "to": to_code,
            "from_station_name": names.get(from_code, from_code),
            "to_station_name": names.get(to_code, to_code),
            "departure_time": from_stop.departure_time if from_stop else None,
            "arrival_time": to_stop.arrival_time if to_stop else None,
            "distance": distance,
            "duration": format_minutes(journey_minutes(from_stop, to_stop)) if from_stop else None,
            "run_days": train.run_days,
            "amenities": train.amenities,
            "punctuality": train.punctuality,
            "rating": train.rating,
            "classes": classes,
        })

    # Trains without a timetable sort last
    results.sort(key=lambda r: (r["departure_time"] is None, r["departure_time"] or ''))
    return results


def seat_availability(train_number, from_code, to_code, travel_class, quota=Quota.GENERAL, journey_date=None):
    travel_class = parse_choice(TravelClass, travel_class, "class")
    quota = parse_choice(Quota, quota, "quota")
    train = get_train(train_number)
    _, _, distance = segment(train, from_code.upper(), to_code.upper())

    seats = train.inventory(travel_class)
    if seats is None:
        raise ValidationError(f"Class {travel_class.value} is not available on train {train.number}.")

    _, status = availability_label(seats)
    return {
        "train_number": train.number,
        "journey_date": journey_date,
        "from": from_code.upper(),
        "to": to_code.upper(),
        "class": travel_class.value,
        "quota": quota.value,
        "total_seats": seats.total_seats,
        "booked_seats": seats.total_seats - seats.available_seats,
        "available_seats": seats.available_seats,
        "rac_seats": seats.rac_limit - seats.rac_booked,
        "waiting_list_count": seats.waiting_list,
        "status": status,
        "current_fare": calculate_fare(train.train_type, travel_class, quota, distance).final_fare,
        "surge_multiplier": 1.0,
    }


def train_route(train_number):
    train = get_train(train_number)
    codes = [stop.station_code for stop in train.stops]
    stations = {s.code: s for s in Station.query.filter(Station.code.in_(codes)).all()}
    return [
        {"station": stations[stop.station_code].to_dict(), "schedule": stop.to_dict()}
        for stop in train.stops
        if stop.station_code in stations
    ]
