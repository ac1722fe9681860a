import logging
import math
import random

import click
from flask import Flask, request, jsonify
from flask_migrate import Migrate
from sqlalchemy import text

import booking
import railway_data
import search
import seed
import tracking
import users
from config import Config
from errors import RailwayError, PermissionDenied, ValidationError
from fares import Quota, TrainType, calculate_distance, calculate_fare
from models import db, Train, SeatInventory, Station

app = Flask(__name__)
app.config.from_object(Config)
app.logger.setLevel(getattr(logging, str(app.config['LOG_LEVEL']).upper(), logging.INFO))

db.init_app(app)
migrate = Migrate(app, db)

MAX_FARE_DISTANCE = 10000
MAX_SURGE_MULTIPLIER = 5.0


def current_uid():
    uid = request.headers.get('X-User-Id')
    if not uid:
        raise PermissionDenied("Sign in required.")
    return uid


def payload():
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object.")
    return data


def availability_rng():
    return random.Random() if app.config.get('RANDOM_AVAILABILITY') else None


@app.errorhandler(RailwayError)
def handle_railway_error(e):
    return jsonify(e.to_dict()), e.status_code


@app.route('/', methods=['GET'])
def home():
    return jsonify({"message": "Railway booking API running"})


@app.route('/health', methods=['GET'])
def health():
    response = {"backend": "running", "database": "not connected", "trains": 0, "stations": 0}
    try:
        db.session.execute(text("SELECT 1"))
        response["database"] = "connected"
        response["trains"] = db.session.query(Train.id).count()
        response["stations"] = db.session.query(Station.id).count()
    except Exception as e:
        db.session.rollback()
        app.logger.error("Database health check failed: %s", e)
        response["database"] = f"error: {str(e)[:50]}"
        return jsonify(response), 503
    return jsonify(response)


@app.route('/stations', methods=['GET'])
def get_stations():
    return jsonify([s.to_dict() for s in search.search_stations(request.args.get('q', ''))])


@app.route('/stations/<code>', methods=['GET'])
def get_station(code):
    return jsonify(search.get_station(code).to_dict())


@app.route('/search', methods=['GET'])
def search_trains():
    from_code = request.args.get('from')
    to_code = request.args.get('to')
    if not from_code or not to_code:
        raise ValidationError("Both 'from' and 'to' station codes are required.")

    trains = search.search_trains(from_code, to_code,
                                  journey_date=request.args.get('date'),
                                  travel_class=request.args.get('class'),
                                  rng=availability_rng())
    if not trains:
        return jsonify({"status": "error", "message": f"No trains found from {from_code} to {to_code}",
                        "count": 0, "trains": []})
    return jsonify({"status": "success", "count": len(trains), "trains": trains})


@app.route('/availability', methods=['GET'])
def seat_availability():
    required = ['train', 'from', 'to', 'class']
    missing = [f for f in required if not request.args.get(f)]
    if missing:
        raise ValidationError(f"Missing parameters: {', '.join(missing)}")

    return jsonify(search.seat_availability(
        request.args['train'], request.args['from'], request.args['to'], request.args['class'],
        quota=request.args.get('quota', Quota.GENERAL.value),
        journey_date=request.args.get('date'),
    ))


@app.route('/fare', methods=['POST'])
def fare_quote():
    data = payload()
    missing = [f for f in ('train_type', 'class') if f not in data]
    if missing:
        raise ValidationError(f"Missing fields: {', '.join(missing)}")

    quota = data.get('quota', Quota.GENERAL.value)
    if not all(isinstance(value, str) for value in (data['train_type'], data['class'], quota)):
        raise ValidationError("train_type, class and quota must be strings.")

    distance = data.get('distance')
    if distance is None:
        if not isinstance(data.get('from'), str) or not isinstance(data.get('to'), str):
            raise ValidationError("Provide either distance or from/to station codes.")
        distance = calculate_distance(data['from'].upper(), data['to'].upper())
    try:
        distance = float(distance)
        surge = float(data.get('surge_multiplier', 1.0))
    except (TypeError, ValueError):
        raise ValidationError("distance and surge_multiplier must be numbers.")
    if not (math.isfinite(distance) and math.isfinite(surge)):
        raise ValidationError("distance and surge_multiplier must be finite numbers.")
    if distance > MAX_FARE_DISTANCE or not 0 < surge <= MAX_SURGE_MULTIPLIER:
        raise ValidationError(f"distance must be at most {MAX_FARE_DISTANCE} km and "
                              f"surge_multiplier between 0 and {MAX_SURGE_MULTIPLIER}.")

    breakdown = calculate_fare(data['train_type'], data['class'], quota,
                               distance, dynamic_pricing=bool(data.get('dynamic_pricing', False)),
                               surge_multiplier=surge)
    return jsonify({"distance": distance, **breakdown.to_dict()})


@app.route('/train-types', methods=['GET'])
def train_types():
    return jsonify([
        {
            "type": train_type.value,
            "description": railway_data.TRAIN_TYPE_INFO.get(train_type),
            "classes": [c.value for c in railway_data.classes_for(train_type)],
            "amenities": railway_data.amenities_for(train_type),
        }
        for train_type in TrainType
    ])


@app.route('/trains', methods=['GET'])
def get_trains():
    return jsonify([t.to_dict() for t in Train.query.order_by(Train.number).all()])


@app.route('/trains', methods=['POST'])
def add_train():
    data = payload()
    required = ['number', 'name', 'train_type', 'from', 'to']
    missing = [f for f in required if f not in data]
    if missing:
        raise ValidationError(f"Missing fields: {', '.join(missing)}")
    if Train.query.filter_by(number=data['number']).first():
        return jsonify({"status": "error", "message": f"Train {data['number']} already exists"}), 409

    stops = [(s['station_code'].upper(), s.get('arrival_time'), s.get('departure_time'),
              s.get('day_number', 1), s['distance_from_source'])
             for s in data.get('stops', [])]
    distances = [s[4] for s in stops]
    if distances != sorted(distances) or len(set(distances)) != len(distances):
        raise ValidationError("Stops must be listed in increasing distance from source.")

    train_type = search.parse_choice(TrainType, data["train_type"], "train type")
    train = seed.build_train(data["number"], data["name"], train_type,
                             data['from'].upper(), data['to'].upper(),
                             stops=stops, classes=data.get('classes'),
                             run_days=data.get('run_days'))
    db.session.add(train)
    db.session.commit()
    app.logger.info("Added train %s - %s", train.number, train.name)
    return jsonify({"message": "Train added", "number": train.number}), 201


@app.route('/trains/<number>', methods=['GET'])
def get_train(number):
    return jsonify(search.get_train(number).to_dict())


@app.route('/trains/<number>', methods=['PUT'])
def update_train(number):
    train = search.get_train(number)
    data = payload()
    train.name = data.get('name', train.name)
    train.run_days = data.get('run_days', train.run_days)

    # class code -> total seats; available seats shift by the same delta
    for class_code, total in data.get('classes', {}).items():
        seats = train.inventory(class_code.upper())
        if seats is None:
            train.classes.append(SeatInventory(class_code=class_code.upper(), total_seats=total,
                                               available_seats=total, rac_limit=0, rac_booked=0,
                                               waiting_list=0))
            continue
        booked = seats.total_seats - seats.available_seats
        if total < booked:
            raise ValidationError(f"Class {class_code}: {booked} seats already booked.")
        seats.total_seats = total
        seats.available_seats = total - booked
    db.session.commit()
    return jsonify({"message": f"Train {number} updated"})


@app.route('/trains/<number>', methods=['DELETE'])
def delete_train(number):
    train = search.get_train(number)
    db.session.delete(train)
    db.session.commit()
    return jsonify({"message": f"Train {number} deleted"})


@app.route('/trains/<number>/route', methods=['GET'])
def get_train_route(number):
    return jsonify(search.train_route(number))


@app.route('/bookings', methods=['POST'])
def create_booking():
    uid = current_uid()
    data = payload()
    required = ['train_number', 'from', 'to', 'journey_date', 'class', 'passengers']
    missing = [f for f in required if f not in data]
    if missing:
        raise ValidationError(f"Missing fields: {', '.join(missing)}")

    contact = data.get('contact') or {}
    if not isinstance(contact, dict):
        raise ValidationError("contact must be an object with mobile and email.")
    new_booking = booking.create_booking(
        uid, data['train_number'], data['from'], data['to'], data['journey_date'], data['class'],
        data['passengers'], quota=data.get('quota', Quota.GENERAL.value),
        mobile=contact.get('mobile'), email=contact.get('email'),
    )
    return jsonify({"status": "success", "booking": new_booking.to_dict()}), 201


@app.route('/bookings', methods=['GET'])
def list_bookings():
    uid = current_uid()
    return jsonify([b.to_dict() for b in booking.get_user_bookings(uid)])


@app.route('/bookings/<pnr>', methods=['GET'])
def get_booking(pnr):
    uid = current_uid()
    found = booking.get_booking(pnr)
    if found.user_id != uid:
        raise PermissionDenied("This booking belongs to another user.")
    return jsonify(found.to_dict())


@app.route('/bookings/<pnr>/cancel', methods=['POST'])
def cancel_booking(pnr):
    cancelled = booking.cancel_booking(pnr, current_uid())
    return jsonify({"status": "success", "booking": cancelled.to_dict()})


@app.route('/bookings/<pnr>/payment', methods=['PUT'])
def update_payment(pnr):
    uid = current_uid()
    data = payload()
    if booking.get_booking(pnr).user_id != uid:
        raise PermissionDenied("This booking belongs to another user.")
    updated = booking.update_payment_status(pnr, data.get('payment_status'), data.get('payment_id'))
    return jsonify({"status": "success", "booking": updated.to_dict()})


@app.route('/pnr/<pnr>', methods=['GET'])
def pnr_status(pnr):
    return jsonify(booking.get_pnr_status(pnr))


@app.route('/live/<train_number>', methods=['GET'])
def live_status(train_number):
    status = tracking.get_live_status(train_number)
    return jsonify({**status.to_dict(), "delay_text": tracking.delay_text(status.delay)})


@app.route('/live/<train_number>', methods=['PUT'])
def update_live_status(train_number):
    status = tracking.update_live_status(train_number, payload())
    return jsonify({**status.to_dict(), "delay_text": tracking.delay_text(status.delay)})


@app.route('/users/me', methods=['GET'])
def get_profile():
    uid = current_uid()
    profile = users.get_user_profile(uid)
    if profile is None:
        return jsonify({"status": "error", "message": "Profile not found"}), 404
    return jsonify(profile.to_dict())


@app.route('/users/me', methods=['PUT'])
def save_profile():
    uid = current_uid()
    return jsonify(users.create_or_update_user(uid, payload()).to_dict())


@app.route('/users/me/login', methods=['POST'])
def record_login():
    uid = current_uid()
    users.update_last_login(uid)
    return jsonify({"success": True})


@app.cli.command('seed-db')
def seed_db_command():
    """Create tables and load the demo network if the database is empty."""
    if seed.initialize_database():
        click.echo("Database initialized with sample data.")
    else:
        click.echo("Database already contains data.")


@app.cli.command('reset-db')
@click.confirmation_option(prompt="This drops every table. Continue?")
def reset_db_command():
    """Drop all tables and reload the demo network."""
    seed.reset_database()
    click.echo("Database reset and re-initialized.")


if app.config.get('AUTO_SEED'):
    with app.app_context():
        seed.initialize_database()


if __name__ == '__main__':
    app.run(debug=True)
