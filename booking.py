import random
from datetime import date, datetime

from flask import current_app
from sqlalchemy import func

from errors import BookingConflict, NotFoundError, PermissionDenied, ValidationError
from fares import Quota, TravelClass, calculate_booking_charges, calculate_fare, cancellation_charges
from models import db, Booking, Passenger, SeatInventory, Train
import railway_data
from search import get_train, parse_choice, parse_date, runs_on, segment

MAX_PASSENGERS = 6
GENDERS = ('M', 'F', 'O')
BERTH_PREFERENCES = ('LOWER', 'MIDDLE', 'UPPER', 'SIDE_LOWER', 'SIDE_UPPER', 'NO_PREFERENCE')
PAYMENT_STATUSES = ('pending', 'paid', 'refunded', 'failed')


def generate_pnr():
    while True:
        pnr = str(random.randint(10 ** 9, 10 ** 10 - 1))
        if not Booking.query.filter_by(pnr=pnr).first():
            return pnr


def get_booking(pnr):
    booking = Booking.query.filter_by(pnr=pnr).first()
    if not booking:
        raise NotFoundError(f"No booking found for PNR {pnr}.")
    return booking


def get_user_bookings(user_id):
    return Booking.query.filter_by(user_id=user_id).order_by(
        Booking.booking_date.desc(), Booking.id.desc()).all()


def _clean_passengers(passengers):
    if not passengers:
        raise ValidationError("At least one passenger is required.")
    if not isinstance(passengers, list):
        raise ValidationError("passengers must be a list.")
    if len(passengers) > MAX_PASSENGERS:
        raise ValidationError(f"A booking can hold at most {MAX_PASSENGERS} passengers.")

    cleaned = []
    for i, p in enumerate(passengers, start=1):
        if not isinstance(p, dict):
            raise ValidationError(f"Passenger {i}: expected an object with name, age and gender.")
        name = p.get('name') or ''
        if not isinstance(name, str) or not name.strip():
            raise ValidationError(f"Passenger {i}: name is required.")
        name = name.strip()
        try:
            age = int(p.get('age'))
        except (TypeError, ValueError):
            raise ValidationError(f"Passenger {i}: age is required.")
        if not 1 <= age <= 120:
            raise ValidationError(f"Passenger {i}: age must be between 1 and 120.")
        gender = str(p.get('gender') or 'M').strip().upper()[:1]
        if gender not in GENDERS:
            raise ValidationError(f"Passenger {i}: gender must be one of M, F, O.")
        berth = str(p.get('berth_preference') or 'NO_PREFERENCE').upper()
        if berth not in BERTH_PREFERENCES:
            raise ValidationError(f"Passenger {i}: unknown berth preference {berth}.")
        cleaned.append({"name": name, "age": age, "gender": gender, "berth_preference": berth})
    return cleaned


def _locked_inventory(train_id, class_code):
    return (SeatInventory.query
            .filter_by(train_id=train_id, class_code=class_code)
            .with_for_update()
            .populate_existing()
            .first())


def _taken_seats(train_number, class_code):
    rows = (db.session.query(Passenger.seat_number)
            .join(Booking)
            .filter(Booking.train_number == train_number,
                    Booking.class_code == class_code,
                    Passenger.current_status == 'CNF')
            .all())
    return {seat for (seat,) in rows}


def _queue_tails(train_number, class_code):
    """Highest RAC and WL positions still held by live passengers."""
    rows = (db.session.query(Passenger.current_status, func.max(Passenger.position))
            .join(Booking)
            .filter(Booking.train_number == train_number,
                    Booking.class_code == class_code,
                    Passenger.current_status.in_(('RAC', 'WL')))
            .group_by(Passenger.current_status)
            .all())
    tails = {'RAC': 0, 'WL': 0}
    tails.update({status: position or 0 for status, position in rows})
    return tails


def _allocate(seats, prefix, taken, tails, waiting_list_limit):
    """Returns (status, seat number, RAC/WL position) and updates the inventory."""
    if seats.available_seats > 0:
        number = next(n for n in range(1, seats.total_seats + 1) if f"{prefix}{n}" not in taken)
        seat_number = f"{prefix}{number}"
        taken.add(seat_number)
        seats.available_seats -= 1
        return 'CNF', seat_number, None
    if seats.rac_booked < seats.rac_limit:
        seats.rac_booked += 1
        tails['RAC'] += 1
        return 'RAC', None, tails['RAC']
    if seats.waiting_list < waiting_list_limit:
        seats.waiting_list += 1
        tails['WL'] += 1
        return 'WL', None, tails['WL']
    raise BookingConflict("Waiting list is full for this class.")


def _booking_status(statuses):
    if 'WL' in statuses:
        return 'waiting_list'
    if 'RAC' in statuses:
        return 'rac'
    return 'confirmed'


def create_booking(user_id, train_number, from_code, to_code, journey_date, travel_class,
                   passengers, quota=Quota.GENERAL, mobile=None, email=None, today=None):
    """
    Books seats for all passengers and decrements the class inventory in a
    single transaction. Passengers are confirmed while berths last, then
    placed on RAC, then on the waiting list.
    """
    if not user_id:
        raise PermissionDenied("Sign in to book tickets.")
    travel_class = parse_choice(TravelClass, travel_class, "class")
    quota = parse_choice(Quota, quota, "quota")
    journey_date = parse_date(journey_date)
    if journey_date is None:
        raise ValidationError("journey_date is required.")
    if journey_date < (today or date.today()):
        raise ValidationError("Journey date is in the past.")
    if not mobile or not email:
        raise ValidationError("Please provide contact details (mobile and email).")
    passengers = _clean_passengers(passengers)
    if not all(isinstance(value, str) for value in (train_number, from_code, to_code)):
        raise ValidationError("train_number, from and to must be strings.")

    from_code, to_code = from_code.upper(), to_code.upper()
    train = get_train(train_number)
    from_stop, to_stop, distance = segment(train, from_code, to_code)
    if not runs_on(train, journey_date):
        raise ValidationError(f"Train {train.number} does not run on {journey_date.isoformat()}.")
    if train.inventory(travel_class) is None:
        raise ValidationError(f"Class {travel_class.value} is not available on train {train.number}.")

    per_passenger = calculate_fare(train.train_type, travel_class, quota, distance)
    fare = per_passenger.final_fare * len(passengers)
    charges = calculate_booking_charges(fare)

    try:
        seats = _locked_inventory(train.id, travel_class.value)
        prefix = railway_data.COACH_PREFIX.get(travel_class, travel_class.value[0])
        taken = _taken_seats(train.number, travel_class.value)
        tails = _queue_tails(train.number, travel_class.value)
        limit = current_app.config.get('WAITING_LIST_LIMIT', 200)

        booking = Booking(
            pnr=generate_pnr(),
            user_id=user_id,
            train_number=train.number,
            train_name=train.name,
            from_code=from_code,
            to_code=to_code,
            journey_date=journey_date,
            departure_time=from_stop.departure_time if from_stop else None,
            arrival_time=to_stop.arrival_time if to_stop else None,
            distance=distance,
            class_code=travel_class.value,
            quota=quota.value,
            fare_breakdown={"per_passenger": per_passenger.to_dict(),
                            "passengers": len(passengers),
                            "fare": fare,
                            **charges},
            total_fare=charges["total_amount"],
            payment_status='pending',
            mobile=mobile,
            email=email,
        )
        for p in passengers:
            status, seat_number, position = _allocate(seats, prefix, taken, tails, limit)
            booking.passengers.append(Passenger(
                seat_number=seat_number,
                booking_status=status,
                current_status=status,
                position=position,
                **p,
            ))
        booking.status = _booking_status([p.booking_status for p in booking.passengers])

        db.session.add(booking)
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise

    current_app.logger.info("Booked PNR %s on train %s (%s, %d passengers, %s)",
                            booking.pnr, train.number, travel_class.value, len(passengers), booking.status)
    return booking


def hours_before_departure(booking, now=None):
    departure = datetime.combine(booking.journey_date,
                                 datetime.strptime(booking.departure_time or '00:00', '%H:%M').time())
    return (departure - (now or datetime.now())).total_seconds() / 3600


def _locked_booking(pnr):
    booking = (Booking.query
               .filter_by(pnr=pnr)
               .with_for_update()
               .populate_existing()
               .first())
    if not booking:
        raise NotFoundError(f"No booking found for PNR {pnr}.")
    return booking


def cancel_booking(pnr, user_id, now=None):
    """
    Cancels every passenger on the booking and releases their berths, RAC
    places or waiting-list places. The booking row stays locked from the
    status check until commit.
    """
    try:
        booking = _locked_booking(pnr)
        if booking.user_id != user_id:
            raise PermissionDenied("This booking belongs to another user.")
        if booking.status == 'cancelled':
            raise BookingConflict(f"Booking {pnr} is already cancelled.")

        hours = hours_before_departure(booking, now)
        if hours < 0:
            raise BookingConflict("The train has already departed.")

        charges = min(cancellation_charges(booking.class_code, hours, booking.total_fare), booking.total_fare)

        train = Train.query.filter_by(number=booking.train_number).first()
        seats = _locked_inventory(train.id, booking.class_code) if train else None
        if seats is None:
            current_app.logger.warning("No inventory for train %s class %s; seats for PNR %s not released",
                                       booking.train_number, booking.class_code, pnr)

        for passenger in booking.passengers:
            if seats is not None:
                # Freed berths go to the next booking; RAC and WL passengers are not promoted
                if passenger.current_status == 'CNF':
                    seats.available_seats = min(seats.total_seats, seats.available_seats + 1)
                elif passenger.current_status == 'RAC':
                    seats.rac_booked = max(0, seats.rac_booked - 1)
                elif passenger.current_status == 'WL':
                    seats.waiting_list = max(0, seats.waiting_list - 1)
            passenger.current_status = 'CAN'

        booking.status = 'cancelled'
        booking.cancellation_charges = charges
        booking.refund_amount = booking.total_fare - charges
        if booking.payment_status == 'paid':
            booking.payment_status = 'refunded'
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise

    current_app.logger.info("Cancelled PNR %s, charges %s, refund %s", pnr, charges, booking.refund_amount)
    return booking


def update_payment_status(pnr, payment_status, payment_id=None):
    payment_status = (payment_status or '').lower()
    if payment_status not in PAYMENT_STATUSES:
        raise ValidationError(f"Unknown payment status: {payment_status}")

    booking = get_booking(pnr)
    booking.payment_status = payment_status
    if payment_id:
        booking.payment_id = payment_id
    db.session.commit()
    return booking


def get_pnr_status(pnr):
    booking = get_booking(pnr)
    return {
        "pnr": booking.pnr,
        "current_status": booking.status,
        "train_number": booking.train_number,
        "train_name": booking.train_name,
        "journey_date": booking.journey_date.isoformat(),
        "from": booking.from_code,
        "to": booking.to_code,
        "class": booking.class_code,
        "passengers": [
            {
                "name": p.name,
                "age": p.age,
                "gender": p.gender,
                "booking_status": p.status_label(p.booking_status),
                "current_status": p.status_label(p.current_status),
            }
            for p in booking.passengers
        ],
        "last_updated": booking.updated_at.isoformat() if booking.updated_at else None,
    }
