from datetime import date, datetime, timedelta

import pytest
from sqlalchemy import update

import booking
from errors import BookingConflict, NotFoundError, PermissionDenied, ValidationError
from models import db, Booking, SeatInventory
from search import get_train

PASSENGERS = [
    {"name": "Asha Rao", "age": 34, "gender": "F", "berth_preference": "LOWER"},
    {"name": "Vikram Rao", "age": 36, "gender": "M"},
]


def book(journey_date, passengers=PASSENGERS, user="user-1", travel_class="SL", train="12759",
         from_code="HYB", to_code="MAS", **kwargs):
    return booking.create_booking(user, train, from_code, to_code, journey_date, travel_class,
                                  passengers, mobile="9876543210", email="asha@example.com", **kwargs)


def inventory(train="12759", class_code="SL"):
    return SeatInventory.query.filter_by(train_id=get_train(train).id, class_code=class_code).one()


def test_booking_confirms_seats_and_decrements_inventory(app, journey_date):
    new = book(journey_date)

    assert len(new.pnr) == 10 and new.pnr.isdigit()
    assert new.status == "confirmed"
    assert new.payment_status == "pending"
    assert new.distance == 612
    assert new.total_fare == 1269
    assert new.fare_breakdown["per_passenger"]["final_fare"] == 619
    assert [p.seat_number for p in new.passengers] == ["S1", "S2"]
    assert [p.current_status for p in new.passengers] == ["CNF", "CNF"]
    assert new.departure_time == "07:15"
    assert new.arrival_time == "19:45"
    assert inventory().available_seats == 70


def test_freed_seat_numbers_are_reused(app, journey_date):
    first = book(journey_date)
    booking.cancel_booking(first.pnr, "user-1")
    second = book(journey_date, passengers=PASSENGERS[:1])
    assert second.passengers[0].seat_number == "S1"


def test_overflow_goes_to_rac_then_waiting_list(app, journey_date):
    seats = inventory()
    seats.available_seats = 1
    seats.rac_limit = 1
    db.session.commit()

    passengers = PASSENGERS + [{"name": "Meera Rao", "age": 8, "gender": "F"}]
    new = book(journey_date, passengers=passengers)

    assert [p.current_status for p in new.passengers] == ["CNF", "RAC", "WL"]
    assert new.status == "waiting_list"
    assert [p.to_dict()["current_status"] for p in new.passengers] == ["CNF/S1", "RAC 1", "WL 1"]

    seats = inventory()
    assert (seats.available_seats, seats.rac_booked, seats.waiting_list) == (0, 1, 1)


def test_full_waiting_list_rejects_booking_without_side_effects(app, journey_date):
    app.config["WAITING_LIST_LIMIT"] = 1
    seats = inventory()
    seats.available_seats = 0
    seats.rac_limit = 0
    db.session.commit()

    with pytest.raises(BookingConflict):
        book(journey_date)

    assert inventory().waiting_list == 0
    assert Booking.query.count() == 0


def test_failure_midway_rolls_back_inventory(app, journey_date, monkeypatch):
    def explode(statuses):
        raise RuntimeError("write failed")

    monkeypatch.setattr(booking, "_booking_status", explode)
    with pytest.raises(RuntimeError):
        book(journey_date)

    assert inventory().available_seats == 72
    assert Booking.query.count() == 0


def test_booking_validation(app, journey_date):
    with pytest.raises(PermissionDenied):
        book(journey_date, user=None)
    with pytest.raises(ValidationError):
        book(date.today() - timedelta(days=1))
    with pytest.raises(ValidationError):
        book(journey_date, passengers=[])
    with pytest.raises(ValidationError):
        book(journey_date, passengers=PASSENGERS * 4)
    with pytest.raises(ValidationError):
        book(journey_date, passengers=[{"name": "", "age": 30, "gender": "M"}])
    with pytest.raises(ValidationError):
        book(journey_date, passengers=[{"name": "Old Timer", "age": 130, "gender": "M"}])
    with pytest.raises(ValidationError):
        book(journey_date, passengers=[{"name": "X", "age": 30, "gender": "Q"}])
    with pytest.raises(ValidationError):
        book(journey_date, travel_class="1A")
    with pytest.raises(ValidationError):
        book(journey_date, from_code="MAS", to_code="HYB")
    with pytest.raises(ValidationError):
        booking.create_booking("user-1", "12759", "HYB", "MAS", journey_date, "SL", PASSENGERS)
    with pytest.raises(NotFoundError):
        book(journey_date, train="00000")

    assert Booking.query.count() == 0


def test_booking_on_a_non_running_day_is_rejected(app, next_weekday):
    with pytest.raises(ValidationError):
        book(next_weekday(0), train="22691", from_code="SC", to_code="NDLS", travel_class="3A")

    tuesday = book(next_weekday(1), train="22691", from_code="SC", to_code="NDLS", travel_class="3A")
    assert tuesday.passengers[0].seat_number == "B1"


def test_tatkal_quota_costs_more(app, journey_date):
    general = book(journey_date, passengers=PASSENGERS[:1])
    tatkal = book(journey_date, passengers=PASSENGERS[:1], quota="TQ")
    assert tatkal.quota == "TQ"
    assert tatkal.total_fare > general.total_fare


def test_user_bookings_newest_first(app, journey_date):
    first = book(journey_date)
    second = book(journey_date, passengers=PASSENGERS[:1])
    book(journey_date, user="someone-else")

    assert [b.pnr for b in booking.get_user_bookings("user-1")] == [second.pnr, first.pnr]
    assert booking.get_user_bookings("nobody") == []


def test_cancel_releases_seats_and_refunds(app, journey_date):
    new = book(journey_date)
    booking.update_payment_status(new.pnr, "paid", "pay_123")

    cancelled = booking.cancel_booking(new.pnr, "user-1")

    assert cancelled.status == "cancelled"
    assert cancelled.payment_status == "refunded"
    assert cancelled.cancellation_charges == 120
    assert cancelled.refund_amount == 1269 - 120
    assert [p.current_status for p in cancelled.passengers] == ["CAN", "CAN"]
    assert [p.booking_status for p in cancelled.passengers] == ["CNF", "CNF"]
    assert inventory().available_seats == 72


def test_cancel_releases_rac_and_waiting_list(app, journey_date):
    seats = inventory()
    seats.available_seats = 0
    seats.rac_limit = 1
    db.session.commit()

    new = book(journey_date)
    booking.cancel_booking(new.pnr, "user-1")

    seats = inventory()
    assert (seats.available_seats, seats.rac_booked, seats.waiting_list) == (0, 0, 0)


def test_cancel_close_to_departure_forfeits_fare(app, journey_date):
    new = book(journey_date)
    departure = datetime.combine(journey_date, datetime.strptime("07:15", "%H:%M").time())

    cancelled = booking.cancel_booking(new.pnr, "user-1", now=departure - timedelta(hours=2))
    assert cancelled.refund_amount == 0
    assert cancelled.cancellation_charges == cancelled.total_fare


def test_cancel_after_departure_is_rejected(app, journey_date):
    new = book(journey_date)
    after = datetime.combine(journey_date, datetime.strptime("09:00", "%H:%M").time())
    with pytest.raises(BookingConflict):
        booking.cancel_booking(new.pnr, "user-1", now=after)


def test_cancel_guards(app, journey_date):
    new = book(journey_date)
    with pytest.raises(PermissionDenied):
        booking.cancel_booking(new.pnr, "intruder")

    booking.cancel_booking(new.pnr, "user-1")
    with pytest.raises(BookingConflict):
        booking.cancel_booking(new.pnr, "user-1")
    with pytest.raises(NotFoundError):
        booking.cancel_booking("0000000000", "user-1")


def test_update_payment_status(app, journey_date):
    new = book(journey_date)
    updated = booking.update_payment_status(new.pnr, "PAID", "pay_42")
    assert updated.payment_status == "paid"
    assert updated.payment_id == "pay_42"

    with pytest.raises(ValidationError):
        booking.update_payment_status(new.pnr, "lost")


def test_pnr_status_is_derived_from_booking(app, journey_date):
    new = book(journey_date)
    status = booking.get_pnr_status(new.pnr)

    assert status["pnr"] == new.pnr
    assert status["current_status"] == "confirmed"
    assert status["journey_date"] == journey_date.isoformat()
    assert [p["name"] for p in status["passengers"]] == ["Asha Rao", "Vikram Rao"]
    assert status["passengers"][0]["booking_status"] == "CNF/S1"

    booking.cancel_booking(new.pnr, "user-1")
    status = booking.get_pnr_status(new.pnr)
    assert status["current_status"] == "cancelled"
    assert status["passengers"][0] == {
        "name": "Asha Rao", "age": 34, "gender": "F",
        "booking_status": "CNF/S1", "current_status": "CAN",
    }

    with pytest.raises(NotFoundError):
        booking.get_pnr_status("1234567890")


def test_queue_positions_stay_unique_after_cancellation(app, journey_date):
    seats = inventory()
    seats.available_seats = 0
    seats.rac_limit = 5
    db.session.commit()

    first = book(journey_date, passengers=PASSENGERS[:1])
    second = book(journey_date, passengers=PASSENGERS[1:])
    booking.cancel_booking(first.pnr, "user-1")
    third = book(journey_date, passengers=PASSENGERS[:1])

    labels = [b.passengers[0].to_dict()["current_status"] for b in (second, third)]
    assert labels == ["RAC 2", "RAC 3"]
    assert inventory().rac_booked == 2


def test_waiting_list_positions_continue_after_cancellation(app, journey_date):
    seats = inventory()
    seats.available_seats = 0
    seats.rac_limit = 0
    db.session.commit()

    first = book(journey_date, passengers=PASSENGERS)
    booking.cancel_booking(first.pnr, "user-1")
    second = book(journey_date, passengers=PASSENGERS[:1])
    assert second.passengers[0].position == 1

    third = book(journey_date, passengers=PASSENGERS)
    assert [p.position for p in third.passengers] == [2, 3]


def test_cancel_rereads_booking_status_inside_transaction(app, journey_date):
    new = book(journey_date)
    assert new.status == "confirmed"

    # Another writer cancels the row behind the session's back
    db.session.execute(
        update(Booking).where(Booking.pnr == new.pnr).values(status="cancelled")
        .execution_options(synchronize_session=False)
    )
    with pytest.raises(BookingConflict):
        booking.cancel_booking(new.pnr, "user-1")

    assert inventory().available_seats == 70


@pytest.mark.parametrize("passengers", [
    ["Asha"],
    {"name": "Asha", "age": 30},
    [{"name": 42, "age": 30, "gender": "F"}],
])
def test_malformed_passengers_are_rejected(app, journey_date, passengers):
    with pytest.raises(ValidationError):
        book(journey_date, passengers=passengers)


def test_non_string_station_codes_are_rejected(app, journey_date):
    with pytest.raises(ValidationError):
        book(journey_date, from_code=123)
    with pytest.raises(ValidationError):
        book(journey_date, train=12759)
    assert Booking.query.count() == 0
