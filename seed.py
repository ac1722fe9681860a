import random

from flask import current_app

import railway_data
from models import db, Station, Train, SeatInventory, ScheduleStop


def build_train(number, name, train_type, source, destination, stops=None, classes=None,
                run_days=None, punctuality=None, rating=None):
    """
    Builds a Train with its schedule and seat inventory, without adding it
    to the session.

    `classes` maps class code -> total seats (or (total, rac_limit)); when
    omitted the layout for the train type is used.
    """
    rng = random.Random(number)
    train = Train(
        number=number,
        name=name,
        train_type=str(getattr(train_type, 'value', train_type)),
        source_code=source,
        destination_code=destination,
        run_days=run_days or railway_data.RESTRICTED_RUN_DAYS.get(number, railway_data.ALL_DAYS),
        amenities=railway_data.amenities_for(train_type),
        punctuality=punctuality if punctuality is not None else rng.randint(80, 99),
        rating=rating if rating is not None else round(rng.uniform(3.0, 5.0), 1),
    )

    if classes is None:
        classes = {c: railway_data.CLASS_CAPACITY[c] for c in railway_data.classes_for(train_type)}
    for class_code, capacity in classes.items():
        total, rac_limit = capacity if isinstance(capacity, (tuple, list)) else (capacity, 0)
        train.classes.append(SeatInventory(
            class_code=str(getattr(class_code, 'value', class_code)),
            total_seats=total,
            available_seats=total,
            rac_limit=rac_limit,
            rac_booked=0,
            waiting_list=0,
        ))

    for sequence, (code, arrival, departure, day, distance) in enumerate(stops or [], start=1):
        train.stops.append(ScheduleStop(
            sequence=sequence,
            station_code=code,
            arrival_time=arrival,
            departure_time=departure,
            day_number=day,
            distance_from_source=distance,
        ))
    return train


def populate_sample_data():
    for code, name, city, state, zone, division, platforms in railway_data.STATIONS:
        db.session.add(Station(code=code, name=name, city=city, state=state,
                               zone=zone, division=division, platforms=platforms))

    for number, name, train_type, source, destination in railway_data.TRAINS:
        db.session.add(build_train(number, name, train_type, source, destination,
                                   stops=railway_data.SCHEDULES.get(number)))
        current_app.logger.info("Added train %s - %s", number, name)

    db.session.commit()


def initialize_database():
    """Creates the schema and seeds it when no trains exist. Returns True if seeded."""
    db.create_all()
    if db.session.query(Train.id).first() is not None:
        current_app.logger.info("Database already contains data")
        return False

    current_app.logger.info("Database is empty, populating with sample data")
    populate_sample_data()
    return True


def reset_database():
    current_app.logger.warning("Resetting database")
    db.drop_all()
    db.create_all()
    populate_sample_data()
