from flask_sqlalchemy import SQLAlchemy

db = SQLAlchemy()


def _iso(value):
    return value.isoformat() if value else None


class Station(db.Model):
    __tablename__ = 'stations'
    id = db.Column(db.Integer, primary_key=True)
    code = db.Column(db.String(10), unique=True, nullable=False)
    name = db.Column(db.String(100), nullable=False)
    city = db.Column(db.String(100), nullable=False)
    state = db.Column(db.String(100), nullable=False)
    zone = db.Column(db.String(10))
    division = db.Column(db.String(10))
    platforms = db.Column(db.Integer)

    def to_dict(self):
        return {
            "code": self.code,
            "name": self.name,
            "city": self.city,
            "state": self.state,
            "zone": self.zone,
            "division": self.division,
            "platforms": self.platforms,
        }


class Train(db.Model):
    __tablename__ = 'trains'
    id = db.Column(db.Integer, primary_key=True)
    number = db.Column(db.String(10), unique=True, nullable=False)
    name = db.Column(db.String(100), nullable=False)
    train_type = db.Column(db.String(50), nullable=False)
    source_code = db.Column(db.String(10), nullable=False)
    destination_code = db.Column(db.String(10), nullable=False)
    run_days = db.Column(db.JSON, nullable=False, default=list)
    amenities = db.Column(db.JSON, nullable=False, default=list)
    punctuality = db.Column(db.Integer, nullable=False, default=90)
    rating = db.Column(db.Float, nullable=False, default=4.0)
    created_at = db.Column(db.DateTime, server_default=db.func.now())
    updated_at = db.Column(db.DateTime, server_default=db.func.now(), onupdate=db.func.now())

    classes = db.relationship('SeatInventory', backref='train', lazy=True,
                              cascade='all, delete-orphan', order_by='SeatInventory.id')
    stops = db.relationship('ScheduleStop', backref='train', lazy=True,
                            cascade='all, delete-orphan', order_by='ScheduleStop.sequence')

    def inventory(self, class_code):
        for seats in self.classes:
            if seats.class_code == class_code:
                return seats
        return None

    def stop_at(self, station_code):
        for stop in self.stops:
            if stop.station_code == station_code:
                return stop
        return None

    def to_dict(self):
        return {
            "number": self.number,
            "name": self.name,
            "train_type": self.train_type,
            "from": self.source_code,
            "to": self.destination_code,
            "run_days": self.run_days,
            "amenities": self.amenities,
            "punctuality": self.punctuality,
            "rating": self.rating,
            "classes": {c.class_code: c.to_dict() for c in self.classes},
            "route": [s.station_code for s in self.stops],
        }


class SeatInventory(db.Model):
    __tablename__ = 'seat_inventory'
    __table_args__ = (db.UniqueConstraint('train_id', 'class_code'),)
    id = db.Column(db.Integer, primary_key=True)
    train_id = db.Column(db.Integer, db.ForeignKey('trains.id'), nullable=False)
    class_code = db.Column(db.String(4), nullable=False)
    total_seats = db.Column(db.Integer, nullable=False)
    available_seats = db.Column(db.Integer, nullable=False)
    rac_limit = db.Column(db.Integer, nullable=False, default=0)
    rac_booked = db.Column(db.Integer, nullable=False, default=0)
    waiting_list = db.Column(db.Integer, nullable=False, default=0)
    updated_at = db.Column(db.DateTime, server_default=db.func.now(), onupdate=db.func.now())

    def to_dict(self):
        return {
            "total_seats": self.total_seats,
            "available_seats": self.available_seats,
            "rac_seats": self.rac_limit - self.rac_booked,
            "waiting_list": self.waiting_list,
        }


class ScheduleStop(db.Model):
    __tablename__ = 'schedule_stops'
    id = db.Column(db.Integer, primary_key=True)
    train_id = db.Column(db.Integer, db.ForeignKey('trains.id'), nullable=False)
    sequence = db.Column(db.Integer, nullable=False)
    station_code = db.Column(db.String(10), nullable=False)
    arrival_time = db.Column(db.String(5))
    departure_time = db.Column(db.String(5))
    day_number = db.Column(db.Integer, nullable=False, default=1)
    distance_from_source = db.Column(db.Integer, nullable=False)

    def to_dict(self):
        return {
            "station_code": self.station_code,
            "arrival_time": self.arrival_time,
            "departure_time": self.departure_time,
            "day_number": self.day_number,
            "distance_from_source": self.distance_from_source,
        }


class UserProfile(db.Model):
    __tablename__ = 'users'
    uid = db.Column(db.String(128), primary_key=True)
    email = db.Column(db.String(255))
    display_name = db.Column(db.String(100))
    phone_number = db.Column(db.String(20))
    photo_url = db.Column(db.String(500))
    date_of_birth = db.Column(db.String(10))
    gender = db.Column(db.String(10))
    address = db.Column(db.Text)
    emergency_contact = db.Column(db.String(20))
    preferred_class = db.Column(db.String(4))
    kyc_verified = db.Column(db.Boolean, nullable=False, default=False)
    created_at = db.Column(db.DateTime, server_default=db.func.now())
    updated_at = db.Column(db.DateTime, server_default=db.func.now(), onupdate=db.func.now())
    last_login = db.Column(db.DateTime)

    EDITABLE = ('email', 'display_name', 'phone_number', 'photo_url', 'date_of_birth', 'gender',
                'address', 'emergency_contact', 'preferred_class', 'kyc_verified')

    def to_dict(self):
        data = {field: getattr(self, field) for field in self.EDITABLE}
        data.update({
            "uid": self.uid,
            "created_at": _iso(self.created_at),
            "updated_at": _iso(self.updated_at),
            "last_login": _iso(self.last_login),
        })
        return data


class Booking(db.Model):
    __tablename__ = 'bookings'
    id = db.Column(db.Integer, primary_key=True)
    pnr = db.Column(db.String(10), unique=True, nullable=False)
    # Soft references: neither is a foreign key
    user_id = db.Column(db.String(128), nullable=False, index=True)
    train_number = db.Column(db.String(10), nullable=False)
    train_name = db.Column(db.String(100), nullable=False)
    from_code = db.Column(db.String(10), nullable=False)
    to_code = db.Column(db.String(10), nullable=False)
    journey_date = db.Column(db.Date, nullable=False)
    departure_time = db.Column(db.String(5))
    arrival_time = db.Column(db.String(5))
    distance = db.Column(db.Integer, nullable=False)
    class_code = db.Column(db.String(4), nullable=False)
    quota = db.Column(db.String(4), nullable=False, default='GN')
    fare_breakdown = db.Column(db.JSON)
    total_fare = db.Column(db.Float, nullable=False)
    status = db.Column(db.String(20), nullable=False, default='confirmed')
    payment_status = db.Column(db.String(20), nullable=False, default='pending')
    payment_id = db.Column(db.String(100))
    cancellation_charges = db.Column(db.Float)
    refund_amount = db.Column(db.Float)
    mobile = db.Column(db.String(20))
    email = db.Column(db.String(255))
    booking_date = db.Column(db.DateTime, server_default=db.func.now())
    updated_at = db.Column(db.DateTime, server_default=db.func.now(), onupdate=db.func.now())

    passengers = db.relationship('Passenger', backref='booking', lazy=True,
                                 cascade='all, delete-orphan', order_by='Passenger.id')

    def to_dict(self):
        return {
            "pnr": self.pnr,
            "user_id": self.user_id,
            "train_number": self.train_number,
            "train_name": self.train_name,
            "from": self.from_code,
            "to": self.to_code,
            "journey_date": _iso(self.journey_date),
            "departure_time": self.departure_time,
            "arrival_time": self.arrival_time,
            "distance": self.distance,
            "class": self.class_code,
            "quota": self.quota,
            "passengers": [p.to_dict() for p in self.passengers],
            "fare_breakdown": self.fare_breakdown,
            "total_fare": self.total_fare,
            "status": self.status,
            "payment_status": self.payment_status,
            "payment_id": self.payment_id,
            "cancellation_charges": self.cancellation_charges,
            "refund_amount": self.refund_amount,
            "contact": {"mobile": self.mobile, "email": self.email},
            "booking_date": _iso(self.booking_date),
            "updated_at": _iso(self.updated_at),
        }


class Passenger(db.Model):
    __tablename__ = 'passengers'
    id = db.Column(db.Integer, primary_key=True)
    booking_id = db.Column(db.Integer, db.ForeignKey('bookings.id'), nullable=False)
    name = db.Column(db.String(100), nullable=False)
    age = db.Column(db.Integer, nullable=False)
    gender = db.Column(db.String(1), nullable=False)
    berth_preference = db.Column(db.String(20))
    seat_number = db.Column(db.String(10))
    # CNF / RAC / WL / CAN
    booking_status = db.Column(db.String(4), nullable=False)
    current_status = db.Column(db.String(4), nullable=False)
    position = db.Column(db.Integer)

    def status_label(self, status):
        if status == 'CNF' and self.seat_number:
            return f"CNF/{self.seat_number}"
        if status in ('RAC', 'WL') and self.position:
            return f"{status} {self.position}"
        return status

    def to_dict(self):
        return {
            "name": self.name,
            "age": self.age,
            "gender": self.gender,
            "berth_preference": self.berth_preference,
            "seat_number": self.seat_number,
            "booking_status": self.status_label(self.booking_status),
            "current_status": self.status_label(self.current_status),
        }


class LiveTrainStatus(db.Model):
    __tablename__ = 'live_train_status'
    train_number = db.Column(db.String(10), primary_key=True)
    current_station_code = db.Column(db.String(10), nullable=False)
    current_station_name = db.Column(db.String(100), nullable=False)
    latitude = db.Column(db.Float)
    longitude = db.Column(db.Float)
    next_station_code = db.Column(db.String(10))
    next_station_name = db.Column(db.String(100))
    scheduled_time = db.Column(db.String(5))
    estimated_time = db.Column(db.String(5))
    platform = db.Column(db.String(5))
    delay = db.Column(db.Integer, nullable=False, default=0)
    speed = db.Column(db.Integer, nullable=False, default=0)
    last_updated = db.Column(db.DateTime, server_default=db.func.now(), onupdate=db.func.now())

    FIELDS = ('current_station_code', 'current_station_name', 'latitude', 'longitude',
              'next_station_code', 'next_station_name', 'scheduled_time', 'estimated_time',
              'platform', 'delay', 'speed')

    def to_dict(self):
        return {
            "train_number": self.train_number,
            "current_location": {
                "station_code": self.current_station_code,
                "station_name": self.current_station_name,
                "latitude": self.latitude,
                "longitude": self.longitude,
            },
            "next_station": {
                "station_code": self.next_station_code,
                "station_name": self.next_station_name,
                "scheduled_time": self.scheduled_time,
                "estimated_time": self.estimated_time,
                "platform": self.platform,
            },
            "delay": self.delay,
            "speed": self.speed,
            "last_updated": _iso(self.last_updated),
        }
