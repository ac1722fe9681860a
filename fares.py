import math
from dataclasses import dataclass, asdict
from enum import Enum


class TrainType(str, Enum):
    EXPRESS = "Express"
    SUPERFAST_EXPRESS = "Superfast Express"
    PASSENGER = "Passenger"
    MAIL = "Mail"
    RAJDHANI_EXPRESS = "Rajdhani Express"
    SHATABDI_EXPRESS = "Shatabdi Express"
    DURONTO_EXPRESS = "Duronto Express"
    GARIB_RATH_EXPRESS = "Garib Rath Express"
    JAN_SHATABDI_EXPRESS = "Jan Shatabdi Express"
    SAMPARK_KRANTI_EXPRESS = "Sampark Kranti Express"
    INTERCITY_EXPRESS = "Intercity Express"
    DOUBLE_DECKER_EXPRESS = "Double Decker Express"
    LOCAL_EMU_MEMU = "Local/EMU/MEMU"
    VANDE_BHARAT_EXPRESS = "Vande Bharat Express"
    HUMSAFAR_EXPRESS = "Humsafar Express"
    TEJAS_EXPRESS = "Tejas Express"
    SPECIAL_TRAINS = "Special"


class TravelClass(str, Enum):
    AC_FIRST_CLASS = "1A"
    AC_2_TIER = "2A"
    AC_3_TIER = "3A"
    AC_3_TIER_ECONOMY = "3E"
    AC_CHAIR_CAR = "CC"
    SLEEPER = "SL"
    SECOND_SITTING = "2S"
    FIRST_CLASS = "FC"
    ANUBHUTI = "EA"
    VISTADOME = "VD"


class Quota(str, Enum):
    GENERAL = "GN"
    TATKAL = "TQ"
    LADIES = "LD"
    SENIOR_CITIZEN = "SS"
    HANDICAPPED = "HP"
    DEFENCE = "DF"
    FOREIGN_TOURIST = "FT"
    LOWER_BERTH = "LB"
    PREMIUM_TATKAL = "PT"
    PHYSICALLY_HANDICAPPED = "PH"


# Per km
FARE_RATES = {
    TravelClass.AC_FIRST_CLASS: 4.5,
    TravelClass.AC_2_TIER: 2.8,
    TravelClass.AC_3_TIER: 2.0,
    TravelClass.AC_3_TIER_ECONOMY: 1.75,
    TravelClass.AC_CHAIR_CAR: 1.5,
    TravelClass.SLEEPER: 0.8,
    TravelClass.SECOND_SITTING: 0.35,
    TravelClass.FIRST_CLASS: 3.5,
    TravelClass.ANUBHUTI: 5.5,
    TravelClass.VISTADOME: 6.0,
}

RESERVATION_CHARGES = {
    TravelClass.AC_FIRST_CLASS: 60,
    TravelClass.AC_2_TIER: 50,
    TravelClass.AC_3_TIER: 40,
    TravelClass.AC_3_TIER_ECONOMY: 40,
    TravelClass.AC_CHAIR_CAR: 25,
    TravelClass.SLEEPER: 20,
    TravelClass.SECOND_SITTING: 15,
    TravelClass.FIRST_CLASS: 50,
    TravelClass.ANUBHUTI: 60,
    TravelClass.VISTADOME: 60,
}

SUPERFAST_CHARGES = {
    TravelClass.AC_FIRST_CLASS: 75,
    TravelClass.AC_2_TIER: 45,
    TravelClass.AC_3_TIER: 30,
    TravelClass.AC_3_TIER_ECONOMY: 30,
    TravelClass.AC_CHAIR_CAR: 30,
    TravelClass.SLEEPER: 30,
    TravelClass.SECOND_SITTING: 15,
    TravelClass.FIRST_CLASS: 45,
    TravelClass.ANUBHUTI: 75,
    TravelClass.VISTADOME: 75,
}

TRAIN_TYPE_MULTIPLIERS = {
    TrainType.RAJDHANI_EXPRESS: 1.5,
    TrainType.SHATABDI_EXPRESS: 1.4,
    TrainType.VANDE_BHARAT_EXPRESS: 2.0,
    TrainType.DURONTO_EXPRESS: 1.3,
    TrainType.TEJAS_EXPRESS: 1.6,
    TrainType.HUMSAFAR_EXPRESS: 1.2,
    TrainType.GARIB_RATH_EXPRESS: 0.8,
    TrainType.SUPERFAST_EXPRESS: 1.1,
    TrainType.EXPRESS: 1.0,
    TrainType.PASSENGER: 0.7,
    TrainType.MAIL: 1.0,
    TrainType.JAN_SHATABDI_EXPRESS: 1.1,
    TrainType.SAMPARK_KRANTI_EXPRESS: 1.1,
    TrainType.INTERCITY_EXPRESS: 1.0,
    TrainType.DOUBLE_DECKER_EXPRESS: 1.2,
    TrainType.LOCAL_EMU_MEMU: 0.5,
    TrainType.SPECIAL_TRAINS: 1.0,
}

# Fraction of base fare: positive is a surcharge, negative a discount
QUOTA_CHARGES = {
    Quota.GENERAL: 0,
    Quota.TATKAL: 0.3,
    Quota.PREMIUM_TATKAL: 0.5,
    Quota.LADIES: 0,
    Quota.SENIOR_CITIZEN: -0.4,
    Quota.HANDICAPPED: -0.75,
    Quota.DEFENCE: -0.1,
    Quota.FOREIGN_TOURIST: 0.5,
    Quota.LOWER_BERTH: 0,
    Quota.PHYSICALLY_HANDICAPPED: -0.75,
}

SUPERFAST_TYPES = {
    TrainType.SUPERFAST_EXPRESS,
    TrainType.RAJDHANI_EXPRESS,
    TrainType.SHATABDI_EXPRESS,
    TrainType.VANDE_BHARAT_EXPRESS,
    TrainType.DURONTO_EXPRESS,
    TrainType.TEJAS_EXPRESS,
}

CATERING_TYPES = {
    TrainType.RAJDHANI_EXPRESS,
    TrainType.SHATABDI_EXPRESS,
    TrainType.VANDE_BHARAT_EXPRESS,
    TrainType.TEJAS_EXPRESS,
}

AC_CLASSES = {TravelClass.AC_FIRST_CLASS, TravelClass.AC_2_TIER, TravelClass.AC_3_TIER}

GST_RATE = 0.05
INSURANCE = 1
DEFAULT_RATE_PER_KM = 1.0
DEFAULT_DISTANCE = 1000

DISTANCE_MATRIX = {
    "NDLS": {"BCT": 1384, "MAS": 2180, "HWH": 1447, "SBC": 2444},
    "BCT": {"NDLS": 1384, "MAS": 1279, "HWH": 1968, "SBC": 1113},
    "MAS": {"NDLS": 2180, "BCT": 1279, "HWH": 1663, "SBC": 362},
    "HWH": {"NDLS": 1447, "BCT": 1968, "MAS": 1663, "SBC": 1871},
    "SBC": {"NDLS": 2444, "BCT": 1113, "MAS": 362, "HWH": 1871},
    "SC": {"NDLS": 1687, "BCT": 751, "MAS": 612, "HWH": 1273, "SBC": 612},
    "PUNE": {"BCT": 192, "NDLS": 1534, "MAS": 1147, "SBC": 961},
    "ADI": {"BCT": 492, "NDLS": 934, "JP": 385},
    "JP": {"NDLS": 308, "ADI": 385, "BCT": 826},
}


def round_half_up(value) -> int:
    return int(math.floor(value + 0.5))


def _coerce(enum_cls, value):
    try:
        return enum_cls(value)
    except ValueError:
        return value


@dataclass
class FareBreakdown:
    base_fare: int
    reservation_charge: int
    superfast_charge: int
    catering_charge: int
    tatkal_charge: int
    dynamic_fare_charge: int
    gst: int
    insurance: int
    total_fare: int
    discount_applied: int
    final_fare: int

    def to_dict(self):
        return asdict(self)


def calculate_fare(train_type, travel_class, quota, distance: float,
                   dynamic_pricing: bool = False, surge_multiplier: float = 1.0) -> FareBreakdown:
    """
    Builds the fare breakdown for one passenger.

    Unknown train types, classes or quotas fall back to neutral table
    values instead of raising.
    """
    train_type = _coerce(TrainType, train_type)
    travel_class = _coerce(TravelClass, travel_class)
    quota = _coerce(Quota, quota)
    distance = max(0, distance)

    base_fare = (FARE_RATES.get(travel_class, DEFAULT_RATE_PER_KM)
                 * distance
                 * TRAIN_TYPE_MULTIPLIERS.get(train_type, 1.0))

    reservation_charge = RESERVATION_CHARGES.get(travel_class, 0)
    superfast_charge = SUPERFAST_CHARGES.get(travel_class, 0) if train_type in SUPERFAST_TYPES else 0

    catering_charge = 0
    if train_type in CATERING_TYPES:
        catering_charge = 50 if distance > 500 else 25

    quota_multiplier = QUOTA_CHARGES.get(quota, 0)
    tatkal_charge = 0.0
    if quota in (Quota.TATKAL, Quota.PREMIUM_TATKAL):
        tatkal_charge = base_fare * abs(quota_multiplier)

    dynamic_fare_charge = base_fare * (surge_multiplier - 1) if dynamic_pricing else 0.0

    if quota_multiplier < 0:
        base_fare = base_fare * (1 + quota_multiplier)

    subtotal = (base_fare + reservation_charge + superfast_charge + catering_charge
                + tatkal_charge + dynamic_fare_charge)
    gst = subtotal * GST_RATE
    total_fare = subtotal + gst + INSURANCE

    # Offers and coupons are not modelled yet
    discount_applied = 0
    final_fare = total_fare - discount_applied

    return FareBreakdown(
        base_fare=round_half_up(base_fare),
        reservation_charge=reservation_charge,
        superfast_charge=superfast_charge,
        catering_charge=catering_charge,
        tatkal_charge=round_half_up(tatkal_charge),
        dynamic_fare_charge=round_half_up(dynamic_fare_charge),
        gst=round_half_up(gst),
        insurance=INSURANCE,
        total_fare=round_half_up(total_fare),
        discount_applied=discount_applied,
        final_fare=round_half_up(final_fare),
    )


def calculate_distance(from_code: str, to_code: str) -> int:
    return DISTANCE_MATRIX.get(from_code, {}).get(to_code, DEFAULT_DISTANCE)


def calculate_booking_charges(total_fare: float) -> dict:
    convenience_fee = 15 if total_fare < 500 else min(total_fare * 0.02, 40)
    gateway_charges = max(total_fare * 0.005, 5)
    return {
        "convenience_fee": round_half_up(convenience_fee),
        "payment_gateway_charges": round_half_up(gateway_charges),
        "total_amount": round_half_up(total_fare + convenience_fee + gateway_charges),
    }


def cancellation_charges(travel_class, hours_before_departure: float, total_fare: float) -> float:
    travel_class = _coerce(TravelClass, travel_class)
    if hours_before_departure >= 48:
        return 240 if travel_class in AC_CLASSES else 120
    if hours_before_departure >= 12:
        return 200 if travel_class in AC_CLASSES else 100
    if hours_before_departure >= 4:
        return 50
    # no refund inside four hours of departure
    return total_fare
