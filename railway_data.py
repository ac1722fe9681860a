"""
Static reference data for the demo railway network.

Loaded into the database by the seed commands; the tables here are the
single source of truth for stations, trains, schedules and the coach
layout each train type carries.
"""

from fares import TrainType, TravelClass

# code, name, city, state, zone, division, platforms
STATIONS = [
    ("NDLS", "New Delhi", "Delhi", "Delhi", "NR", "DLI", 16),
    ("DLI", "Delhi", "Delhi", "Delhi", "NR", "DLI", 12),
    ("DEC", "Delhi Cantt", "Delhi", "Delhi", "NR", "DLI", 6),
    ("GZB", "Ghaziabad", "Ghaziabad", "Uttar Pradesh", "NR", "DLI", 6),
    ("CSTM", "Mumbai CST", "Mumbai", "Maharashtra", "CR", "BB", 18),
    ("BCT", "Mumbai Central", "Mumbai", "Maharashtra", "WR", "BB", 7),
    ("LTT", "Lokmanya Tilak T", "Mumbai", "Maharashtra", "CR", "BB", 5),
    ("HWH", "Howrah Jn", "Kolkata", "West Bengal", "ER", "HWH", 23),
    ("KOAA", "Kolkata", "Kolkata", "West Bengal", "ER", "KOAA", 12),
    ("SDAH", "Sealdah", "Kolkata", "West Bengal", "ER", "SDAH", 20),
    ("MAS", "Chennai Central", "Chennai", "Tamil Nadu", "SR", "MAS", 12),
    ("MSB", "Chennai Egmore", "Chennai", "Tamil Nadu", "SR", "MAS", 11),
    ("SBC", "KSR Bengaluru", "Bengaluru", "Karnataka", "SWR", "BNC", 10),
    ("YPRJ", "Yesvantpur Jn", "Bengaluru", "Karnataka", "SWR", "BNC", 6),
    ("SC", "Secunderabad Jn", "Secunderabad", "Telangana", "SCR", "SC", 10),
    ("HYB", "Hyderabad Deccan", "Hyderabad", "Telangana", "SCR", "SC", 6),
    ("KCG", "Kacheguda", "Hyderabad", "Telangana", "SCR", "SC", 6),
    ("GDWL", "Gadwal", "Gadwal", "Telangana", "SCR", "HYB", 2),
    ("BZA", "Vijayawada Jn", "Vijayawada", "Andhra Pradesh", "SCR", "BZA", 10),
    ("TPTY", "Tirupati", "Tirupati", "Andhra Pradesh", "SCR", "GTL", 6),
    ("KRNT", "Kurnool Town", "Kurnool", "Andhra Pradesh", "SCR", "HYB", 3),
    ("GTL", "Guntakal Jn", "Guntakal", "Andhra Pradesh", "SCR", "GTL", 7),
    ("ATP", "Anantapur", "Anantapur", "Andhra Pradesh", "SCR", "GTL", 3),
    ("COA", "Kakinada Port", "Kakinada", "Andhra Pradesh", "SCR", "BZA", 2),
    ("RJY", "Rajahmundry", "Rajahmundry", "Andhra Pradesh", "SCR", "BZA", 4),
    ("VSKP", "Visakhapatnam", "Visakhapatnam", "Andhra Pradesh", "ECoR", "VSKP", 7),
    ("PUNE", "Pune Jn", "Pune", "Maharashtra", "CR", "PUNE", 6),
    ("ADI", "Ahmedabad Jn", "Ahmedabad", "Gujarat", "WR", "AII", 12),
    ("JP", "Jaipur", "Jaipur", "Rajasthan", "NWR", "JP", 6),
    ("LJN", "Lucknow Jn", "Lucknow", "Uttar Pradesh", "NER", "LKO", 6),
    ("PNBE", "Patna Jn", "Patna", "Bihar", "ECR", "PNBE", 10),
    ("BPL", "Bhopal Jn", "Bhopal", "Madhya Pradesh", "WCR", "BPL", 6),
    ("JHS", "Jhansi Jn", "Jhansi", "Uttar Pradesh", "NCR", "JHS", 8),
    ("NGP", "Nagpur", "Nagpur", "Maharashtra", "CR", "NGP", 6),
    ("CBE", "Coimbatore Jn", "Coimbatore", "Tamil Nadu", "SR", "CBE", 6),
    ("GHY", "Guwahati", "Guwahati", "Assam", "NFR", "RNY", 5),
    ("TVC", "Trivandrum Central", "Thiruvananthapuram", "Kerala", "SR", "TVC", 5),
    ("ERS", "Ernakulam Jn", "Kochi", "Kerala", "SR", "ERS", 5),
    ("CDG", "Chandigarh", "Chandigarh", "Chandigarh", "NR", "FZR", 3),
    ("JAT", "Jammu Tawi", "Jammu", "Jammu and Kashmir", "NR", "FZR", 5),
    ("ALLP", "Allahabad Jn", "Prayagraj", "Uttar Pradesh", "NCR", "ALLP", 10),
    ("CNB", "Kanpur Central", "Kanpur", "Uttar Pradesh", "NCR", "CNB", 9),
    ("AGC", "Agra Cantt", "Agra", "Uttar Pradesh", "NCR", "AGC", 6),
    ("GWL", "Gwalior", "Gwalior", "Madhya Pradesh", "NCR", "GWL", 5),
    ("JBP", "Jabalpur", "Jabalpur", "Madhya Pradesh", "WCR", "JBP", 6),
]

# number, name, type, source, destination
TRAINS = [
    ("12723", "Telangana Express", TrainType.SUPERFAST_EXPRESS, "HYB", "NDLS"),
    ("17027", "Hundry Express", TrainType.EXPRESS, "HYB", "GDWL"),
    ("12785", "Kacheguda Kurnool Intercity", TrainType.INTERCITY_EXPRESS, "KCG", "KRNT"),
    ("12737", "Gowthami Express", TrainType.SUPERFAST_EXPRESS, "KCG", "COA"),
    ("12759", "Charminar Express", TrainType.SUPERFAST_EXPRESS, "HYB", "MAS"),
    ("12603", "Hyderabad Express", TrainType.SUPERFAST_EXPRESS, "SC", "MAS"),
    ("12701", "Hussainsagar Express", TrainType.EXPRESS, "HYB", "BCT"),
    ("17406", "Krishna Express", TrainType.EXPRESS, "SC", "SBC"),
    ("12649", "Sampark Kranti Express", TrainType.SAMPARK_KRANTI_EXPRESS, "SC", "NDLS"),
    ("22691", "Rajdhani Express", TrainType.RAJDHANI_EXPRESS, "SC", "NDLS"),
    ("20501", "Vande Bharat Express", TrainType.VANDE_BHARAT_EXPRESS, "SC", "BZA"),
    ("12629", "Karnataka Express", TrainType.EXPRESS, "SC", "SBC"),
    ("12616", "GT Express", TrainType.EXPRESS, "MAS", "NDLS"),
    ("12295", "Sanghamitra Express", TrainType.SUPERFAST_EXPRESS, "SBC", "PNBE"),
]

# train number -> [(station, arrival, departure, day, distance from source)]
SCHEDULES = {
    "12723": [
        ("HYB", None, "06:00", 1, 0),
        ("SC", "06:25", "06:30", 1, 10),
        ("BZA", "10:00", "10:05", 1, 310),
        ("NDLS", "06:35", None, 2, 1687),
    ],
    "17027": [
        ("HYB", None, "07:00", 1, 0),
        ("SC", "07:20", "07:25", 1, 10),
        ("GDWL", "09:00", None, 1, 150),
    ],
    "12785": [
        ("KCG", None, "05:30", 1, 0),
        ("SC", "05:45", "05:50", 1, 8),
        ("ATP", "09:30", "09:35", 1, 180),
        ("KRNT", "11:30", None, 1, 250),
    ],
    "12737": [
        ("KCG", None, "22:00", 1, 0),
        ("SC", "22:15", "22:20", 1, 8),
        ("BZA", "02:30", "02:35", 2, 310),
        ("RJY", "04:15", "04:20", 2, 450),
        ("COA", "05:30", None, 2, 520),
    ],
    "12759": [
        ("HYB", None, "07:15", 1, 0),
        ("SC", "07:35", "07:40", 1, 10),
        ("BZA", "11:20", "11:25", 1, 310),
        ("MAS", "19:45", None, 1, 612),
    ],
    "12603": [
        ("SC", None, "17:35", 1, 0),
        ("BZA", "21:40", "21:45", 1, 310),
        ("MAS", "05:45", None, 2, 612),
    ],
    "12701": [
        ("HYB", None, "22:15", 1, 0),
        ("SC", "22:35", "22:40", 1, 10),
        ("GTL", "04:30", "04:35", 2, 380),
        ("PUNE", "13:45", "13:50", 2, 680),
        ("BCT", "17:30", None, 2, 751),
    ],
    "17406": [
        ("SC", None, "20:45", 1, 0),
        ("GTL", "02:15", "02:20", 2, 380),
        ("SBC", "12:30", None, 2, 612),
    ],
    "12649": [
        ("SC", None, "09:45", 1, 0),
        ("BZA", "13:30", "13:35", 1, 310),
        ("VSKP", "19:45", "19:50", 1, 680),
        ("PNBE", "14:20", "14:25", 2, 1480),
        ("NDLS", "02:15", None, 3, 1687),
    ],
    "22691": [
        ("SC", None, "20:05", 1, 0),
        ("BZA", "23:50", "23:55", 1, 310),
        ("NDLS", "11:35", None, 2, 1687),
    ],
    "20501": [
        ("SC", None, "06:00", 1, 0),
        ("BZA", "09:30", None, 1, 310),
    ],
}

ALL_DAYS = ["MON", "TUE", "WED", "THU", "FRI", "SAT", "SUN"]

# Trains that only run on part of the week
RESTRICTED_RUN_DAYS = {
    "22691": ["TUE", "THU", "SUN"],
    "12649": ["TUE", "THU", "SUN"],
}

# class -> (total seats, RAC berths)
CLASS_CAPACITY = {
    TravelClass.AC_FIRST_CLASS: (18, 0),
    TravelClass.AC_2_TIER: (54, 4),
    TravelClass.AC_3_TIER: (64, 8),
    TravelClass.AC_3_TIER_ECONOMY: (72, 8),
    TravelClass.AC_CHAIR_CAR: (78, 0),
    TravelClass.SLEEPER: (72, 12),
    TravelClass.SECOND_SITTING: (118, 0),
    TravelClass.FIRST_CLASS: (26, 0),
    TravelClass.ANUBHUTI: (56, 0),
    TravelClass.VISTADOME: (44, 0),
}

CLASSES_BY_TYPE = {
    TrainType.RAJDHANI_EXPRESS: [TravelClass.AC_FIRST_CLASS, TravelClass.AC_2_TIER, TravelClass.AC_3_TIER],
    TrainType.VANDE_BHARAT_EXPRESS: [TravelClass.AC_CHAIR_CAR, TravelClass.ANUBHUTI],
    TrainType.SUPERFAST_EXPRESS: [TravelClass.AC_2_TIER, TravelClass.AC_3_TIER, TravelClass.SLEEPER],
}
DEFAULT_CLASSES = [TravelClass.AC_3_TIER, TravelClass.SLEEPER, TravelClass.SECOND_SITTING]

# Seat number prefix per class, e.g. B12 for 3A
COACH_PREFIX = {
    TravelClass.AC_FIRST_CLASS: "H",
    TravelClass.AC_2_TIER: "A",
    TravelClass.AC_3_TIER: "B",
    TravelClass.AC_3_TIER_ECONOMY: "M",
    TravelClass.AC_CHAIR_CAR: "C",
    TravelClass.SLEEPER: "S",
    TravelClass.SECOND_SITTING: "D",
    TravelClass.FIRST_CLASS: "F",
    TravelClass.ANUBHUTI: "E",
    TravelClass.VISTADOME: "V",
}

AMENITIES_BY_TYPE = {
    TrainType.RAJDHANI_EXPRESS: ["wifi", "meals", "blanket", "charging", "ac"],
    TrainType.SHATABDI_EXPRESS: ["wifi", "meals", "charging", "ac"],
    TrainType.VANDE_BHARAT_EXPRESS: ["wifi", "meals", "charging", "ac", "gps", "automatic_doors"],
    TrainType.SUPERFAST_EXPRESS: ["charging", "pantry"],
    TrainType.EXPRESS: ["charging"],
    TrainType.INTERCITY_EXPRESS: ["charging", "pantry"],
}
DEFAULT_AMENITIES = ["charging"]

TRAIN_TYPE_INFO = {
    TrainType.EXPRESS: "Regular trains with limited stops",
    TrainType.SUPERFAST_EXPRESS: "Faster than normal Express trains",
    TrainType.RAJDHANI_EXPRESS: "Premium high-speed trains connecting major cities",
    TrainType.SHATABDI_EXPRESS: "Fast intercity trains, no overnight journey",
    TrainType.VANDE_BHARAT_EXPRESS: "Semi-high-speed train with latest technology",
    TrainType.DURONTO_EXPRESS: "Non-stop trains between major cities",
    TrainType.GARIB_RATH_EXPRESS: "Low-cost AC travel",
    TrainType.HUMSAFAR_EXPRESS: "Luxury AC-3 tier trains",
    TrainType.TEJAS_EXPRESS: "Fully air-conditioned high-speed trains",
}


def classes_for(train_type):
    return CLASSES_BY_TYPE.get(train_type, DEFAULT_CLASSES)


def amenities_for(train_type):
    return AMENITIES_BY_TYPE.get(train_type, DEFAULT_AMENITIES)
