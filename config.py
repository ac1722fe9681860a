import os
from dotenv import load_dotenv

load_dotenv()


def _flag(name, default="0"):
    return os.getenv(name, default).lower() in ("1", "true", "yes", "on")


class Config:
    SQLALCHEMY_DATABASE_URI = os.getenv("DATABASE_URL") or (
        f"mysql+pymysql://{os.getenv('DB_USER', 'root')}:{os.getenv('DB_PASSWORD', '')}"
        f"@{os.getenv('DB_HOST', 'localhost')}/{os.getenv('DB_NAME', 'railway_db')}"
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

    # Re-randomise availability labels on every search (demo behaviour)
    RANDOM_AVAILABILITY = _flag("RANDOM_AVAILABILITY")
    WAITING_LIST_LIMIT = int(os.getenv("WAITING_LIST_LIMIT", "200"))
    AUTO_SEED = _flag("AUTO_SEED")
