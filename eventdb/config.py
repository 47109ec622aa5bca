import os
import logging
from dotenv import load_dotenv
from pydantic import BaseModel

from eventdb.utils.errors import ConfigurationError

load_dotenv()

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

logging.basicConfig(level=LOG_LEVEL, format=LOG_FORMAT)

DEFAULT_DB_NAME = "eventdb"

EVENTS_COLLECTION = "events"
BOOKINGS_COLLECTION = "bookings"


class Settings(BaseModel):
    mongodb_uri: str
    mongodb_db: str = DEFAULT_DB_NAME


def load_settings() -> Settings:
    """Reads the connection settings, failing fast when the URI is absent."""
    uri = os.getenv("MONGODB_URI")
    if not uri:
        raise ConfigurationError("Please define the MONGODB_URI environment variable.")
    return Settings(mongodb_uri=uri, mongodb_db=os.getenv("MONGODB_DB", DEFAULT_DB_NAME))
