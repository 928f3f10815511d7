# movies_api/settings.py
import os

from dotenv import load_dotenv

# Load environment variables
load_dotenv()

DATABASE_PATH = os.getenv("MOVIES_DB_PATH", "movies.sqlite")
DATABASE_TIMEOUT = float(os.getenv("MOVIES_DB_TIMEOUT", "5.0"))

HOST = os.getenv("HOST", "127.0.0.1")
PORT = int(os.getenv("PORT", "3000"))

ACCEPTED_ORIGINS = [
    origin.strip()
    for origin in os.getenv(
        "ACCEPTED_ORIGINS", "http://localhost:8080,http://localhost:1234"
    ).split(",")
    if origin.strip()
]

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
