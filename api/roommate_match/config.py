import os

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./roommate_match.db")
STORE_BACKEND = os.getenv("STORE_BACKEND", "memory").strip().lower()
SEED_DEMO_DATA = os.getenv("SEED_DEMO_DATA", "false").lower() == "true"
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

INTEREST_MESSAGE_MAX_LENGTH = int(os.getenv("INTEREST_MESSAGE_MAX_LENGTH", "1000"))
MIN_AGE = 18
MAX_AGE = 100

ALLOWED_ORIGINS = [
    origin.strip()
    for origin in os.getenv("ALLOWED_ORIGINS", "http://localhost:3000,http://127.0.0.1:3000").split(",")
    if origin.strip()
]

RL_INTEREST_CREATE_LIMIT = int(os.getenv("RL_INTEREST_CREATE_LIMIT", "60"))
RL_INTEREST_RESPOND_LIMIT = int(os.getenv("RL_INTEREST_RESPOND_LIMIT", "60"))
RL_WINDOW_SECONDS = int(os.getenv("RL_WINDOW_SECONDS", "60"))
