import os
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///tasks.db")
SQL_ECHO = os.getenv("SQL_ECHO", "0") == "1"
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

CORS_ORIGINS = [
    origin.strip()
    for origin in os.getenv("CORS_ORIGINS", "http://localhost:3000").split(",")
    if origin.strip()
]

# Allowed values for Task.status, checked at the request boundary only
TASK_STATUSES = [
    status.strip()
    for status in os.getenv("TASK_STATUSES", "pending,in-progress,done").split(",")
    if status.strip()
]

if not TASK_STATUSES:
    raise ValueError("TASK_STATUSES must list at least one status")

# Status the store writes when none is given
DEFAULT_STATUS = "pending"


def default_status() -> str:
    """Status offered to clients: DEFAULT_STATUS if allowed, else the first allowed one"""
    if DEFAULT_STATUS in TASK_STATUSES:
        return DEFAULT_STATUS
    return TASK_STATUSES[0]
