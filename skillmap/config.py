import os
from pathlib import Path

from dotenv import load_dotenv

# Load environment variables from the project .env
ENV_PATH = Path(__file__).resolve().parents[1] / ".env"
load_dotenv(dotenv_path=ENV_PATH)

DATABASE_URL = os.getenv("DATABASE_URL", "").strip()

REMOTE_LOCATION = os.getenv("SKILLMAP_REMOTE_LOCATION", "Anywhere").strip() or "Anywhere"
REMOTE_PREDICATES = ("location", "flag", "either")


def _remote_predicate() -> str:
    value = os.getenv("SKILLMAP_REMOTE_PREDICATE", "").strip().lower() or "location"
    if value not in REMOTE_PREDICATES:
        raise RuntimeError(
            f"SKILLMAP_REMOTE_PREDICATE={value!r} is not supported. Use one of: {', '.join(REMOTE_PREDICATES)}."
        )
    return value


REMOTE_PREDICATE = _remote_predicate()

DEFAULT_TITLE_CATEGORIES = [
    "Data Analyst",
    "Data Scientist",
    "Data Engineer",
    "Senior Data Analyst",
    "Senior Data Scientist",
    "Senior Data Engineer",
    "Business Analyst",
    "Software Engineer",
    "Machine Learning Engineer",
    "Cloud Engineer",
]


def _title_categories() -> list[str]:
    raw = os.getenv("SKILLMAP_TITLE_CATEGORIES", "").strip()
    if not raw:
        return list(DEFAULT_TITLE_CATEGORIES)
    return [part.strip() for part in raw.split(",") if part.strip()]


TITLE_CATEGORIES = _title_categories()

DEFAULT_TOP_PAYING_LIMIT = 10
DEFAULT_DEMAND_LIMIT = 5
DEFAULT_SALARY_LIMIT = 25
DEFAULT_OPTIMAL_LIMIT = 25
DEFAULT_MIN_DEMAND = 10
