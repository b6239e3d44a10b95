from __future__ import annotations

import os
from dataclasses import dataclass
from datetime import time
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root
load_dotenv(Path(__file__).resolve().parent.parent / ".env")

_BUNDLED_DATA = Path(__file__).resolve().parent / "data" / "restaurants.csv"


@dataclass(frozen=True)
class AppConfig:
    session_secret: str = os.getenv("EATEASE_SESSION_SECRET", "eatease-secret-change-in-production")
    data_path: Path = Path(os.getenv("EATEASE_DATA_PATH", str(_BUNDLED_DATA)))
    opening_time: time = time(17, 0)
    closing_time: time = time(22, 0)
    slot_minutes: int = 30
    cancellation_cutoff_hours: int = 2
    max_party_size: int = 30
    default_recommendation_limit: int = 10


DEFAULT_APP_CONFIG = AppConfig()
