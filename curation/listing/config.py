from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root
load_dotenv(Path(__file__).resolve().parent.parent.parent / ".env")


@dataclass(frozen=True)
class ListingConfig:
    # Quiet period before a text-driven re-query runs
    debounce_seconds: float = float(os.getenv("CURATION_DEBOUNCE_SECONDS", "0.4"))
    # How long a fetched snapshot is served before it is re-fetched
    snapshot_ttl: float = float(os.getenv("CURATION_SNAPSHOT_TTL", "60"))


DEFAULT_LISTING_CONFIG = ListingConfig()
