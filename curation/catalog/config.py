from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root
load_dotenv(Path(__file__).resolve().parent.parent.parent / ".env")


@dataclass(frozen=True)
class GatewayConfig:
    """
    Where the remote data gateway lives.

    With no ``public_base_url`` the service runs on the in-memory gateway,
    optionally seeded from the CSV exports in ``seed_dir``.
    """

    public_base_url: str = os.getenv("CURATION_API_URL", "")
    admin_base_url: str = os.getenv("CURATION_ADMIN_API_URL", "")
    timeout: float = float(os.getenv("CURATION_HTTP_TIMEOUT", "10.0"))
    seed_dir: str = os.getenv("CURATION_SEED_DIR", "")

    @property
    def remote_enabled(self) -> bool:
        return bool(self.public_base_url)


DEFAULT_GATEWAY_CONFIG = GatewayConfig()
