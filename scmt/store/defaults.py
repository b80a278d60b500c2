"""Default option values applied by ``ConfigStore.initialize``."""

from __future__ import annotations

INITIALIZE_MESSAGE = "Initialize"

DEFAULT_OPTIONS: dict[str, str] = {
    "TYPE": "server",
    "OWNER": "Mad House",
    "COUNTRY_CODE": "NL",
    "REGION_CODE": "EU",
    "TIMEZONE": "Europe/Amsterdam",
    "COMPUTE_ZONE": "europe-west4-a",
    "COMPUTE_REGION": "europe-west3",
}
