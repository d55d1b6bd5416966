"""Global configuration and constants for the property console view core."""

from __future__ import annotations

import os
from typing import Dict, Final, Tuple

DATA_DIR: Final = os.environ.get("PROPERTY_CONSOLE_DATA_DIR", "data")
LOCAL_STATE_FILENAME: Final = "local_state.json"

API_BASE_URL: Final = os.environ.get("PROPERTY_CONSOLE_API_URL", "http://localhost:3000")
DEFAULT_TIMEOUT: Final = 15  # seconds
DEFAULT_RETRIES: Final = 3
DEFAULT_BACKOFF_FACTOR: Final = 0.5

DEFAULT_PAGE_SIZE: Final = 10

# Upper bound on candidates tried by the unique name / url search
UNIQUE_SEARCH_LIMIT: Final = 10_000

MAX_SYSTEM_KEY_LENGTH: Final = 50
SYSTEM_KEY_SUFFIX_WIDTH: Final = 5

# entity type -> (name suffix, url suffix) used when duplicating
COPY_SUFFIXES: Final[Dict[str, Tuple[str, str]]] = {
    "app": ("Copy", "copy"),
    "category": ("Copy", "copy"),
    "contact": ("Copy", "copy"),
    "user": ("Copy", "copy"),
    "subscription": ("Copy", "copy"),
    "professional": ("Copy", "copy"),
    "property": ("Copy", "copy"),
}
DEFAULT_COPY_SUFFIX: Final = ("Copy", "copy")


def copy_suffixes(entity_type: str) -> Tuple[str, str]:
    return COPY_SUFFIXES.get(entity_type, DEFAULT_COPY_SUFFIX)
