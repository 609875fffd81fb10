"""
Shared utilities for the add-on demo scripts.
"""

import os
from pathlib import Path
from typing import Optional
from urllib.parse import urlsplit, urlunsplit

from dotenv import load_dotenv

# Load environment variables
load_dotenv()

# Project paths
PROJECT_ROOT = Path(__file__).parent.parent

# A project-level .env also counts when scripts run from another directory
load_dotenv(PROJECT_ROOT / ".env")


def get_optional_env(key: str) -> Optional[str]:
    """Get environment variable, treating empty values as unset."""
    value = os.getenv(key)
    return value or None


def mask_url(url: str) -> str:
    """Hide the password part of a connection URL for display and logs."""
    parts = urlsplit(url)
    if parts.password is None:
        return url

    netloc = parts.hostname or ""
    if parts.port:
        netloc = f"{netloc}:{parts.port}"
    if parts.username:
        netloc = f"{parts.username}:***@{netloc}"
    else:
        netloc = f":***@{netloc}"

    return urlunsplit((parts.scheme, netloc, parts.path, parts.query, parts.fragment))
