"""Configuration management for the BudgetWise dashboard.

This module centralizes all configuration values including the backend
location, request timeouts, display defaults, and environment variable
overrides.
"""

from __future__ import annotations

import logging
import os

# Backend API
API_BASE_URL = os.getenv("BUDGETWISE_API_URL", "http://localhost:8080/api").rstrip("/")
API_TIMEOUT = float(os.getenv("BUDGETWISE_API_TIMEOUT", "15"))

# Display
CURRENCY_SYMBOL = os.getenv("BUDGETWISE_CURRENCY_SYMBOL", "₹")
DEFAULT_TIME_RANGE = "LAST_6"
RECENT_TRANSACTION_LIMIT = 5

# Form choices offered by the transaction and budget screens
TRANSACTION_TYPES = ["EXPENSE", "INCOME"]
CATEGORIES = [
    "Food",
    "Rent",
    "Travel",
    "Bills",
    "Shopping",
    "Entertainment",
    "Health",
    "Education",
    "Salary",
    "Other",
]
MONTHS = [
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
]

# Logging
LOG_LEVEL = os.getenv("BUDGETWISE_LOG_LEVEL", "INFO").upper()
LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str | None = None) -> None:
    """Configure root logging once for the Streamlit process."""
    logging.basicConfig(level=level or LOG_LEVEL, format=LOG_FORMAT)


def get_api_base_url() -> str:
    """Get the backend base URL (including the ``/api`` prefix)."""
    return API_BASE_URL
