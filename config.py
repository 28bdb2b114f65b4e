import logging
import os

import streamlit as st

CONFIG = {
    "GEMINI_MODEL": os.getenv("GEMINI_MODEL", "gemini-2.5-flash"),
    "NEARBY_RADIUS_KM": float(os.getenv("NEARBY_RADIUS_KM", "5")),
    "MAP_SCALE": 5000.0,
    # Used when no observer fix exists yet (seed data and new reports are placed around it)
    "DEFAULT_CENTER": (40.0, -74.0),
    "REVERSE_GEOCODING_API": "https://nominatim.openstreetmap.org/reverse",
    "IPAPI_URL": "https://ipapi.co/json/",
    "IPAPI_BACKUP": "http://ip-api.com/json/",
    "USER_AGENT": "CivilSave/2.4 (disaster response dashboard)",
}

DEFAULT_REPORT_INSTRUCTION = (
    "You are an emergency command AI. Be conservative. "
    "If a shelter is full, status is CROWDED. "
    "If out of water, CRITICAL. "
    "If contaminated, DANGER."
)

# Status inference policy lives in this text, not in code.
REPORT_SYSTEM_INSTRUCTION = os.getenv("REPORT_SYSTEM_INSTRUCTION", DEFAULT_REPORT_INSTRUCTION)

INTEL_FAILURE_TEXT = "Connection to command center failed."
REPORT_FAILURE_TEXT = "Failed to parse report. Please try again."


def get_gemini_api_key() -> str | None:
    """Streamlit secrets first, then the environment."""
    try:
        key = st.secrets.get("GEMINI_API_KEY")
    except Exception:  # no secrets.toml
        key = None
    return key or os.getenv("GEMINI_API_KEY") or None


def configure_logging(level: str | None = None):
    logging.basicConfig(
        level=(level or os.getenv("LOG_LEVEL", "INFO")).upper(),
        format="%(levelname)s: %(name)s - %(message)s",
    )
