"""
Runtime configuration for the Florida Tides service.

Values come from environment variables (optionally loaded from a `.env` file
in the project root) and fall back to the defaults below.
"""
import os
from pathlib import Path

from dotenv import load_dotenv

env_path = Path(__file__).parent.parent / '.env'
if env_path.exists():
    load_dotenv(env_path)


def _get_float_env(key: str, default: float) -> float:
    """Get a float value from environment variable or use default."""
    value = os.environ.get(key)
    if value is not None:
        try:
            return float(value)
        except ValueError:
            pass
    return default


def _get_int_env(key: str, default: int) -> int:
    """Get an int value from environment variable or use default."""
    value = os.environ.get(key)
    if value is not None:
        try:
            return int(value)
        except ValueError:
            pass
    return default


# =============================================================================
# NOAA CO-OPS
# =============================================================================

# Environment variable: NOAA_API_URL
NOAA_API_URL = os.environ.get(
    'NOAA_API_URL', 'https://api.tidesandcurrents.noaa.gov/api/prod/datagetter'
)

# Application name reported to NOAA with every request
# Environment variable: NOAA_APPLICATION
NOAA_APPLICATION = os.environ.get('NOAA_APPLICATION', 'NOS.COOPS.TAC.WL')

# Timeout for API requests (in seconds)
# Environment variable: TIDES_API_TIMEOUT
API_TIMEOUT_SECONDS = _get_int_env('TIDES_API_TIMEOUT', 10)

# Maximum response size accepted from NOAA (1 MB)
# Environment variable: TIDES_MAX_RESPONSE_SIZE
MAX_RESPONSE_SIZE = _get_int_env('TIDES_MAX_RESPONSE_SIZE', 1 * 1024 * 1024)


# =============================================================================
# Session Settings
# =============================================================================

# Length of the prediction window fetched for a location (in hours)
# Environment variable: TIDES_FETCH_WINDOW_HOURS
FETCH_WINDOW_HOURS = _get_int_env('TIDES_FETCH_WINDOW_HOURS', 24)

# Quiet period before a location search is issued (in seconds)
# Environment variable: TIDES_SEARCH_DEBOUNCE_SECONDS
SEARCH_DEBOUNCE_SECONDS = _get_float_env('TIDES_SEARCH_DEBOUNCE_SECONDS', 0.3)

# File holding the last selected location
# Environment variable: TIDES_LOCATION_STORE_PATH
LOCATION_STORE_PATH = os.path.expanduser(
    os.environ.get('TIDES_LOCATION_STORE_PATH', '~/.florida_tides/saved_location.json')
)


# =============================================================================
# Logging
# =============================================================================

# Environment variable: LOG_LEVEL
LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO').upper()
