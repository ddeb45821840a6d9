"""Internal constants shared across the library."""

#: Key under which the serialized AppState lives in the local cache file.
STORAGE_KEY = "prop_lifecycle_data"

#: Remote document coordinates.
FIRESTORE_COLLECTION = "prop_lifecycle"
FIRESTORE_DOCUMENT_ID = "app_state"

#: Current AppState schema revision.
SCHEMA_VERSION = 1

DEFAULT_REMOTE_TIMEOUT: float = 10.0
DEFAULT_WATCH_CHECK_INTERVAL: float = 5.0
DEFAULT_MAX_ID_ATTEMPTS = 1000

# ------------------------------------------------------------------
# Display identifiers
# ------------------------------------------------------------------

DISPLAY_ID_ALPHABET = "ABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789"
DISPLAY_ID_LENGTH = 6

# ------------------------------------------------------------------
# Formatting
# ------------------------------------------------------------------

#: Multipliers applied to NGN-denominated amounts.
CURRENCY_RATES: dict[str, float] = {"NGN": 1.0, "USD": 0.00065, "EUR": 0.0006}

#: en-US display symbols.  NGN has no narrow symbol in en-US and is shown by code.
CURRENCY_SYMBOLS: dict[str, str] = {"NGN": "NGN\u00a0", "USD": "$", "EUR": "€"}

CURRENCY_FRACTION_DIGITS: dict[str, int] = {"NGN": 0, "USD": 2, "EUR": 2}

EMPTY_DATE_PLACEHOLDER = "---"
