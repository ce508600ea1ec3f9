import logging
import os

logger = logging.getLogger(__name__)


def _canon_prefix(val):
    """
    Normalize API prefix to always be exactly like '/api':
      - defaults to '/api' when unset/empty
      - ensures a single leading slash
      - removes any trailing slash (except for root)
    """
    val = (val or "/api").strip()
    if not val.startswith("/"):
        val = "/" + val
    if len(val) > 1 and val.endswith("/"):
        val = val[:-1]
    return val


def parse_number(env_var: str, default, cast=int):
    raw_value = os.getenv(env_var)
    if raw_value is None or not raw_value.strip():
        return default

    try:
        value = cast(raw_value)
    except ValueError:
        logger.warning(
            "%s is not a valid %s (got %r); defaulting to %r",
            env_var,
            cast.__name__,
            raw_value,
            default,
        )
        return default

    if value < 0:
        logger.warning("%s cannot be negative; defaulting to %r", env_var, default)
        return default

    return value


API_PREFIX = _canon_prefix(os.getenv("API_PREFIX"))


def admin_api_token():
    """Shared secret for admin actions, read per request so it can rotate."""
    return (os.getenv("ADMIN_API_TOKEN") or "").strip() or None


# Rating bonuses layered on top of the base result delta.
MVP_BONUS = parse_number("MVP_BONUS", 10)
CHALLENGE_BONUS = parse_number("CHALLENGE_BONUS", 5)

# Default Elo applier used when no external base-delta function is injected.
ELO_K_FACTOR = parse_number("ELO_K_FACTOR", 32.0, float)
DEFAULT_RATING = parse_number("DEFAULT_RATING", 1000)

# Challenge thresholds. Offsets are seconds since kick-off.
ALTRUIST_MIN_ASSISTS = parse_number("ALTRUIST_MIN_ASSISTS", 2)
FOX_MIN_GOALS = parse_number("FOX_MIN_GOALS", 3)
SOLDIER_MIN_AVERAGE = parse_number("SOLDIER_MIN_AVERAGE", 8.0, float)
LOCK_WINDOW_SECONDS = parse_number("LOCK_WINDOW_SECONDS", 900)
CLEAN_SHEET_LATE_WINDOW_SECONDS = parse_number("CLEAN_SHEET_LATE_WINDOW_SECONDS", 300)
UNSINKABLE_MIN_DEFICIT = parse_number("UNSINKABLE_MIN_DEFICIT", 3)
BINOME_PROBABILITY = parse_number("BINOME_PROBABILITY", 0.25, float)
