import logging
import os

NUM_WORKERS_ENV = "PAIRTOK_NUM_WORKERS"

log = logging.getLogger(__name__)


def default_num_workers() -> int:
    """Return the batch worker count (respects env var override)."""
    raw = os.environ.get(NUM_WORKERS_ENV, "").strip()
    if raw:
        try:
            return max(1, int(raw))
        except ValueError:
            log.warning(f"ignoring non-integer {NUM_WORKERS_ENV}={raw!r}")
    return os.cpu_count() or 1
