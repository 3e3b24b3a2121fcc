"""Timestamp resolution activity — one Unix epoch per folder.

HYSPLIT writes the time step of each folder in one of two places, so the
timestamp is derived by an ordered list of independent strategies, each
a pure function ``Folder -> int | None``:

1. ``from_time_span`` — the folder's ``TimeSpan/begin`` as ISO 8601.
2. ``from_folder_name`` — ``Valid:YYYYMMDD HHMM`` inside the folder name,
   read as UTC.

When every strategy declines, the current wall-clock time is used.  That
outcome is non-deterministic, so ``resolve_timestamp`` reports it and
the aggregator records a ``FALLBACK_TIMESTAMP`` warning.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

    from kml_dispersion.models.document import Folder

    TimestampStrategy = Callable[[Folder], int | None]

logger = logging.getLogger("kml_dispersion.activities.resolve_timestamp")

VALID_TIME_PATTERN = re.compile(r"Valid:(\d{8})\s+(\d{4})")
VALID_TIME_FORMAT = "%Y%m%d %H%M"


@dataclass(frozen=True, slots=True)
class ResolvedTimestamp:
    """Result of timestamp resolution.

    Attributes:
        epoch: Seconds since the Unix epoch.
        strategy: Name of the strategy that produced it, or ``"clock"``
            when the wall-clock fallback was used.
    """

    epoch: int
    strategy: str

    @property
    def is_fallback(self) -> bool:
        return self.strategy == "clock"


# ---------------------------------------------------------------------------
# Strategies
# ---------------------------------------------------------------------------


def from_time_span(folder: Folder) -> int | None:
    """Parse ``TimeSpan/begin`` (``YYYY-MM-DDTHH:MM:SSZ`` and ISO 8601 variants).

    A value without a zone designator is taken as UTC.
    """
    raw = folder.time_begin.strip()
    if not raw:
        return None
    try:
        parsed = datetime.fromisoformat(raw)
    except ValueError:
        logger.debug("Unparsable TimeSpan begin %r in folder %s", raw, folder.name)
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return int(parsed.timestamp())


def from_folder_name(folder: Folder) -> int | None:
    """Parse a ``Valid:YYYYMMDD HHMM`` stamp in the folder name as UTC."""
    match = VALID_TIME_PATTERN.search(folder.name)
    if match is None:
        return None
    try:
        parsed = datetime.strptime(f"{match.group(1)} {match.group(2)}", VALID_TIME_FORMAT)
    except ValueError:
        logger.debug("Invalid Valid: stamp %r in folder %s", match.group(0), folder.name)
        return None
    return int(parsed.replace(tzinfo=UTC).timestamp())


DEFAULT_STRATEGIES: tuple[TimestampStrategy, ...] = (from_time_span, from_folder_name)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def resolve_timestamp(
    folder: Folder,
    *,
    strategies: Sequence[TimestampStrategy] = DEFAULT_STRATEGIES,
    clock: Callable[[], datetime] | None = None,
) -> ResolvedTimestamp:
    """Derive the folder's epoch timestamp; the first strategy to succeed wins.

    Args:
        folder: The folder being processed.
        strategies: Strategies tried in order.
        clock: Source of the current time for the fallback
            (defaults to ``datetime.now(UTC)``).

    Returns:
        The resolved timestamp and which strategy produced it.
    """
    for strategy in strategies:
        epoch = strategy(folder)
        if epoch is not None:
            return ResolvedTimestamp(epoch=epoch, strategy=strategy.__name__)

    now = clock() if clock is not None else datetime.now(UTC)
    logger.warning(
        "No timestamp found for folder %r, using processing time %s",
        folder.name,
        now.isoformat(),
    )
    return ResolvedTimestamp(epoch=int(now.timestamp()), strategy="clock")
