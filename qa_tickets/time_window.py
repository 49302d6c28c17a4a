"""
QA period calculation.

Works out the period tag used to mark this month's QA tickets and the
cutoff before which article edits are too old to be considered.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

from pydantic import BaseModel

from .config import VALID_WINDOW_UNITS, WindowConfig


logger = logging.getLogger(__name__)


class WindowConfigError(Exception):
    """The configured QA window cannot be computed."""
    pass


class QaWindow(BaseModel):
    """Date information shared by every step of a run."""

    period_tag: str
    current_date_string: str
    cutoff: datetime

    model_config = {"frozen": True}

    @property
    def cutoff_epoch(self) -> int:
        """Cutoff as whole epoch seconds, for the ``start_time`` parameter."""
        return int(self.cutoff.timestamp())


def format_period_tag(moment: datetime) -> str:
    """Tag for the calendar month containing ``moment``, e.g. ``qa_oct_2026``."""
    first_of_month = moment.replace(day=1)
    return f"qa_{first_of_month.strftime('%b').lower()}_{first_of_month.year}"


def format_current_date(moment: datetime) -> str:
    """Human readable date, e.g. ``Oct 17, 2026``."""
    return f"{moment.strftime('%b')} {moment.day}, {moment.year}"


def subtract_months(moment: datetime, months: int) -> datetime:
    """First day of the month ``months`` calendar months before ``moment``."""
    month_index = moment.year * 12 + (moment.month - 1) - months
    year, month = divmod(month_index, 12)
    return moment.replace(year=year, month=month + 1, day=1)


def compute_window(
    config: WindowConfig,
    now: Optional[datetime] = None,
) -> QaWindow:
    """
    Compute the period tag, date string and edit cutoff for a run.

    Args:
        config: Relative QA range (unit and value).
        now: Current time. Defaults to the current UTC time; naive values
            are taken as UTC.

    Returns:
        QaWindow for the run.

    Raises:
        WindowConfigError: If the unit is unknown or the value is negative.
    """
    if now is None:
        now = datetime.now(timezone.utc)
    elif now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)

    if config.unit not in VALID_WINDOW_UNITS:
        raise WindowConfigError(
            f"Invalid QA window unit '{config.unit}'. "
            f"Must be one of: {', '.join(VALID_WINDOW_UNITS)}"
        )
    if config.value < 0:
        raise WindowConfigError(
            f"QA window value cannot be negative (got {config.value})"
        )

    today = now.replace(hour=0, minute=0, second=0, microsecond=0)

    if config.unit == "months":
        cutoff = subtract_months(today, config.value)
    elif config.unit == "weeks":
        cutoff = today - timedelta(weeks=config.value)
    else:
        cutoff = today - timedelta(days=config.value)

    window = QaWindow(
        period_tag=format_period_tag(now),
        current_date_string=format_current_date(now),
        cutoff=cutoff,
    )
    logger.debug(
        f"QA window: tag={window.period_tag} cutoff={window.cutoff.isoformat()}"
    )
    return window
