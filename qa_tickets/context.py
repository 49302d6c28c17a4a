"""
Run context and the startup phase that builds it.

Everything a run needs beyond the API client (configuration, the computed
QA window and the subjects already ticketed this period) travels in one
immutable RunContext.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from .client import ZendeskClient
from .config import AppConfig
from .dedup import DedupSourceError, fetch_existing_qa_subjects
from .time_window import QaWindow, WindowConfigError, compute_window


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RunContext:
    """Immutable inputs shared by every step of a run."""

    config: AppConfig
    window: QaWindow
    existing_subjects: frozenset[str] = frozenset()


@dataclass(frozen=True)
class StartupResult:
    """Outcome of the startup phase: a context, or the reason there is none."""

    context: Optional[RunContext] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.context is not None and self.error is None


async def prepare_run(
    config: AppConfig,
    client: ZendeskClient,
    now: Optional[datetime] = None,
) -> StartupResult:
    """
    Compute the QA window and load existing QA tickets.

    A failure here means no article may be fetched or ticketed.
    """
    try:
        window = compute_window(config.window, now)
    except WindowConfigError as e:
        logger.error(f"Error computing QA window: {e}")
        return StartupResult(error=f"QA window error: {e}")

    logger.info(
        f"QA period {window.period_tag}: considering edits after "
        f"{window.cutoff.isoformat()}"
    )

    try:
        subjects = await fetch_existing_qa_subjects(client, window.period_tag)
    except DedupSourceError as e:
        return StartupResult(error=f"Existing QA ticket lookup failed: {e}")

    return StartupResult(
        context=RunContext(config=config, window=window, existing_subjects=subjects)
    )
