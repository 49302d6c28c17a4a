"""
Main entry point for the QA Ticket Automation System.

Orchestrates the complete pipeline:
1. Compute the QA period and load tickets already created for it
2. Collect recently edited articles from every eligible brand
3. Sample a limited number of articles per author
4. Create QA tickets on behalf of the API user
5. Report results
"""

import asyncio
import logging
import random
import sys
from dataclasses import dataclass, replace
from datetime import datetime
from pathlib import Path
from typing import Optional

import click
import httpx

from .client import ZendeskAPIError, ZendeskClient
from .config import AppConfig, get_config
from .context import prepare_run
from .fetcher import ArticleFetcher
from .models import CandidateSet, TicketResults
from .report import ReportError, generate_report, log_candidates, log_results
from .sampler import SampleResult, sample_candidates
from .tickets import TicketSubmitter
from .time_window import QaWindow


def setup_logging(level: str) -> None:
    """
    Configure application logging.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR).
    """
    logging.basicConfig(
        level=getattr(logging, level.upper()),
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        handlers=[
            logging.StreamHandler(sys.stdout),
        ],
    )

    # Reduce noise from third-party libraries
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


logger = logging.getLogger(__name__)


class PipelineError(Exception):
    """Error during pipeline execution."""
    pass


@dataclass
class RunSummary:
    """What a run found and did."""

    window: QaWindow
    candidates: CandidateSet
    sample: SampleResult
    results: TicketResults


def validate_config(config: AppConfig) -> None:
    """
    Validate configuration before running.

    Args:
        config: Application configuration.

    Raises:
        PipelineError: If configuration is invalid.
    """
    errors = config.validate()
    if errors:
        for error in errors:
            logger.error(f"Configuration error: {error}")
        raise PipelineError(
            f"Configuration validation failed with {len(errors)} error(s)"
        )


async def run_pipeline(
    config: AppConfig,
    now: Optional[datetime] = None,
    rng: Optional[random.Random] = None,
    report_path: Optional[Path] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> RunSummary:
    """
    Execute the complete QA ticket pipeline.

    Args:
        config: Application configuration.
        now: Current time override.
        rng: Random source for sampling.
        report_path: Optional path for an Excel report of the results.
        transport: Optional httpx transport (used by tests).

    Returns:
        RunSummary of the run.

    Raises:
        PipelineError: If a step that the run cannot continue without fails.
    """
    validate_config(config)

    async with ZendeskClient(config.zendesk, transport=transport) as client:
        # Step 1: Startup
        logger.info("-" * 40)
        logger.info("Step 1: Computing QA period and loading existing QA tickets")
        logger.info("-" * 40)

        startup = await prepare_run(config, client, now)
        if not startup.ok:
            raise PipelineError(startup.error)
        context = startup.context

        # Step 2: Collect candidates
        logger.info("-" * 40)
        logger.info("Step 2: Collecting recently edited articles")
        logger.info("-" * 40)

        try:
            candidates = await ArticleFetcher(client, context).collect_candidates()
        except ZendeskAPIError as e:
            raise PipelineError(f"Brand fetch failed: {e}") from e
        log_candidates(candidates)

        # Step 3: Sample
        logger.info("-" * 40)
        logger.info(
            f"Step 3: Sampling up to {config.tickets.per_author} articles per author"
        )
        logger.info("-" * 40)

        sample = sample_candidates(candidates, config.tickets.per_author, rng)

        # Step 4: Create tickets
        logger.info("-" * 40)
        if config.read_only:
            logger.info("Step 4: Read only mode, no tickets will be created")
        else:
            logger.info("Step 4: Creating QA tickets")
        logger.info("-" * 40)

        results = await TicketSubmitter(client, context).submit_all(sample.selected)

    # Step 5: Report
    log_results(results)
    if report_path:
        try:
            generate_report(results, context.window.period_tag, report_path)
        except ReportError as e:
            raise PipelineError(f"Report generation failed: {e}") from e

    return RunSummary(
        window=context.window,
        candidates=candidates,
        sample=sample,
        results=results,
    )


@click.command()
@click.option(
    "--read-only",
    is_flag=True,
    default=False,
    help="Log the tickets that would be created without creating them",
)
@click.option(
    "--report",
    "-o",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Write an Excel report of the ticket results",
)
@click.option(
    "--seed",
    type=int,
    default=None,
    help="Seed for article sampling (reproducible selection)",
)
@click.option(
    "--debug",
    is_flag=True,
    default=False,
    help="Enable debug logging",
)
@click.option(
    "--validate-only",
    is_flag=True,
    default=False,
    help="Only validate configuration without running the pipeline",
)
def main(
    read_only: bool,
    report: Optional[Path],
    seed: Optional[int],
    debug: bool,
    validate_only: bool,
) -> None:
    """
    Knowledge Base QA Ticket Automation.

    Creates quality assessment tickets for recently edited Help Center
    articles, a few per author, on behalf of the API user.
    """
    try:
        config = get_config()

        if read_only:
            config = replace(config, read_only=True)
        if debug:
            config = replace(config, verbose=True)

        setup_logging(config.effective_log_level)

        if validate_only:
            logger.info("Validating configuration...")
            validate_config(config)
            logger.info("Configuration is valid!")
            return

        logger.info("=" * 60)
        logger.info("Starting QA Ticket Pipeline")
        logger.info("=" * 60)

        rng = random.Random(seed) if seed is not None else None
        summary = asyncio.run(run_pipeline(config, rng=rng, report_path=report))

        logger.info("=" * 60)
        logger.info(
            f"Pipeline completed: {summary.sample.selected_count} articles "
            f"selected for {summary.window.period_tag}"
        )
        logger.info("=" * 60)

    except PipelineError as e:
        click.echo(f"Pipeline failed: {e}", err=True)
        sys.exit(1)
    except KeyboardInterrupt:
        click.echo("\nOperation cancelled by user", err=True)
        sys.exit(130)
    except Exception as e:
        click.echo(f"Unexpected error: {e}", err=True)
        if debug:
            import traceback
            traceback.print_exc()
        sys.exit(1)


if __name__ == "__main__":
    main()
