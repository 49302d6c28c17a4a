"""
Lookup of QA tickets already created in the current period.

Every QA ticket is tagged with the period tag on creation, so a tag search
returns the subjects that must not be ticketed again.
"""

import logging

from pydantic import ValidationError

from .client import ZendeskAPIError, ZendeskClient
from .models import ExistingQaTicket


logger = logging.getLogger(__name__)


class DedupSourceError(Exception):
    """Existing QA tickets could not be retrieved."""
    pass


def build_period_query(period_tag: str) -> str:
    return f"type:ticket tags:{period_tag}"


async def fetch_existing_qa_tickets(
    client: ZendeskClient,
    period_tag: str,
) -> list[ExistingQaTicket]:
    """
    Fetch all tickets tagged with the period tag.

    Raises:
        DedupSourceError: If the search fails.
    """
    query = build_period_query(period_tag)
    logger.info(f"Fetching existing QA tickets: {query}")

    try:
        results = await client.search_tickets(query)
        tickets = [ExistingQaTicket(**result) for result in results]
    except ZendeskAPIError as e:
        logger.error(f"Failed to fetch existing QA tickets: {e}")
        raise DedupSourceError(f"Ticket search failed: {e}") from e
    except ValidationError as e:
        logger.error(f"Unexpected ticket search payload: {e}")
        raise DedupSourceError(f"Invalid ticket search result: {e}") from e

    logger.info(f"Found {len(tickets)} QA tickets already created this period")
    return tickets


async def fetch_existing_qa_subjects(
    client: ZendeskClient,
    period_tag: str,
) -> frozenset[str]:
    """Subjects of the QA tickets already created this period."""
    tickets = await fetch_existing_qa_tickets(client, period_tag)
    return frozenset(ticket.subject for ticket in tickets if ticket.subject)
