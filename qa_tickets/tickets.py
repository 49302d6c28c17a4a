"""
QA ticket construction and submission.

Builds one internal ticket per selected article, requested by the article's
author, and creates them concurrently on behalf of the API user.
"""

import asyncio
import html
import logging

from .client import ZendeskAPIError, ZendeskClient
from .context import RunContext
from .eligibility import build_subject
from .models import (
    READ_ONLY_TICKET_ID,
    Author,
    Candidate,
    CandidateSet,
    TicketResult,
    TicketResults,
)


logger = logging.getLogger(__name__)


def build_ticket_body(candidate: Candidate, current_date_string: str) -> str:
    """HTML comment linking the article under assessment."""
    title = html.escape(candidate.title)
    url = html.escape(candidate.html_url, quote=True)
    return (
        f'<p><a href="{url}">{title}</a><br><br>'
        f"This article has been selected for quality assessment on "
        f"{current_date_string}</p>"
    )


def build_qa_ticket(candidate: Candidate, context: RunContext) -> dict:
    """
    Build the ticket creation payload for one article.

    Args:
        candidate: The selected article and its author.
        context: Run context with static ticket fields and the QA window.

    Returns:
        Payload for ``POST /api/v2/tickets.json``.
    """
    config = context.config
    ticket = {
        **config.tickets.static_fields(),
        "requester_id": candidate.author.id,
        "subject": build_subject(candidate.title),
        "comment": {
            "html_body": build_ticket_body(
                candidate, context.window.current_date_string
            ),
            "public": False,
            "author_id": config.zendesk.api_user_id,
        },
        "tags": [context.window.period_tag],
    }
    if config.tickets.custom_fields:
        ticket["custom_fields"] = [
            {"id": field_id, "value": value}
            for field_id, value in config.tickets.custom_fields
        ]
    return {"ticket": ticket}


class TicketSubmitter:
    """
    Creates QA tickets for the selected articles.

    Each ticket is created independently: a failed creation is recorded
    against its article and never stops the others.
    """

    def __init__(self, client: ZendeskClient, context: RunContext):
        """
        Initialize the submitter.

        Args:
            client: Open Zendesk client.
            context: Run context.
        """
        self._client = client
        self._context = context

    async def submit_all(self, selected: CandidateSet) -> TicketResults:
        """
        Create tickets for every selected article concurrently.

        Args:
            selected: Articles chosen for QA, grouped by author.

        Returns:
            Ticket results grouped by author.
        """
        results: TicketResults = {author: [] for author in selected}
        read_only = self._context.config.read_only

        submissions = []
        for author, articles in selected.items():
            for candidate in articles:
                payload = build_qa_ticket(candidate, self._context)
                if read_only:
                    logger.info(
                        f"Read only: would create '{payload['ticket']['subject']}' "
                        f"for {author.label()}"
                    )
                    logger.debug(f"Ticket payload: {payload}")
                    results[author].append(
                        TicketResult(
                            article_title=candidate.title,
                            ticket_id=READ_ONLY_TICKET_ID,
                        )
                    )
                else:
                    submissions.append(
                        self._submit(author, candidate, payload, results[author])
                    )

        if submissions:
            logger.info(f"Creating {len(submissions)} QA tickets")
            await asyncio.gather(*submissions)

        return results

    async def _submit(
        self,
        author: Author,
        candidate: Candidate,
        payload: dict,
        author_results: list[TicketResult],
    ) -> None:
        """Create one ticket and record its outcome."""
        logger.debug(f"Ticket payload: {payload}")
        try:
            ticket = await self._client.create_ticket(
                payload, on_behalf_of=self._context.config.zendesk.api_user_id
            )
        except ZendeskAPIError as e:
            logger.error(
                f"Failed to create QA ticket for '{candidate.title}' "
                f"({author.label()}): {e}"
            )
            author_results.append(
                TicketResult(article_title=candidate.title, error=str(e))
            )
            return

        logger.info(f"Created ticket {ticket['id']} for '{candidate.title}'")
        author_results.append(
            TicketResult(article_title=candidate.title, ticket_id=ticket['id'])
        )
