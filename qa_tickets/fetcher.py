"""
Brand and article retrieval for the QA Ticket Automation System.

Walks the incremental Help Center article export of every active,
non-excluded brand and groups the articles that qualify for QA by author.
"""

import logging
import re
from typing import Optional

from pydantic import ValidationError

from .authors import resolve_author
from .client import ZendeskAPIError, ZendeskClient
from .context import RunContext
from .eligibility import is_eligible
from .models import ArticlesPage, Brand, Candidate, CandidateSet


logger = logging.getLogger(__name__)


_MISSING_HELP_CENTER = re.compile(r"(?<!help_center/)incremental/")
_HC_SEGMENT = re.compile(r"/hc/")
_ENCODED_COMMA = re.compile(r"%2C", re.IGNORECASE)


def fix_next_page_link(next_page: str) -> str:
    """
    Correct a ``next_page`` link from the incremental articles export.

    The links returned by the API cannot be fetched as they are: the path
    lacks the ``help_center/`` prefix before ``incremental/``, carries a
    stray ``hc/`` segment, and the ``include`` list has an encoded comma.
    Already-correct links are returned unchanged.
    """
    path, sep, query = next_page.partition("?")
    path = _MISSING_HELP_CENTER.sub("help_center/incremental/", path, count=1)
    path = _HC_SEGMENT.sub("/", path, count=1)
    return _ENCODED_COMMA.sub(",", path + sep + query)


def brand_articles_url(brand: Brand, cutoff_epoch: int) -> str:
    """First page of a brand's incremental articles export."""
    return (
        f"https://{brand.subdomain}.zendesk.com/api/v2/help_center/incremental/"
        f"articles.json?include=users,translations&start_time={cutoff_epoch}"
    )


class ArticleFetcher:
    """
    Collects QA candidates from every brand's Help Center.

    Brands are processed one after another. A failure anywhere in one
    brand's pagination is logged and skips the rest of that brand only.
    """

    def __init__(self, client: ZendeskClient, context: RunContext):
        """
        Initialize the fetcher.

        Args:
            client: Open Zendesk client.
            context: Run context with configuration and QA window.
        """
        self._client = client
        self._context = context
        self._seen_article_ids: set[int] = set()

    def should_fetch(self, brand: Brand) -> bool:
        """Check if a brand's articles are considered for QA."""
        return brand.active and brand.id not in self._context.config.exclusions.brands

    async def collect_candidates(
        self,
        brands: Optional[list[Brand]] = None,
    ) -> CandidateSet:
        """
        Fetch articles for all eligible brands and group QA candidates by author.

        Args:
            brands: Brands to scan. Fetched from the API when omitted.

        Returns:
            Mapping of author to their candidate articles.

        Raises:
            ZendeskAPIError: If the brand list cannot be fetched.
        """
        if brands is None:
            brands = await self._client.list_brands()

        candidates: CandidateSet = {}

        for brand in brands:
            if not self.should_fetch(brand):
                logger.debug(f"Skipping brand {brand.name} ({brand.id})")
                continue

            link = brand_articles_url(brand, self._context.window.cutoff_epoch)
            logger.info(f"Getting articles for brand: {brand.name} - {link}")

            try:
                added = await self._collect_brand(link, candidates)
            except (ZendeskAPIError, ValidationError) as e:
                logger.warning(f"Error getting articles for brand {brand.name}: {e}")
                continue

            logger.info(f"Brand {brand.name}: {added} articles eligible for QA")

        total = sum(len(articles) for articles in candidates.values())
        logger.info(
            f"Collected {total} candidate articles from {len(candidates)} authors"
        )
        return candidates

    async def _collect_brand(self, link: str, candidates: CandidateSet) -> int:
        """Follow one brand's pagination, adding candidates as pages arrive."""
        added = 0
        while link:
            page = ArticlesPage.model_validate(await self._client.get_json(link))
            added += self.collect_page(page, candidates)

            if not page.next_page or page.end_of_stream:
                break
            next_link = fix_next_page_link(page.next_page)
            if next_link == link:
                break
            logger.debug(f"Next page: {next_link}")
            link = next_link
        return added

    def collect_page(self, page: ArticlesPage, candidates: CandidateSet) -> int:
        """
        Add the eligible articles of one page to the candidate set.

        Returns:
            Number of articles added.
        """
        config = self._context.config
        window = self._context.window
        added = 0

        for article in page.articles:
            if article.id in self._seen_article_ids:
                continue
            translation = article.primary_translation()
            if translation is None:
                logger.debug(f"Article {article.id} has no translation, skipping")
                continue

            author = resolve_author(translation, page, config.zendesk.api_user_id)
            if not is_eligible(
                author,
                translation.updated_at,
                translation.title,
                window.cutoff,
                config.exclusions.names,
                self._context.existing_subjects,
            ):
                continue

            self._seen_article_ids.add(article.id)
            candidates.setdefault(author, []).append(
                Candidate(
                    author=author,
                    article_id=article.id,
                    title=translation.title,
                    html_url=translation.html_url,
                    updated_at=translation.updated_at,
                )
            )
            added += 1

        return added
