"""Per-author sampling of QA candidates."""

import logging
import random
from dataclasses import dataclass, field
from typing import Optional

from .models import Candidate, CandidateSet


logger = logging.getLogger(__name__)


DEFAULT_TICKETS_PER_AUTHOR = 2


@dataclass
class SampleResult:
    """Articles chosen for QA and those left over, per author."""

    selected: CandidateSet = field(default_factory=dict)
    unused: CandidateSet = field(default_factory=dict)

    @property
    def selected_count(self) -> int:
        return sum(len(articles) for articles in self.selected.values())

    @property
    def unused_count(self) -> int:
        return sum(len(articles) for articles in self.unused.values())


def draw_without_replacement(
    articles: list[Candidate],
    count: int,
    rng: random.Random,
) -> tuple[list[Candidate], list[Candidate]]:
    """
    Draw ``count`` articles uniformly at random.

    Returns:
        Tuple of (drawn, remaining). The input list is not modified.
    """
    remaining = list(articles)
    drawn = []
    while len(drawn) < count and remaining:
        drawn.append(remaining.pop(rng.randrange(len(remaining))))
    return drawn, remaining


def sample_candidates(
    candidates: CandidateSet,
    cap: int = DEFAULT_TICKETS_PER_AUTHOR,
    rng: Optional[random.Random] = None,
) -> SampleResult:
    """
    Limit the number of QA articles per author.

    Authors with more candidates than ``cap`` get ``cap`` articles chosen
    uniformly at random; everyone else keeps all of theirs.

    Args:
        candidates: Candidate articles grouped by author.
        cap: Maximum tickets per author per run.
        rng: Random source, injectable for reproducible runs.

    Returns:
        SampleResult with the selected and unused articles.
    """
    if cap < 1:
        raise ValueError(f"Ticket cap per author must be at least 1 (got {cap})")
    rng = rng or random.Random()

    result = SampleResult()
    for author, articles in candidates.items():
        if len(articles) > cap:
            drawn, remaining = draw_without_replacement(articles, cap, rng)
            logger.debug(
                f"{author.label()}: picked {[a.title for a in drawn]} "
                f"from {len(articles)} candidates"
            )
            result.selected[author] = drawn
            result.unused[author] = remaining
        else:
            result.selected[author] = list(articles)

    logger.info(
        f"Selected {result.selected_count} articles for QA "
        f"({result.unused_count} left unused)"
    )
    return result
