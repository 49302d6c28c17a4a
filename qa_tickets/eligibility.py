"""Rules deciding whether an article is due for quality assessment."""

from datetime import datetime
from typing import AbstractSet

from .models import Author


SUBJECT_PREFIX = "Quality Assessment: "


def build_subject(article_title: str) -> str:
    """Ticket subject for an article. Also the key used for deduplication."""
    return f"{SUBJECT_PREFIX}{article_title}"


def is_eligible(
    author: Author,
    updated_at: datetime,
    article_title: str,
    cutoff: datetime,
    excluded_names: AbstractSet[str],
    existing_subjects: AbstractSet[str],
) -> bool:
    """
    Check whether an article qualifies for a QA ticket this period.

    An article qualifies when its author is not excluded by name, it was
    edited strictly after the cutoff, and no QA ticket with its subject
    exists for the current period.
    """
    return (
        author.name not in excluded_names
        and updated_at > cutoff
        and build_subject(article_title) not in existing_subjects
    )
