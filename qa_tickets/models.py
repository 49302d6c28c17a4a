"""
Data models for the QA Ticket Automation System.

Uses Pydantic for robust data validation and serialization of the
Zendesk API payloads consumed and produced by the pipeline.
"""

from datetime import datetime
from enum import Enum
from typing import Optional, Union

from pydantic import BaseModel, Field


READ_ONLY_TICKET_ID = "read only"


class Brand(BaseModel):
    """A Zendesk brand with its own Help Center subdomain."""

    id: int
    name: str = ""
    subdomain: str
    active: bool = True

    model_config = {"frozen": True}


class User(BaseModel):
    """A user embedded in the incremental articles response."""

    id: int
    name: str = ""

    model_config = {"frozen": True}


class Translation(BaseModel):
    """One locale of a Help Center article."""

    title: str = ""
    html_url: str = ""
    locale: str = ""
    updated_at: datetime
    updated_by_id: Optional[int] = None

    model_config = {"frozen": True}


class Article(BaseModel):
    """A Help Center article with its embedded translations."""

    id: int
    title: str = ""
    html_url: str = ""
    updated_at: Optional[datetime] = None
    updated_by_id: Optional[int] = None
    translations: list[Translation] = Field(default_factory=list)

    model_config = {"frozen": True}

    def primary_translation(self) -> Optional[Translation]:
        """
        Get the translation used for QA selection.

        The first translation wins. When the response carries none, the
        article's own fields are used if they are complete enough.
        """
        if self.translations:
            return self.translations[0]
        if self.updated_at is None:
            return None
        return Translation(
            title=self.title,
            html_url=self.html_url,
            updated_at=self.updated_at,
            updated_by_id=self.updated_by_id,
        )


class ArticlesPage(BaseModel):
    """One page of the incremental articles export."""

    articles: list[Article] = Field(default_factory=list)
    users: list[User] = Field(default_factory=list)
    next_page: Optional[str] = None
    end_of_stream: bool = False

    model_config = {"frozen": True}

    def find_user(self, user_id: Optional[int]) -> Optional[User]:
        """Find an embedded user by id."""
        for user in self.users:
            if user.id == user_id:
                return user
        return None


class AuthorKind(str, Enum):
    """How an article's author was determined."""

    RESOLVED = "resolved"
    CONTENT_BLOCK = "content_block"
    RESOLUTION_ERROR = "resolution_error"


class Author(BaseModel):
    """
    The editor credited with an article's last change.

    The kind is part of the author's identity: the two placeholder authors
    share the API user's id, and must never merge with each other or with a
    real user who happens to have the same name.
    """

    name: str
    id: int
    kind: AuthorKind = AuthorKind.RESOLVED

    model_config = {"frozen": True}

    @property
    def is_placeholder(self) -> bool:
        return self.kind is not AuthorKind.RESOLVED

    def label(self) -> str:
        """Display label used in logs and reports."""
        if self.is_placeholder:
            return f"{self.name} [{self.kind.value}]"
        return self.name


class Candidate(BaseModel):
    """An article eligible for QA, credited to its author."""

    author: Author
    article_id: int
    title: str
    html_url: str
    updated_at: datetime

    model_config = {"frozen": True}


CandidateSet = dict[Author, list[Candidate]]


class ExistingQaTicket(BaseModel):
    """A QA ticket already created for the current period."""

    id: Optional[int] = None
    subject: str = ""
    tags: list[str] = Field(default_factory=list)

    model_config = {"frozen": True}


class TicketResult(BaseModel):
    """Outcome of creating one QA ticket."""

    article_title: str
    ticket_id: Optional[Union[int, str]] = None
    error: Optional[str] = None

    model_config = {"frozen": True}

    @property
    def succeeded(self) -> bool:
        return self.error is None and self.ticket_id is not None

    @property
    def status(self) -> str:
        if self.ticket_id == READ_ONLY_TICKET_ID:
            return "read only"
        return "created" if self.succeeded else "failed"


TicketResults = dict[Author, list[TicketResult]]
