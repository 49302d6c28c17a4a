"""Resolution of the author credited with an article's last edit."""

import logging

from .models import ArticlesPage, Author, AuthorKind, Translation


logger = logging.getLogger(__name__)


# updated_by_id reported for edits made through a content block
CONTENT_BLOCK_EDITOR_ID = -1

CONTENT_BLOCK_AUTHOR_NAME = "Content Block Edit"
UNKNOWN_AUTHOR_NAME = "Error getting author name"


def resolve_author(
    translation: Translation,
    page: ArticlesPage,
    api_user_id: int,
) -> Author:
    """
    Work out who last edited a translation.

    Content block edits and editors missing from the embedded user list
    are credited to the API user under distinct placeholder authors.

    Args:
        translation: The article translation being considered.
        page: Page of the articles export carrying the embedded users.
        api_user_id: Id of the API user, used for placeholder authors.

    Returns:
        The resolved or placeholder Author.
    """
    if translation.updated_by_id == CONTENT_BLOCK_EDITOR_ID:
        return Author(
            name=CONTENT_BLOCK_AUTHOR_NAME,
            id=api_user_id,
            kind=AuthorKind.CONTENT_BLOCK,
        )

    user = page.find_user(translation.updated_by_id)
    if user is None:
        logger.debug(
            f"Editor {translation.updated_by_id} of '{translation.title}' "
            f"not in embedded users, crediting the API user"
        )
        return Author(
            name=UNKNOWN_AUTHOR_NAME,
            id=api_user_id,
            kind=AuthorKind.RESOLUTION_ERROR,
        )

    return Author(name=user.name, id=user.id, kind=AuthorKind.RESOLVED)
