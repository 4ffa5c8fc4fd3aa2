"""Identity client adapter: lists Firebase Auth users page by page."""

from __future__ import annotations

import logging
from typing import Any, Iterator, Optional

from firebase_admin import auth

logger = logging.getLogger("auth_export.identity")


class FirebaseUsers:
    """Thin wrapper around firebase_admin.auth.list_users for one app."""

    def __init__(self, app: Any) -> None:
        self._app = app

    def list_page(self, page_token: Optional[str] = None, max_results: int = 1000):
        return auth.list_users(page_token=page_token, max_results=max_results, app=self._app)

    def iter_pages(self, page_size: int = 1000) -> Iterator[Any]:
        """Yield pages sequentially until the provider stops returning a cursor."""
        page = self.list_page(max_results=page_size)
        yield page
        page_token = page.next_page_token
        while page_token:
            page = self.list_page(page_token=page_token, max_results=page_size)
            yield page
            page_token = page.next_page_token

    def fetch_all(self, page_size: int = 1000) -> list[Any]:
        """Return every user in provider order."""
        users: list[Any] = []
        pages = 0
        for page in self.iter_pages(page_size):
            users.extend(page.users)
            pages += 1
        logger.debug("Fetched %d users in %d pages", len(users), pages)
        return users
