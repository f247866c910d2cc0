"""Session token holder injected into the API client."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

logger = logging.getLogger(__name__)


@dataclass
class SessionContext:
    """Bearer token and username of the signed-in user.

    One instance lives in each browser session's ``st.session_state`` and is
    never written to disk, so a login can't leak into another visitor's
    session. ``init`` starts it after a successful login and ``clear`` ends it
    (logout or a 401 from the API).
    """

    token: Optional[str] = None
    username: Optional[str] = None

    @property
    def is_authenticated(self) -> bool:
        return bool(self.token)

    def init(self, token: str, username: str) -> None:
        self.token = token
        self.username = username
        logger.info("Session started for %s", username)

    def clear(self) -> None:
        if self.username:
            logger.info("Session ended for %s", self.username)
        self.token = None
        self.username = None
