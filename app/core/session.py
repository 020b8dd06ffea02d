"""Admin session context: the single owner of the bearer credential.

Every component that talks to the learning platform receives the session
explicitly instead of reading the credential from ambient storage. The login
flow that issues the credential lives outside this package; the session only
stores it, forwards it, and tells its dependents when it goes away.
"""

import logging

from app.core.events import EventBus, EventTypes
from app.exceptions import NotAuthenticatedError

logger = logging.getLogger(__name__)


class AdminSession:
    """
    Holds the admin bearer credential for one console session.

    Attributes:
        events (EventBus): Bus on which session and moderation events are published.
    """

    def __init__(self, token: str | None = None, events: EventBus | None = None):
        self._token = token or None
        self.events = events or EventBus()

    @property
    def is_authenticated(self) -> bool:
        """The authentication gate checked before any read."""
        return self._token is not None

    @property
    def token(self) -> str | None:
        return self._token

    def sign_in(self, token: str) -> None:
        """Store a credential issued by the external login flow."""
        if not token:
            raise NotAuthenticatedError("An empty credential cannot open a session")
        self._token = token

    def require_authenticated(self) -> str:
        """
        Return the credential, or raise when the gate is closed.

        Raises:
            NotAuthenticatedError: If no credential is held.
        """
        if self._token is None:
            raise NotAuthenticatedError()
        return self._token

    def authorization_header(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self.require_authenticated()}"}

    async def logout(self) -> None:
        """Clear the credential and signal every dependent that the session ended."""
        self._token = None
        await self.events.publish(EventTypes.SESSION_ENDED, {})

    async def signal_reauthentication(self, message: str) -> None:
        """Ask the external login collaborator to re-authenticate after a 401."""
        logger.warning("Admin credential refused by the API: %s", message)
        await self.events.publish(
            EventTypes.REAUTHENTICATION_REQUIRED, {"message": message}
        )
