from typing import Annotated, AsyncIterator

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from app.core.config import Settings, get_settings
from app.core.session import AdminSession
from app.exceptions import NotAuthenticatedError
from app.services.api_client import ConsoleApiClient
from app.services.moderation import ModerationEngine
from app.services.record_source import RecordSource

bearer_scheme = HTTPBearer(auto_error=False)


def get_admin_session(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)],
) -> AdminSession:
    """
    Build the admin session from the caller's bearer credential.

    The credential is forwarded as-is; validating it is the learning platform's job.

    Raises:
        NotAuthenticatedError: If the request carries no bearer credential.
    """
    if credentials is None or not credentials.credentials:
        raise NotAuthenticatedError()
    return AdminSession(token=credentials.credentials)


async def get_api_client(
    session: Annotated[AdminSession, Depends(get_admin_session)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> AsyncIterator[ConsoleApiClient]:
    client = ConsoleApiClient(session, settings=settings)
    try:
        yield client
    finally:
        await client.aclose()


def get_record_source(
    api: Annotated[ConsoleApiClient, Depends(get_api_client)],
) -> RecordSource:
    return RecordSource(api)


def get_moderation_engine(
    api: Annotated[ConsoleApiClient, Depends(get_api_client)],
) -> ModerationEngine:
    return ModerationEngine(api)
