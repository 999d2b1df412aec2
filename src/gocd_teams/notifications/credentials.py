"""
Credentials and the Microsoft Graph client.

The token configured for the notifier is used as a static bearer token
that never expires: there is no refresh. If Graph starts rejecting it,
requests fail and the error propagates.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Generator, Optional

import httpx

from gocd_teams.core import GRAPH_BASE_URL
from gocd_teams.notifications.errors import AuthError

logger = logging.getLogger(__name__)

NEVER_EXPIRES = datetime.max.replace(tzinfo=timezone.utc)


@dataclass(frozen=True)
class AccessToken:
    token: str
    expires_on: datetime = NEVER_EXPIRES

    @property
    def expired(self) -> bool:
        return datetime.now(timezone.utc) >= self.expires_on


class StaticTokenCredential:
    """A bearer token handed out unchanged for the life of the process."""

    def __init__(self, token: str) -> None:
        if not token:
            raise AuthError("No Graph access token configured")
        self._access_token = AccessToken(token)

    def get_token(self) -> AccessToken:
        return self._access_token


class StaticTokenAuth(httpx.Auth):
    """httpx auth hook presenting a StaticTokenCredential as a bearer token."""

    def __init__(self, credential: StaticTokenCredential) -> None:
        self.credential = credential

    def auth_flow(self, request: httpx.Request) -> Generator[httpx.Request, httpx.Response, None]:
        request.headers["Authorization"] = f"Bearer {self.credential.get_token().token}"
        yield request


class GraphClient:
    """Thin synchronous wrapper around the Graph REST endpoints we use."""

    def __init__(
        self,
        credential: StaticTokenCredential,
        *,
        base_url: str = GRAPH_BASE_URL,
        timeout: float = 30.0,
        http_client: httpx.Client | None = None,
    ) -> None:
        self.credential = credential
        self.base_url = base_url.rstrip("/")
        self._auth = StaticTokenAuth(credential)
        self._owns_client = http_client is None
        self._client = http_client or httpx.Client(timeout=timeout)

    def _url(self, path: str) -> str:
        return f"{self.base_url}/{path.lstrip('/')}"

    def get(self, path: str) -> Any:
        resp = self._client.get(self._url(path), auth=self._auth)
        resp.raise_for_status()
        return resp.json()

    def post(self, path: str, json: dict[str, Any]) -> Any:
        resp = self._client.post(self._url(path), json=json, auth=self._auth)
        resp.raise_for_status()
        return resp.json() if resp.content else None

    def me(self) -> dict[str, Any]:
        return self.get("me")

    def list_channels(self, team_id: str) -> Optional[list[dict[str, Any]]]:
        """Channels of a team, or None when Graph returns no result set."""
        data = self.get(f"teams/{team_id}/channels")
        if not data:
            return None
        return data.get("value")

    def post_channel_message(self, team_id: str, channel_id: str, message: dict[str, Any]) -> Any:
        return self.post(f"teams/{team_id}/channels/{channel_id}/messages", json=message)

    def close(self) -> None:
        """Close the connection pool, unless the caller supplied it."""
        if self._owns_client:
            self._client.close()

    def __enter__(self) -> "GraphClient":
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()


def new_client(
    token: str,
    *,
    base_url: str = GRAPH_BASE_URL,
    timeout: float = 30.0,
    http_client: httpx.Client | None = None,
    log: logging.Logger | None = None,
) -> GraphClient:
    """
    Build an authenticated Graph client and verify the token.

    Calls ``/me`` once so a bad token fails at startup rather than on the
    first notification.
    """
    log = log or logger
    client = GraphClient(
        StaticTokenCredential(token),
        base_url=base_url,
        timeout=timeout,
        http_client=http_client,
    )
    try:
        identity = client.me()
    except httpx.HTTPStatusError as exc:
        if exc.response.status_code in (401, 403):
            client.close()
            raise AuthError(f"Graph rejected the access token ({exc.response.status_code})") from exc
        raise
    log.info("Teams User: %s", identity.get("userPrincipalName"))
    return client
