import asyncio
import logging
from typing import Any, List, Optional, Tuple
from urllib.parse import quote
import httpx
from pydantic import ValidationError
from skillscope.config import Settings
from skillscope.errors import InvalidInput, NotFound, UpstreamFailure
from skillscope.models.profile import Profile, Repository

logger = logging.getLogger(__name__)

# GitHub caps per_page at 100; we never follow further pages
MAX_REPOS = 100


def clean_handle(username: Optional[str]) -> str:
    handle = (username or "").strip()
    if not handle:
        raise InvalidInput("Username required")
    return handle


class GithubProbe:
    """Reads a user's profile and most recently updated repositories from the GitHub REST API."""

    def __init__(self, settings: Settings, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.base_url = settings.github_api_url
        self.timeout = settings.http_timeout
        self.transport = transport
        self.headers = {
            "Accept": "application/vnd.github+json",
            "User-Agent": "skillscope",
        }
        if settings.github_token:
            self.headers["Authorization"] = f"Bearer {settings.github_token}"

    async def fetch(self, username: str) -> Tuple[Profile, List[Repository]]:
        """
        Fetches profile and repositories concurrently.

        Both requests are in flight before either is awaited. A failed profile
        lookup cancels the repository request and its result is never read.
        """
        handle = clean_handle(username)
        logger.info("  > Fetching GitHub profile and repositories for %s...", handle)

        async with httpx.AsyncClient(
            base_url=self.base_url,
            headers=self.headers,
            timeout=self.timeout,
            transport=self.transport,
        ) as client:
            profile_task = asyncio.create_task(self._fetch_profile(client, handle))
            repos_task = asyncio.create_task(self._fetch_repositories(client, handle))
            try:
                profile = await profile_task
            except BaseException:
                repos_task.cancel()
                await asyncio.gather(repos_task, return_exceptions=True)
                raise
            repos = await repos_task

        logger.info("  > Retrieved %d repositories for %s", len(repos), handle)
        return profile, repos

    async def _fetch_profile(self, client: httpx.AsyncClient, handle: str) -> Profile:
        response = await self._get(client, f"/users/{quote(handle, safe='')}")
        if not response.is_success:
            logger.info("  > Profile lookup for %s returned %d", handle, response.status_code)
            raise NotFound("GitHub user not found")

        payload = self._json(response)
        if not isinstance(payload, dict):
            raise UpstreamFailure("Unexpected profile payload from GitHub")
        try:
            return Profile.model_validate(payload)
        except ValidationError as e:
            raise UpstreamFailure(f"Malformed profile payload: {e.error_count()} invalid field(s)") from e

    async def _fetch_repositories(self, client: httpx.AsyncClient, handle: str) -> List[Repository]:
        response = await self._get(
            client,
            f"/users/{quote(handle, safe='')}/repos",
            params={"per_page": MAX_REPOS, "sort": "updated"},
        )
        if not response.is_success:
            raise UpstreamFailure(f"GitHub repository listing failed: {response.status_code}")

        payload = self._json(response)
        if not isinstance(payload, list):
            raise UpstreamFailure("Unexpected repository payload from GitHub")
        try:
            return [Repository.model_validate(item) for item in payload[:MAX_REPOS]]
        except ValidationError as e:
            raise UpstreamFailure(f"Malformed repository payload: {e.error_count()} invalid field(s)") from e

    async def _get(self, client: httpx.AsyncClient, path: str, **kwargs) -> httpx.Response:
        try:
            return await client.get(path, **kwargs)
        except httpx.HTTPError as e:
            raise UpstreamFailure(f"GitHub request failed: {e.__class__.__name__}") from e

    def _json(self, response: httpx.Response) -> Any:
        try:
            return response.json()
        except ValueError as e:
            raise UpstreamFailure("GitHub returned a non-JSON body") from e
