from __future__ import annotations
import logging
from typing import Any

import httpx
from tenacity import (
    AsyncRetrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from docsync.services.sources.base import (
    FetchError,
    RateLimitError,
    RemoteFile,
    TreeEntry,
    TreeSource,
)

logger = logging.getLogger(__name__)

RETRYABLE_ERRORS = (httpx.TransportError, RateLimitError)


class GitHubSource(TreeSource):
    """
    Documentation tree stored in a GitHub repository.

    Folders are listed with the contents API
    (GET /repos/{repo}/contents/{path}?ref={branch}); bodies are downloaded
    from raw.githubusercontent.com. Transport errors and rate-limit
    responses are retried a bounded number of times with exponential
    backoff, after which the folder or file counts as failed.
    """

    def __init__(
        self,
        repo: str,
        branch: str = "master",
        root: str = "docs",
        token: str | None = None,
        api_url: str = "https://api.github.com",
        raw_url: str = "https://raw.githubusercontent.com",
        user_agent: str = "Docs-Sync",
        timeout: float = 15.0,
        max_concurrency: int = 4,
        max_attempts: int = 3,
        backoff: float = 1.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        super().__init__(root=root, recursive=True, max_concurrency=max_concurrency)
        self.repo = repo
        self.branch = branch
        self.api_url = api_url.rstrip("/")
        self.raw_url = raw_url.rstrip("/")
        self.max_attempts = max_attempts
        self.backoff = backoff

        headers = {"User-Agent": user_agent}
        if token:
            headers["Authorization"] = f"Bearer {token}"
        self._client = client or httpx.AsyncClient(
            headers=headers,
            timeout=httpx.Timeout(timeout),
            follow_redirects=True,
        )
        self._owns_client = client is None

    def describe(self) -> str:
        return f"github:{self.repo}@{self.branch}/{self.root}"

    async def close(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> "GitHubSource":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    async def _get(self, url: str, **kwargs: Any) -> httpx.Response:
        retrying = AsyncRetrying(
            stop=stop_after_attempt(self.max_attempts),
            wait=wait_exponential(multiplier=self.backoff, min=0, max=10),
            retry=retry_if_exception_type(RETRYABLE_ERRORS),
            reraise=True,
        )
        try:
            async for attempt in retrying:
                with attempt:
                    response = await self._client.get(url, **kwargs)
                    self._raise_for_rate_limit(response)
                    return response
        except httpx.TransportError as e:
            raise FetchError(f"GET {url} failed: {e!r}") from e
        raise FetchError(f"GET {url} failed")

    @staticmethod
    def _raise_for_rate_limit(response: httpx.Response) -> None:
        if response.status_code == 429 or (
            response.status_code == 403
            and response.headers.get("x-ratelimit-remaining") == "0"
        ):
            reset = response.headers.get("x-ratelimit-reset", "unknown")
            raise RateLimitError(
                f"GitHub rate limit hit for {response.request.url} (reset: {reset})"
            )

    async def list_folder(self, path: str) -> list[TreeEntry]:
        url = f"{self.api_url}/repos/{self.repo}/contents/{path}"
        response = await self._get(
            url,
            params={"ref": self.branch},
            headers={"Accept": "application/vnd.github.v3+json"},
        )
        if response.status_code != 200:
            raise FetchError(f"Listing '{path}' returned HTTP {response.status_code}")

        try:
            payload = response.json()
        except ValueError as e:
            raise FetchError(f"Listing '{path}' returned invalid JSON") from e

        # A file path returns a single object instead of a list
        items = payload if isinstance(payload, list) else [payload]

        entries: list[TreeEntry] = []
        for item in items:
            kind = item.get("type")
            if kind == "file":
                entries.append(TreeEntry("file", item["name"], item["path"], item.get("sha")))
            elif kind == "dir":
                entries.append(TreeEntry("dir", item["name"], item["path"]))
        logger.debug(f"Listed {len(entries)} entries in '{path}'")
        return entries

    async def read_file(self, remote_file: RemoteFile) -> str:
        url = f"{self.raw_url}/{self.repo}/{self.branch}/{remote_file.remote_path}"
        response = await self._get(url)
        if response.status_code != 200:
            raise FetchError(
                f"Downloading '{remote_file.remote_path}' returned HTTP {response.status_code}"
            )
        return response.text
