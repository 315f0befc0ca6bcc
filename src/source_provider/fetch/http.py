"""Registry client downloading package archives over HTTP."""

import logging

import httpx

logger = logging.getLogger(__name__)


class RegistryNotFoundError(Exception):
    """The registry has no archive for the requested package version."""

    def __init__(self, name: str, version: str):
        self.name = name
        self.version = version
        super().__init__(f"package {name} {version} not found in registry")


class HttpRegistryClient:
    """Client for downloading ``.crate`` archives from a static registry host."""

    DEFAULT_BASE_URL = "https://static.crates.io/crates"
    DEFAULT_USER_AGENT = "source-provider"

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        user_agent: str = DEFAULT_USER_AGENT,
        timeout: float = 30.0,
        token: str | None = None,
    ):
        """Initialize the registry client.

        Args:
            base_url: Root URL archives are served under
            user_agent: User-Agent header sent with every request
            timeout: Request timeout in seconds
            token: Optional token sent as the Authorization header
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.token = token
        self._headers = {"User-Agent": user_agent}
        if token:
            self._headers["Authorization"] = token

    def archive_url(self, name: str, version: str) -> str:
        """Return the download URL of a package archive."""
        return f"{self.base_url}/{name}/{name}-{version}.crate"

    def download(self, name: str, version: str) -> bytes:
        """Download the archive for an exact package version.

        Args:
            name: Package name
            version: Exact version string

        Returns:
            Raw archive bytes

        Raises:
            RegistryNotFoundError: If the registry answers 404 or 403
            httpx.HTTPError: If the request fails
        """
        url = self.archive_url(name, version)
        logger.info("downloading %s %s from %s", name, version, url)

        with httpx.Client(timeout=self.timeout, headers=self._headers) as client:
            response = client.get(url, follow_redirects=True)

            # Static hosts backed by object storage answer 403 for missing keys
            if response.status_code in (403, 404):
                raise RegistryNotFoundError(name, version)
            response.raise_for_status()
            return response.content
