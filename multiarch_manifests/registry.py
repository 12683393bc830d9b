"""
Registry HTTP API v2 client for best-effort manifest deletion.

Only two calls are needed: resolve a tag to its content digest (HEAD on the
manifest, reading the Docker-Content-Digest header) and delete a manifest by
that digest. Neither call retries; callers decide whether a failure matters.
"""

import sys
from typing import Mapping, Optional, Protocol

import requests
import structlog
import urllib3
from requests.auth import HTTPBasicAuth

from .references import RegistryCoordinates

logger = structlog.get_logger(__name__)

MANIFEST_V2_MEDIA_TYPE = "application/vnd.docker.distribution.manifest.v2+json"
DIGEST_HEADER = "Docker-Content-Digest"


class RegistryError(Exception):
    """Raised when a registry API call fails (transport error or non-2xx status)."""

    def __init__(self, message: str, status_code: Optional[int] = None, url: str = ""):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.url = url


class RegistryClient(Protocol):
    """Resolve and delete manifests in a remote registry."""

    def fetch_digest(self, coordinates: RegistryCoordinates, tag: str) -> Optional[str]: ...

    def delete_manifest(self, coordinates: RegistryCoordinates, digest: str) -> None: ...


def parse_digest(headers: Mapping[str, str]) -> Optional[str]:
    """Extract the content digest from response headers (case-insensitive).

    Returns None when the header is missing or blank. The value is not
    validated as a content hash.
    """
    for name, value in headers.items():
        if name.lower() == DIGEST_HEADER.lower():
            digest = value.replace("\r", "").strip()
            return digest or None
    return None


class HttpRegistryClient:
    """Registry v2 client using basic auth over a requests session."""

    def __init__(
        self,
        username: str,
        password: str,
        verify: bool = True,
        dry_run: bool = False,
        session: Optional[requests.Session] = None,
    ):
        self.verify = verify
        self.dry_run = dry_run
        self.session = session or requests.Session()
        # requests encodes str credentials as latin-1; send UTF-8 bytes instead.
        self.session.auth = HTTPBasicAuth(username.encode("utf-8"), password.encode("utf-8"))
        if not verify:
            urllib3.disable_warnings(urllib3.exceptions.InsecureRequestWarning)

    def _request(self, method: str, url: str, **kwargs) -> requests.Response:
        logger.debug("Registry request", method=method, url=url, verify=self.verify)
        try:
            response = self.session.request(method, url, verify=self.verify, **kwargs)
            response.raise_for_status()
        except requests.exceptions.HTTPError as exc:
            status_code = exc.response.status_code if exc.response is not None else None
            raise RegistryError(f"{method} {url} returned HTTP {status_code}", status_code, url) from exc
        except requests.exceptions.RequestException as exc:
            raise RegistryError(f"{method} {url} failed: {exc}", url=url) from exc
        except UnicodeError as exc:
            raise RegistryError(f"{method} {url} could not be encoded: {exc}", url=url) from exc
        return response

    def fetch_digest(self, coordinates: RegistryCoordinates, tag: str) -> Optional[str]:
        """Resolve a tag to its manifest content digest.

        Redirects are not followed. In dry-run mode no request is sent and
        None is returned.

        Raises:
            RegistryError: If the request fails or the registry answers non-2xx
        """
        url = coordinates.manifest_url(tag)
        if self.dry_run:
            print(f"DRY RUN: Would execute: HEAD {url}", file=sys.stderr)
            return None
        response = self._request(
            "HEAD",
            url,
            headers={"Accept": MANIFEST_V2_MEDIA_TYPE},
            allow_redirects=False,
        )
        digest = parse_digest(response.headers)
        logger.debug("Resolved manifest digest", repository=coordinates.repository, tag=tag, digest=digest)
        return digest

    def delete_manifest(self, coordinates: RegistryCoordinates, digest: str) -> None:
        """Delete a manifest by digest.

        Raises:
            RegistryError: If the request fails or the registry refuses deletion
        """
        url = coordinates.manifest_url(digest)
        if self.dry_run:
            print(f"DRY RUN: Would execute: DELETE {url}", file=sys.stderr)
            return
        self._request("DELETE", url)
