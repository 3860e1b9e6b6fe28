"""Loading portraits, background images and the wordmark.

Sources may be raw bytes, ``data:`` URLs produced by browser file pickers,
http(s) URLs, or local file paths. Every failure surfaces as
``AssetLoadError``; callers decide whether that degrades or aborts.
"""

import base64
import binascii
import io
import ipaddress
import socket
from pathlib import Path
from typing import Optional
from urllib.parse import urljoin, urlparse

import requests
from PIL import Image, UnidentifiedImageError

from .config import settings
from .exceptions import AssetLoadError
from .models import ImageSource
from .utils import get_logger

logger = get_logger(__name__)

_ALLOWED_SCHEMES = {"http", "https"}
MAX_REDIRECTS = 5

# Blocked IP ranges (private, loopback, link-local, metadata endpoints)
_BLOCKED_NETWORKS = [
    ipaddress.ip_network("0.0.0.0/8"),
    ipaddress.ip_network("10.0.0.0/8"),
    ipaddress.ip_network("100.64.0.0/10"),
    ipaddress.ip_network("172.16.0.0/12"),
    ipaddress.ip_network("192.168.0.0/16"),
    ipaddress.ip_network("127.0.0.0/8"),
    ipaddress.ip_network("169.254.0.0/16"),
    ipaddress.ip_network("::/128"),
    ipaddress.ip_network("::1/128"),
    ipaddress.ip_network("fc00::/7"),
    ipaddress.ip_network("fe80::/10"),
]


def _host_is_private(hostname: str) -> bool:
    """True when any address the host resolves to is in a blocked range."""
    try:
        resolved = socket.getaddrinfo(hostname, None, socket.AF_UNSPEC, socket.SOCK_STREAM)
    except socket.gaierror as e:
        raise AssetLoadError(f"Could not resolve image host: {hostname}") from e

    for _family, _type, _proto, _canonname, sockaddr in resolved:
        ip = ipaddress.ip_address(sockaddr[0])
        # ::ffff:a.b.c.d never matches the IPv4 networks directly
        if ip.version == 6 and ip.ipv4_mapped is not None:
            ip = ip.ipv4_mapped
        if any(ip in network for network in _BLOCKED_NETWORKS):
            logger.warning(f"Blocked image URL resolving to private IP: {hostname} -> {ip}")
            return True
    return False


def decode_image(data: bytes) -> Image.Image:
    """Decode image bytes, forcing the pixel data to load now."""
    try:
        image = Image.open(io.BytesIO(data))
        image.load()
    except (UnidentifiedImageError, OSError, ValueError) as e:
        raise AssetLoadError(f"Image data could not be decoded: {e}") from e
    return image


class ImageLoader:
    """Resolves an ``ImageSource`` to a decoded Pillow image."""

    def __init__(
        self,
        timeout: Optional[float] = None,
        user_agent: Optional[str] = None,
        max_bytes: Optional[int] = None,
        allow_private_hosts: Optional[bool] = None,
        session: Optional[requests.Session] = None,
    ):
        self.timeout = timeout if timeout is not None else settings.fetch_timeout_seconds
        self.user_agent = user_agent or settings.user_agent
        self.max_bytes = max_bytes if max_bytes is not None else settings.max_image_bytes
        self.allow_private_hosts = (
            allow_private_hosts if allow_private_hosts is not None else settings.allow_private_image_hosts
        )
        # None means one session per fetch
        self._session = session

    def load(self, source: ImageSource) -> Image.Image:
        """
        Load an image from bytes, a data URL, an http(s) URL or a path.

        Raises:
            AssetLoadError: If the source cannot be fetched or decoded
        """
        if isinstance(source, (bytes, bytearray)):
            return decode_image(bytes(source))

        source = source.strip()
        if source.startswith("data:"):
            return decode_image(self._decode_data_url(source))

        scheme = urlparse(source).scheme.lower()
        if scheme in _ALLOWED_SCHEMES:
            return decode_image(self.fetch(source))
        if scheme and len(scheme) > 1:
            raise AssetLoadError(f"Unsupported image URL scheme: {scheme}")

        return self._load_path(Path(source))

    def fetch(self, url: str) -> bytes:
        """
        Download image bytes; one attempt, bounded by the configured timeout.

        Redirects are followed by hand (at most ``MAX_REDIRECTS``) so every
        hop passes the same scheme and host checks as the original URL.
        """
        owned = self._session is None
        session = requests.Session() if owned else self._session
        try:
            return self._fetch_with(session, url)
        finally:
            if owned:
                session.close()

    def _check_url(self, url: str) -> str:
        parsed = urlparse(url)
        if parsed.scheme.lower() not in _ALLOWED_SCHEMES:
            raise AssetLoadError(f"Unsupported image URL scheme: {parsed.scheme or '(none)'}")
        if not parsed.hostname:
            raise AssetLoadError(f"Image URL has no host: {url}")
        if not self.allow_private_hosts and _host_is_private(parsed.hostname):
            raise AssetLoadError(f"Image host is not allowed: {parsed.hostname}")
        return parsed.hostname

    def _get(self, session: requests.Session, url: str) -> requests.Response:
        try:
            return session.get(
                url,
                headers={"User-Agent": self.user_agent},
                timeout=self.timeout,
                allow_redirects=False,
                stream=True,
            )
        except requests.Timeout as e:
            raise AssetLoadError(f"Timed out fetching image after {self.timeout}s") from e
        except requests.RequestException as e:
            raise AssetLoadError(f"Failed to fetch image: {e}") from e

    def _fetch_with(self, session: requests.Session, url: str) -> bytes:
        hostname = self._check_url(url)
        response = self._get(session, url)
        redirects = 0
        while response.is_redirect:
            location = response.headers.get("location", "")
            response.close()
            redirects += 1
            if redirects > MAX_REDIRECTS:
                raise AssetLoadError(f"Too many redirects fetching image (limit {MAX_REDIRECTS})")
            url = urljoin(url, location)
            logger.debug(f"Following image redirect to {url}")
            hostname = self._check_url(url)
            response = self._get(session, url)

        with response:
            if not response.ok:
                raise AssetLoadError(
                    f"Failed to fetch image (HTTP {response.status_code})",
                    details={"status": response.status_code},
                )

            content_type = response.headers.get("content-type", "")
            if not content_type.startswith("image/"):
                raise AssetLoadError(
                    f"URL is not an image. Content-Type received: {content_type}",
                    details={"content_type": content_type},
                )

            chunks = []
            received = 0
            try:
                for chunk in response.iter_content(chunk_size=64 * 1024):
                    received += len(chunk)
                    if received > self.max_bytes:
                        raise AssetLoadError(f"Image exceeds {self.max_bytes} bytes")
                    chunks.append(chunk)
            except requests.RequestException as e:
                raise AssetLoadError(f"Failed to read image data: {e}") from e

        logger.debug(f"Fetched {received} bytes from {hostname}")
        return b"".join(chunks)

    @staticmethod
    def _decode_data_url(url: str) -> bytes:
        header, _, payload = url.partition(",")
        if not header.startswith("data:image/"):
            raise AssetLoadError("Data URL is not an image")
        if not header.endswith(";base64"):
            raise AssetLoadError("Only base64 data URLs are supported")
        try:
            return base64.b64decode(payload, validate=True)
        except (binascii.Error, ValueError) as e:
            raise AssetLoadError(f"Malformed base64 image data: {e}") from e

    @staticmethod
    def _load_path(path: Path) -> Image.Image:
        try:
            data = path.read_bytes()
        except OSError as e:
            raise AssetLoadError(f"Image file not readable: {path}") from e
        return decode_image(data)


def load_logo(path: Optional[Path] = None) -> Optional[Image.Image]:
    """Load the wordmark, or None (logged) when it is missing or broken."""
    path = path or settings.logo_path
    try:
        return ImageLoader._load_path(Path(path))
    except AssetLoadError as e:
        logger.warning(f"Logo unavailable, rendering without it: {e.message}")
        return None
