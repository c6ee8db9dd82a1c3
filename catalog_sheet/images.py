"""Image object store access and URL reachability probes."""

import mimetypes
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Sequence
from urllib.parse import quote

import requests  # type: ignore[import-untyped]

from catalog_sheet.config import HEADERS, IMAGE_MIME_TYPES, REQUEST_TIMEOUT
from catalog_sheet.errors import ExternalServiceError
from catalog_sheet.logging_config import get_logger

__all__ = [
    "ImageItem",
    "ImageStore",
    "LocalImageStore",
    "list_image_urls",
    "create_session",
    "probe_url",
]

logger = get_logger("images")


@dataclass(frozen=True)
class ImageItem:
    name: str
    url: str
    mime_type: str


class ImageStore:
    """A container of files addressable by URL."""

    def list_items(self, container_id: str) -> List[ImageItem]:
        raise NotImplementedError


class LocalImageStore(ImageStore):
    """Folders under ``root`` published at ``base_url``.

    ``container_id`` is the folder name relative to ``root``; item URLs are
    ``<base_url>/<container_id>/<file name>``.
    """

    def __init__(self, root: Path, base_url: str):
        self.root = Path(root)
        self.base_url = base_url.rstrip("/")

    def list_items(self, container_id: str) -> List[ImageItem]:
        folder = self.root / container_id
        if not container_id or not folder.is_dir():
            raise ExternalServiceError(f"Image folder not found: {container_id!r}")

        items = []
        for path in sorted(folder.iterdir()):
            if not path.is_file():
                continue
            mime_type, _ = mimetypes.guess_type(path.name)
            url = f"{self.base_url}/{quote(container_id)}/{quote(path.name)}"
            items.append(ImageItem(name=path.name, url=url, mime_type=mime_type or ""))
        return items


def list_image_urls(
    store: ImageStore,
    container_id: str,
    mime_types: Sequence[str] = IMAGE_MIME_TYPES,
) -> List[str]:
    """URLs of the image files in a container, grouped by MIME type in ``mime_types`` order.

    Raises:
        ExternalServiceError: If the store cannot list the container
    """
    try:
        items = store.list_items(container_id)
    except ExternalServiceError:
        logger.exception(f"Error listing images in {container_id!r}")
        raise
    except Exception as e:
        logger.exception(f"Error listing images in {container_id!r}")
        raise ExternalServiceError(f"Could not list images in {container_id!r}: {e}") from e

    urls: List[str] = []
    for mime_type in mime_types:
        logger.debug(f"Searching for files of type: {mime_type}")
        for item in items:
            if item.mime_type == mime_type:
                urls.append(item.url)
                logger.debug(f"Found image: {item.name} ({item.url})")

    logger.info(f"Total images found: {len(urls)}")
    return urls


def create_session() -> requests.Session:
    """Create a requests Session with the probe headers."""
    session = requests.Session()
    session.headers.update(HEADERS)
    return session


def probe_url(
    url: str,
    session: Optional[requests.Session] = None,
    timeout: int = REQUEST_TIMEOUT,
) -> int:
    """HEAD ``url`` once and return the status code. No retries.

    Raises:
        ExternalServiceError: If the request itself fails
    """
    sess = session or create_session()
    try:
        resp = sess.head(url, timeout=timeout, allow_redirects=True)
    except requests.RequestException as e:
        logger.error(f"Error accessing URL {url} - {e}", exc_info=True)
        raise ExternalServiceError(f"Error accessing URL {url}: {e}") from e
    logger.info(f"URL {url} - Response code: {resp.status_code}")
    return resp.status_code
