"""Asset classification, URL resolution, and per-document collection"""

import re
from typing import Optional
from urllib.parse import urljoin, urlparse

from helpparse.core.models import AssetReference, AssetType


VIDEO_EXTENSIONS    = {'.mp4', '.webm', '.ogv', '.mov', '.m4v'}
DOWNLOAD_EXTENSIONS = {
    '.pdf', '.zip', '.gz', '.tgz', '.tar', '.7z', '.rar',
    '.doc', '.docx', '.xls', '.xlsx', '.ppt', '.pptx', '.csv', '.epub', '.dmg', '.exe', '.msi',
}
EMBED_HOSTS = re.compile(
    r'(^|\.)(youtube\.com|youtube-nocookie\.com|youtu\.be|vimeo\.com|loom\.com|codepen\.io|codesandbox\.io|figma\.com)$'
)


def _extension(url: str) -> str:
    path = urlparse(url).path.lower()
    dot = path.rfind('.')
    return path[dot:] if dot > path.rfind('/') else ''


def is_external(url: str) -> bool:
    return url.startswith(('http://', 'https://'))


def classify_link(url: str) -> Optional[AssetType]:
    """Asset type for a hyperlink target; None for ordinary page links."""
    ext = _extension(url)
    if ext in VIDEO_EXTENSIONS:
        return "video"
    if ext in DOWNLOAD_EXTENSIONS:
        return "download"
    if EMBED_HOSTS.search(urlparse(url).hostname or ''):
        return "embed"
    return None


def classify_image(url: str) -> AssetType:
    return "video" if _extension(url) in VIDEO_EXTENSIONS else "image"


def resolve_url(url: str, base_path: Optional[str]) -> Optional[str]:
    """Join a relative URL onto base_path; None when no resolution applies."""
    if not base_path or not url:
        return None
    parsed = urlparse(url)
    if parsed.scheme or url.startswith(('/', '#', '//')):
        return None
    base = base_path if base_path.endswith('/') else base_path + '/'
    return urljoin(base, url)


class AssetCollector:
    """Accumulates AssetReferences in first-appearance order, one per (type, url)."""

    def __init__(self, base_path: Optional[str] = None):
        self.base_path = base_path
        self._assets: dict[tuple[str, str], AssetReference] = {}

    def add(self, type_: AssetType, url: str, alt: Optional[str] = None, title: Optional[str] = None) -> str:
        """Record an asset and return the URL to emit in HTML."""
        resolved = resolve_url(url, self.base_path)
        key = (type_, url)
        if key not in self._assets:
            self._assets[key] = AssetReference(
                type=type_, original_url=url, resolved_url=resolved,
                alt=alt or None, title=title or None,
            )
        return resolved or url

    def result(self) -> tuple[AssetReference, ...]:
        return tuple(self._assets.values())
