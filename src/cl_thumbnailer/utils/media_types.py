import re
from enum import StrEnum
from urllib.parse import urlsplit


class MediaType(StrEnum):
    IMAGE = "image"
    URL = "url"

    @classmethod
    def from_url(cls, url: str) -> "MediaType":
        """Classify a source URL as a direct image link or a website to render."""
        return MediaType.IMAGE if is_image_url(url) else MediaType.URL


# Substrings that mark a URL as pointing at an image. The bare names match
# query-string links such as "render?type=png" as well as file suffixes.
IMAGE_URL_MARKERS: tuple[str, ...] = (
    "jpg",
    "jpeg",
    "png",
    "gif",
    ".ico",
    ".bmp",
    ".tiff",
    ".tif",
    ".emf",
)


def contains_url(text: str) -> bool:
    if "\n" in text or "\r" in text:
        return False

    stripped_text = text.strip()

    url_pattern = re.compile(
        r"^http[s]?:\/\/(?:[a-zA-Z0-9\-._~:/?#[\]@!$&\'()*+,;=]|%[0-9a-fA-F][0-9a-fA-F])+$"
    )
    return bool(url_pattern.match(stripped_text))


def is_image_url(url: str) -> bool:
    parts = urlsplit(url)
    target = (parts.path + "?" + parts.query).lower()
    return any(marker in target for marker in IMAGE_URL_MARKERS)
