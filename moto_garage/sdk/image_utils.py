from __future__ import annotations

from urllib.parse import urljoin, urlparse


def safe_image_url(value: str | None) -> str | None:
    if not value:
        return None
    parsed = urlparse(value)
    if parsed.scheme not in {"http", "https"}:
        return None
    if not parsed.netloc:
        return None
    return value


def resolve_image_url(value: str | None, origin: str) -> str | None:
    """Resolve a listing image reference for display.

    Absolute http(s) URLs pass through; relative paths such as
    ``uploads/bike.jpg`` are joined to the API origin.
    """
    if not value:
        return None
    absolute = safe_image_url(value)
    if absolute:
        return absolute
    if urlparse(value).scheme:
        return None
    return safe_image_url(urljoin(origin.rstrip("/") + "/", value.lstrip("/")))


def resolve_listing_images(images: list[str], origin: str) -> list[str]:
    resolved = (resolve_image_url(image, origin) for image in images)
    return [url for url in resolved if url]

