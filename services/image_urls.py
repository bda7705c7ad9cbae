"""
Object key and URL helpers for stored images.

Keys look like ``my-photo-png-20240501t093000z.png``: the sanitised original
filename, a lower-case ISO-8601 basic UTC timestamp and the file extension.
"""
import re
from datetime import datetime, timezone
from typing import NamedTuple, Optional
from urllib.parse import unquote, urlsplit

REGION_PATTERN = re.compile(r"[a-z]{2}-[a-z]+-\d+")
_UNSAFE_KEY_CHARS = re.compile(r"[^a-z0-9]")
KEY_TIMESTAMP_FORMAT = "%Y%m%dt%H%M%Sz"


class ObjectKeyParts(NamedTuple):
    title: str
    timestamp: str
    extension: str


def _extension(filename: str, content_type: Optional[str]) -> str:
    name = filename.rsplit("/", 1)[-1]
    if "." in name.strip("."):
        ext = name.rsplit(".", 1)[1]
    elif content_type and "/" in content_type:
        ext = content_type.split("/", 1)[1].split(";", 1)[0]
    else:
        ext = ""
    return _UNSAFE_KEY_CHARS.sub("", ext.lower())


def build_object_key(filename: str, content_type: Optional[str] = None, now: Optional[datetime] = None) -> str:
    now = now or datetime.now(timezone.utc)
    if now.tzinfo is not None:
        now = now.astimezone(timezone.utc)

    sanitized = _UNSAFE_KEY_CHARS.sub("-", (filename or "").lower()) or "image"
    key = f"{sanitized}-{now.strftime(KEY_TIMESTAMP_FORMAT)}"

    ext = _extension(filename or "", content_type)
    return f"{key}.{ext}" if ext else key


def parse_object_key(key: str) -> ObjectKeyParts:
    """Split a key built by ``build_object_key`` back into title, timestamp and extension."""
    name = key.rsplit("/", 1)[-1]
    title, sep, tail = name.rpartition("-")
    if not sep:
        title, tail = "", name

    timestamp, _, extension = tail.partition(".")
    return ObjectKeyParts(title=title or name or "Untitled", timestamp=timestamp, extension=extension)


def object_key_from_url(url: str, bucket_name: str) -> str:
    """
    Recover the object key from a stored image URL.

    Handles both virtual-hosted (``https://bucket.s3.region.amazonaws.com/key``)
    and path-style (``https://s3.region.amazonaws.com/bucket/key``) URLs.
    """
    try:
        parts = urlsplit(url)
        if not parts.scheme or not parts.netloc:
            raise ValueError(f"Not an absolute URL: {url!r}")

        key = parts.path[1:] if parts.path.startswith("/") else parts.path
        if bucket_name and key.startswith(f"{bucket_name}/"):
            key = key[len(bucket_name) + 1:]
        return unquote(key)
    except ValueError:
        return unquote(url.rsplit("/", 1)[-1])


def rewrite_url_region(url: str, region: Optional[str]) -> str:
    if not url or not region:
        return url
    return REGION_PATTERN.sub(lambda _match: region, url, count=1)


__all__ = [
    "ObjectKeyParts",
    "build_object_key",
    "parse_object_key",
    "object_key_from_url",
    "rewrite_url_region",
]
