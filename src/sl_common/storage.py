"""Object-storage path and URL helpers.

Uploads themselves happen against the external bucket; this service only
decides where a file should live and how its public URL is spelled.
"""

import re
import secrets
import string
import time

from config.settings import settings

_UNSAFE_RUN = re.compile(r"[^a-z0-9.]+")
_DASH_RUN = re.compile(r"-+")
_SUFFIX_ALPHABET = string.ascii_lowercase + string.digits


def safe_filename(name: str) -> str:
    """'My Photo (1).JPG' -> 'my-photo-1-.jpg'"""
    cleaned = _UNSAFE_RUN.sub("-", name.lower())
    cleaned = _DASH_RUN.sub("-", cleaned)
    return cleaned.strip("-")


def build_media_path(folder: str, filename: str, now_ms: int | None = None) -> str:
    """<folder>/<epoch-ms>-<6 random chars>-<safe-name>"""
    timestamp = now_ms if now_ms is not None else int(time.time() * 1000)
    suffix = "".join(secrets.choice(_SUFFIX_ALPHABET) for _ in range(6))
    return f"{folder.strip('/') or 'misc'}/{timestamp}-{suffix}-{safe_filename(filename)}"


def public_media_url(path: str, prefix: str | None = None) -> str:
    """Fixed public bucket prefix + stored object path."""
    base = prefix if prefix is not None else settings.MEDIA_PUBLIC_URL_PREFIX
    if not base.endswith("/"):
        base += "/"
    return base + path.lstrip("/")
