# jobrisk/services/validation.py
from __future__ import annotations

from urllib.parse import urlparse

LINKEDIN_HOST = "linkedin.com"

EMPTY_URL_MESSAGE = "Please enter a LinkedIn profile URL."
INVALID_URL_MESSAGE = "Please enter a valid LinkedIn URL."


class ValidationError(Exception):
    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


def _host_of(s: str) -> str | None:
    try:
        parsed = urlparse(s)
        host = parsed.hostname
    except ValueError:
        return None
    if not parsed.scheme or not parsed.netloc or not host:
        return None
    return host


def is_valid_profile_url(s: str, strict: bool = False) -> bool:
    """
    True when `s` is an absolute URL whose host mentions linkedin.com.

    The default check is a plain substring test on the host, so a host such
    as ``notlinkedin.com.evil.example`` passes. ``strict=True`` only accepts
    linkedin.com itself or one of its subdomains.
    """
    if not isinstance(s, str):
        return False
    host = _host_of(s.strip())
    if host is None:
        return False
    if strict:
        return host == LINKEDIN_HOST or host.endswith("." + LINKEDIN_HOST)
    return LINKEDIN_HOST in host


def validate_profile_url(s: str | None, strict: bool = False) -> str:
    """Return the trimmed URL or raise ValidationError with a user-facing message."""
    if s is not None and not isinstance(s, str):
        raise ValidationError(INVALID_URL_MESSAGE)
    url = (s or "").strip()
    if not url:
        raise ValidationError(EMPTY_URL_MESSAGE)
    if not is_valid_profile_url(url, strict=strict):
        raise ValidationError(INVALID_URL_MESSAGE)
    return url
