"""Endpoint URL inspection helpers."""

import httpx

CHAT_COMPLETIONS_PATH = "/chat/completions"
LOCAL_HOSTS = frozenset({"localhost", "127.0.0.1"})


def strip_url(url: str) -> str:
    """Trim whitespace and drop one trailing slash."""
    stripped = url.strip()
    if stripped.endswith("/"):
        stripped = stripped[:-1]
    return stripped


def host_of(url: str) -> str:
    """Return the lower-cased host of ``url``, or an empty string.

    URLs typed without a scheme (``localhost:11434/v1``) are read as http.
    """
    candidate = url.strip()
    if "://" not in candidate:
        candidate = f"http://{candidate}"
    try:
        return httpx.URL(candidate).host.lower()
    except (httpx.InvalidURL, TypeError, ValueError):
        return ""


def path_of(url: str) -> str:
    """Return the path component of ``url``, or an empty string."""
    candidate = url.strip()
    if "://" not in candidate:
        candidate = f"http://{candidate}"
    try:
        return httpx.URL(candidate).path
    except (httpx.InvalidURL, TypeError, ValueError):
        return ""


def is_local_endpoint(url: str) -> bool:
    """True when the endpoint runs on this machine and may skip auth."""
    return host_of(url) in LOCAL_HOSTS


def is_google_endpoint(url: str) -> bool:
    return "googleapis.com" in host_of(url)


def is_anthropic_endpoint(url: str) -> bool:
    return "anthropic.com" in host_of(url)
