"""
Resilient page fetching: manual redirect following with cookie forwarding,
script and meta-refresh redirect detection, and retry with backoff.
"""

from .http_client import CrawlerResponse, HttpClient
from .redirects import REDIRECT_STATUSES, CookieJar, find_script_redirect, resolve_redirect

__all__ = [
    "CrawlerResponse",
    "HttpClient",
    "REDIRECT_STATUSES",
    "CookieJar",
    "find_script_redirect",
    "resolve_redirect",
]
