"""
Request parsing and shared-secret authentication.
"""
import secrets
from dataclasses import dataclass

PROVIDED = "provided"
MISSING = "missing"


@dataclass(frozen=True)
class GenerationRequest:
    url: str
    secret: str


def generate_request_id():
    """Generate a correlation id for one request's log lines."""
    return secrets.token_urlsafe(12)


def parse_generation_request(payload):
    """
    Pull ``url`` and ``authSecret`` out of a decoded request body.

    Returns (GenerationRequest, details) when both are present, otherwise
    (None, details) where details maps each field to "provided"/"missing".
    An empty ``url`` is missing; an empty ``authSecret`` is provided (and
    will fail authentication).
    """
    if not isinstance(payload, dict):
        payload = {}

    url = payload.get("url")
    secret = payload.get("authSecret")

    has_url = isinstance(url, str) and url != ""
    has_secret = isinstance(secret, str)

    details = {
        "url": PROVIDED if has_url else MISSING,
        "authSecret": PROVIDED if has_secret else MISSING,
    }
    if not (has_url and has_secret):
        return None, details
    return GenerationRequest(url=url, secret=secret), details


def verify_secret(provided, expected):
    """Constant-time comparison; an unconfigured secret rejects everything."""
    if expected is None or not isinstance(provided, str):
        return False
    return secrets.compare_digest(provided.encode("utf-8"), expected.encode("utf-8"))
