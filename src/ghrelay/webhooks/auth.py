import hashlib
import hmac
from collections.abc import Mapping

import structlog

from ghrelay.core.config import config
from ghrelay.core.errors import SignatureError
from ghrelay.webhooks.parser import normalize_headers

logger = structlog.get_logger(__name__)


def _to_bytes(body: bytes | str) -> bytes:
    return body.encode() if isinstance(body, str) else body


def github_signature(secret: str, body: bytes | str) -> str:
    """Signature GitHub sends for `body`: `sha1=` followed by the lowercase hex HMAC-SHA1."""
    mac = hmac.new(secret.encode(), msg=_to_bytes(body), digestmod=hashlib.sha1)
    return f"sha1={mac.hexdigest()}"


def validate_github_signature(secret: str | None, headers: Mapping[str, str], body: bytes | str) -> None:
    """
    Verify a GitHub webhook body against the repository's shared secret.

    A repository without a secret has validation disabled.

    Raises:
        SignatureError: If the signature header is missing or does not match.
    """
    if secret is None:
        return

    header = config.github.signature_header
    signature = normalize_headers(headers).get(header)
    if signature is None:
        raise SignatureError(f"unable to find header {header}")

    # TODO: compare with hmac.compare_digest
    if signature != github_signature(secret, body):
        raise SignatureError("signatures don't match")

    logger.debug("github_signature_verified")


def slack_signature(secret: str, timestamp: str, body: bytes | str) -> str:
    """Slack v0 request signature over `v0:<timestamp>:<body>`."""
    base = b"v0:" + timestamp.encode() + b":" + _to_bytes(body)
    mac = hmac.new(secret.encode(), msg=base, digestmod=hashlib.sha256)
    return f"v0={mac.hexdigest()}"


def validate_slack_signature(secret: str | None, headers: Mapping[str, str], body: bytes | str) -> None:
    """
    Verify a Slack Events API request against the app signing secret.

    Raises:
        SignatureError: If a header is missing or the signature does not match.
    """
    if secret is None:
        return

    headers = normalize_headers(headers)
    signature = headers.get(config.slack.signature_header)
    if signature is None:
        raise SignatureError(f"unable to find header {config.slack.signature_header}")
    timestamp = headers.get(config.slack.timestamp_header)
    if timestamp is None:
        raise SignatureError(f"unable to find header {config.slack.timestamp_header}")

    if not hmac.compare_digest(signature, slack_signature(secret, timestamp, body)):
        raise SignatureError("signatures don't match")

    logger.debug("slack_signature_verified")
