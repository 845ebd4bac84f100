import pytest

from ghrelay.core.errors import SignatureError
from ghrelay.webhooks.auth import (
    github_signature,
    slack_signature,
    validate_github_signature,
    validate_slack_signature,
)

BODY = b'{"zen": "Keep it logically awesome."}'


class TestGitHubSignature:
    def test_signature_format(self) -> None:
        signature = github_signature("secret", BODY)
        assert signature.startswith("sha1=")
        assert len(signature) == len("sha1=") + 40
        assert signature == signature.lower()

    def test_no_secret_always_passes(self) -> None:
        validate_github_signature(None, {}, BODY)
        validate_github_signature(None, {"X-Hub-Signature": "sha1=bogus"}, BODY)

    def test_matching_signature_passes(self) -> None:
        headers = {"X-Hub-Signature": github_signature("secret", BODY)}
        validate_github_signature("secret", headers, BODY)

    def test_header_lookup_is_case_insensitive(self) -> None:
        headers = {"x-hub-signature": github_signature("secret", BODY)}
        validate_github_signature("secret", headers, BODY)

    def test_missing_header_fails(self) -> None:
        with pytest.raises(SignatureError, match="unable to find header x-hub-signature"):
            validate_github_signature("secret", {"X-GitHub-Event": "push"}, BODY)

    def test_mismatch_fails(self) -> None:
        headers = {"X-Hub-Signature": github_signature("other-secret", BODY)}
        with pytest.raises(SignatureError, match="signatures don't match"):
            validate_github_signature("secret", headers, BODY)

    def test_tampered_body_fails(self) -> None:
        headers = {"X-Hub-Signature": github_signature("secret", BODY)}
        with pytest.raises(SignatureError):
            validate_github_signature("secret", headers, BODY + b" ")


class TestSlackSignature:
    def test_matching_signature_passes(self) -> None:
        headers = {
            "X-Slack-Request-Timestamp": "1531420618",
            "X-Slack-Signature": slack_signature("signing", "1531420618", BODY),
        }
        validate_slack_signature("signing", headers, BODY)

    def test_signature_covers_timestamp(self) -> None:
        headers = {
            "X-Slack-Request-Timestamp": "1531420619",
            "X-Slack-Signature": slack_signature("signing", "1531420618", BODY),
        }
        with pytest.raises(SignatureError, match="signatures don't match"):
            validate_slack_signature("signing", headers, BODY)

    def test_missing_timestamp_fails(self) -> None:
        headers = {"X-Slack-Signature": slack_signature("signing", "1531420618", BODY)}
        with pytest.raises(SignatureError, match="x-slack-request-timestamp"):
            validate_slack_signature("signing", headers, BODY)

    def test_no_secret_always_passes(self) -> None:
        validate_slack_signature(None, {}, BODY)
