import pytest
from pydantic import ValidationError

from ghrelay.core.models import EventType, StatusState
from ghrelay.integrations.github.models import Repository
from ghrelay.webhooks.models import GenericEvent, PushEvent, StatusEvent


class TestRepository:
    """Test Repository model validation."""

    def test_html_url_is_primary_key(self) -> None:
        repo = Repository(name="widgets", full_name="acme/widgets", html_url="https://github.com/acme/widgets")

        assert repo.url == "https://github.com/acme/widgets"

    def test_api_urls_derived_for_github_com(self) -> None:
        repo = Repository(name="widgets", full_name="acme/widgets", html_url="https://github.com/acme/widgets")

        assert repo.commits_url == "https://api.github.com/repos/acme/widgets/commits{/sha}"
        assert repo.contents_url == "https://api.github.com/repos/acme/widgets/contents/{+path}"

    def test_api_urls_derived_for_enterprise_host(self) -> None:
        repo = Repository(
            name="widgets",
            full_name="acme/widgets",
            html_url="https://git.example.com/acme/widgets",
        )

        assert repo.pulls_url == "https://git.example.com/api/v3/repos/acme/widgets/pulls{/number}"

    def test_missing_required_fields(self) -> None:
        with pytest.raises(ValidationError) as exc_info:
            Repository(name="widgets")  # type: ignore

        error_fields = {err["loc"][0] for err in exc_info.value.errors()}
        assert "full_name" in error_fields
        assert "html_url" in error_fields


class TestPushEvent:
    def test_branch_strips_heads_prefix(self, make_push_payload) -> None:
        event = PushEvent.model_validate(make_push_payload([{"id": "abc"}], ref="refs/heads/feature/x"))

        assert event.branch == "feature/x"
        assert event.event_type is EventType.PUSH

    def test_tag_ref_returned_as_is(self, make_push_payload) -> None:
        event = PushEvent.model_validate(make_push_payload([], ref="refs/tags/v1.0"))

        assert event.branch == "refs/tags/v1.0"

    def test_modified_files_include_added_and_removed(self, make_push_payload) -> None:
        payload = make_push_payload([{"id": "abc", "added": ["a.py"], "removed": ["b.py"], "modified": ["c.py"]}])
        event = PushEvent.model_validate(payload)

        assert event.commits[0].modified_files == ["a.py", "b.py", "c.py"]

    def test_sender_required(self, make_push_payload) -> None:
        payload = make_push_payload([])
        del payload["sender"]

        with pytest.raises(ValidationError):
            PushEvent.model_validate(payload)


class TestStatusEvent:
    def test_state_parsed_as_enum(self, make_status_payload) -> None:
        event = StatusEvent.model_validate(make_status_payload(state="failure"))

        assert event.state is StatusState.FAILURE
        assert event.summary()["context"] == "ci/build"

    def test_unknown_state_rejected(self, make_status_payload) -> None:
        with pytest.raises(ValidationError):
            StatusEvent.model_validate(make_status_payload(state="exploded"))


class TestGenericEvent:
    def test_summary_without_sender(self, repository_payload) -> None:
        event = GenericEvent.model_validate({"repository": repository_payload})

        assert event.summary() == {"sender": "none", "action": "none"}
        assert event.event_type is EventType.OTHER
