import json

import pytest

from ghrelay.core.errors import PersistenceError
from ghrelay.core.models import StatusState
from ghrelay.core.state import StateStore
from ghrelay.rules.models import RuleSet

REPO_URL = "https://github.com/acme/widgets"


class TestStateStore:
    def test_find_or_add_repo_creates_once(self) -> None:
        store = StateStore()
        assert store.find_repo(REPO_URL) is None

        first = store.find_or_add_repo(REPO_URL)
        assert store.find_or_add_repo(REPO_URL) is first

    def test_set_pipeline_status_for_every_branch(self) -> None:
        store = StateStore()
        store.set_pipeline_status(REPO_URL, "ci/build", ["main", "dev"], StatusState.FAILURE)
        store.set_pipeline_status(REPO_URL, "ci/build", ["main"], StatusState.SUCCESS)

        assert store.get_pipeline_statuses(REPO_URL, "ci/build") == {
            "main": StatusState.SUCCESS,
            "dev": StatusState.FAILURE,
        }
        assert store.get_pipeline_status(REPO_URL, "ci/build", "dev") == StatusState.FAILURE
        assert store.get_pipeline_status(REPO_URL, "ci/lint", "dev") is None

    def test_bot_user_id(self) -> None:
        store = StateStore()
        assert store.get_bot_user_id() is None
        store.set_bot_user_id("UBOT")
        assert store.get_bot_user_id() == "UBOT"

    @pytest.mark.asyncio
    async def test_save_and_load_round_trip(self, tmp_path) -> None:
        store = StateStore()
        store.set_pipeline_status(REPO_URL, "ci/build", ["main", "dev"], StatusState.SUCCESS)
        store.set_pipeline_status(REPO_URL, "ci/deploy", ["main"], StatusState.PENDING)
        store.set_pipeline_status("https://github.com/acme/gears", "ci/build", ["main"], StatusState.ERROR)
        store.set_bot_user_id("UBOT")
        path = tmp_path / "state" / "state.json"

        await store.save(path)
        loaded = StateStore.load(path)

        assert loaded.state.repos.keys() == store.state.repos.keys()
        for url, repo_state in store.state.repos.items():
            assert loaded.state.repos[url].pipeline_statuses == repo_state.pipeline_statuses
        assert loaded.get_bot_user_id() == "UBOT"

    @pytest.mark.asyncio
    async def test_cached_config_is_not_persisted(self, tmp_path) -> None:
        store = StateStore()
        store.find_or_add_repo(REPO_URL).config = RuleSet(main_branch_name="main")
        path = tmp_path / "state.json"

        await store.save(path)

        data = json.loads(path.read_text())
        assert "config" not in data["repos"][REPO_URL]
        assert StateStore.load(path).find_repo(REPO_URL).config is None

    @pytest.mark.asyncio
    async def test_save_overwrites_previous_snapshot(self, tmp_path) -> None:
        store = StateStore()
        path = tmp_path / "state.json"
        store.set_pipeline_status(REPO_URL, "ci/build", ["main"], StatusState.FAILURE)
        await store.save(path)
        store.set_pipeline_status(REPO_URL, "ci/build", ["main"], StatusState.SUCCESS)
        await store.save(path)

        assert StateStore.load(path).get_pipeline_status(REPO_URL, "ci/build", "main") == StatusState.SUCCESS
        assert [p.name for p in tmp_path.iterdir()] == ["state.json"]

    @pytest.mark.asyncio
    async def test_save_failure_raises_persistence_error(self, tmp_path) -> None:
        blocker = tmp_path / "not-a-directory"
        blocker.write_text("")

        with pytest.raises(PersistenceError):
            await StateStore().save(blocker / "state.json")

    def test_load_missing_file(self, tmp_path) -> None:
        with pytest.raises(PersistenceError):
            StateStore.load(tmp_path / "missing.json")

    def test_load_corrupt_file(self, tmp_path) -> None:
        path = tmp_path / "state.json"
        path.write_text("{not json")

        with pytest.raises(PersistenceError):
            StateStore.load(path)
