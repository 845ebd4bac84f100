import pytest

from ghrelay.core.config import RepoSecrets, Secrets
from ghrelay.core.context import Context
from ghrelay.core.errors import ActionError
from ghrelay.core.models import StatusState
from ghrelay.core.state import StateStore
from ghrelay.rules.models import RuleSet

REPO_URL = "https://github.com/acme/widgets"


def _context(fake_github, fake_slack, **kwargs) -> Context:
    secrets = Secrets(
        repos=[
            RepoSecrets(url=REPO_URL, allowed_pipelines=["ci/build"]),
            RepoSecrets(url="https://github.com/acme/gears"),
        ]
    )
    return Context(secrets=secrets, github=fake_github, slack=fake_slack, rule_loader=None, **kwargs)


class TestContext:
    def test_pipeline_allow_list(self, fake_github, fake_slack) -> None:
        ctx = _context(fake_github, fake_slack)

        assert ctx.is_pipeline_allowed(REPO_URL, "ci/build")
        assert not ctx.is_pipeline_allowed(REPO_URL, "ci/lint")
        # No allow-list means every pipeline
        assert ctx.is_pipeline_allowed("https://github.com/acme/gears", "anything")
        assert not ctx.is_pipeline_allowed("https://github.com/acme/unknown", "ci/build")

    def test_repo_config(self, fake_github, fake_slack) -> None:
        ctx = _context(fake_github, fake_slack)
        assert ctx.find_repo_config(REPO_URL) is None
        with pytest.raises(ActionError):
            ctx.get_repo_config(REPO_URL)

        ctx.set_repo_config(REPO_URL, RuleSet(main_branch_name="main"))

        assert ctx.get_repo_config(REPO_URL).main_branch_name == "main"

    @pytest.mark.asyncio
    async def test_save_state_without_path_is_a_no_op(self, fake_github, fake_slack, tmp_path) -> None:
        ctx = _context(fake_github, fake_slack)
        await ctx.save_state()
        assert list(tmp_path.iterdir()) == []

    @pytest.mark.asyncio
    async def test_save_state_writes_snapshot(self, fake_github, fake_slack, tmp_path) -> None:
        path = tmp_path / "state.json"
        ctx = _context(fake_github, fake_slack, state_path=path)
        ctx.state.set_pipeline_status(REPO_URL, "ci/build", ["main"], StatusState.SUCCESS)

        await ctx.save_state()

        assert StateStore.load(path).get_pipeline_status(REPO_URL, "ci/build", "main") == StatusState.SUCCESS

    @pytest.mark.asyncio
    async def test_save_state_failure_is_logged_not_raised(self, fake_github, fake_slack, tmp_path) -> None:
        blocker = tmp_path / "file"
        blocker.write_text("")
        ctx = _context(fake_github, fake_slack, state_path=blocker / "state.json")

        await ctx.save_state()
