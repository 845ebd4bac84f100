"""
Per-repository runtime state and its persisted snapshot.

The snapshot holds, per repository URL, the last status seen for every
(pipeline, branch) pair, plus the bot's own Slack user id. Cached rule
configuration lives next to it in memory but is never persisted; it is
refetched on first use after a restart.
"""

import asyncio
import os
import tempfile
from pathlib import Path

import structlog
from pydantic import BaseModel, Field, ValidationError

from ghrelay.core.errors import PersistenceError
from ghrelay.core.models import StatusState
from ghrelay.rules.models import RuleSet

logger = structlog.get_logger(__name__)


class RepoState(BaseModel):
    """Mutable state of one repository."""

    # pipeline -> branch -> last observed status
    pipeline_statuses: dict[str, dict[str, StatusState]] = Field(default_factory=dict)
    config: RuleSet | None = Field(None, exclude=True)


class State(BaseModel):
    repos: dict[str, RepoState] = Field(default_factory=dict)
    bot_user_id: str | None = None


class StateStore:
    """
    In-memory state with whole-snapshot persistence.

    Mutations are synchronous, so a read-modify-write on a repository never
    spans an `await` and needs no lock under asyncio.
    """

    def __init__(self, state: State | None = None):
        self.state = state or State()

    def find_repo(self, repo_url: str) -> RepoState | None:
        return self.state.repos.get(repo_url)

    def find_or_add_repo(self, repo_url: str) -> RepoState:
        repo_state = self.state.repos.get(repo_url)
        if repo_state is None:
            repo_state = RepoState()
            self.state.repos[repo_url] = repo_state
        return repo_state

    def get_pipeline_statuses(self, repo_url: str, pipeline: str) -> dict[str, StatusState] | None:
        repo_state = self.find_repo(repo_url)
        if repo_state is None:
            return None
        return repo_state.pipeline_statuses.get(pipeline)

    def get_pipeline_status(self, repo_url: str, pipeline: str, branch: str) -> StatusState | None:
        statuses = self.get_pipeline_statuses(repo_url, pipeline)
        return statuses.get(branch) if statuses else None

    def set_pipeline_status(self, repo_url: str, pipeline: str, branches: list[str], status: StatusState) -> None:
        repo_state = self.find_or_add_repo(repo_url)
        branch_statuses = repo_state.pipeline_statuses.setdefault(pipeline, {})
        for branch in branches:
            branch_statuses[branch] = status

    def get_bot_user_id(self) -> str | None:
        return self.state.bot_user_id

    def set_bot_user_id(self, user_id: str) -> None:
        self.state.bot_user_id = user_id

    def dumps(self) -> str:
        return self.state.model_dump_json(indent=2)

    async def save(self, path: str | Path) -> None:
        """
        Overwrite the snapshot at `path`. The file is replaced atomically, so a
        crash leaves either the previous or the new snapshot.

        Raises:
            PersistenceError: If the snapshot cannot be written.
        """
        data = self.dumps()
        try:
            await asyncio.to_thread(_write_atomic, Path(path), data)
        except OSError as e:
            raise PersistenceError(f"failed to save state file {path}: {e}") from e
        logger.debug("state_saved", path=str(path))

    @classmethod
    def load(cls, path: str | Path) -> "StateStore":
        """
        Read a snapshot written by `save`.

        Raises:
            PersistenceError: If the file cannot be read or decoded.
        """
        try:
            content = Path(path).read_text(encoding="utf-8")
            state = State.model_validate_json(content)
        except (OSError, ValidationError) as e:
            raise PersistenceError(f"failed to load state file {path}: {e}") from e
        logger.info("state_loaded", path=str(path), repos=len(state.repos))
        return cls(state)


def _write_atomic(path: Path, data: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_path = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(data)
        os.replace(tmp_path, path)
    except BaseException:
        Path(tmp_path).unlink(missing_ok=True)
        raise
