"""Tests for the click command line."""

from unittest.mock import AsyncMock, MagicMock

import pytest
from click.testing import CliRunner

from commitscan import __version__, cli as cli_module
from commitscan.cli import cli
from commitscan.core.errors import GitCommandError
from commitscan.core.types import Commit, CommitAnalysis

COMMITS = [
    Commit(hash="a" * 40, date="2024-03-01", message="Add wallet", author_email="ada@example.com"),
    Commit(hash="b" * 40, date="2024-03-02", message="Swap RNG", author_email="eve@example.com"),
    Commit(hash="c" * 40, date="2024-03-03", message="Fix typo", author_email="bob@example.com"),
]

VERDICTS = {
    "a" * 40: CommitAnalysis(commit=COMMITS[0], confidence=10, reasoning="Looks routine."),
    "b" * 40: CommitAnalysis(commit=COMMITS[1], confidence=95, reasoning="Weak entropy."),
    "c" * 40: CommitAnalysis(commit=COMMITS[2], error=GitCommandError("bad object")),
}


class FakeRepository:
    def __init__(self, target_directory, **kwargs):
        self.target_directory = target_directory

    async def log(self):
        return list(COMMITS)

    async def commits_by_author(self, email):
        return [c for c in COMMITS if c.author_email == email]

    async def authors(self):
        return ["Ada <ada@example.com>", "Eve <eve@example.com>"]


class FakeAnalyzer:
    def __init__(self, client, model, repository, **kwargs):
        self.model = model

    async def analyze(self, commit):
        return VERDICTS[commit.hash]


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def fake_backend(monkeypatch):
    client = MagicMock()
    client.close = AsyncMock()
    monkeypatch.setattr(cli_module, "GitRepository", FakeRepository)
    monkeypatch.setattr(cli_module, "CommitAnalyzer", FakeAnalyzer)
    monkeypatch.setattr(cli_module, "create_client", lambda config: client)
    monkeypatch.setenv("OPENAI_API_KEY", "sk-test")
    monkeypatch.setenv("OPENAI_API_MODEL", "test-model")
    return client


class TestScanCommand:
    """Tests for `commitscan scan`."""

    def test_scan_prints_results_and_top(self, runner, fake_backend, tmp_path):
        result = runner.invoke(cli, ["scan", str(tmp_path), "--concurrency", "2", "--top", "5"])

        assert result.exit_code == 0, result.output
        assert "[95] " + "b" * 40 in result.output
        assert "Weak entropy." in result.output
        assert "bad object" in result.output
        assert "Top Results" in result.output
        assert "b" * 10 in result.output
        fake_backend.close.assert_awaited_once()

    def test_scan_author_filter(self, runner, fake_backend, tmp_path):
        result = runner.invoke(cli, ["scan", str(tmp_path), "--author", "eve@example.com"])

        assert result.exit_code == 0, result.output
        assert "b" * 40 in result.output
        assert "a" * 40 not in result.output

    def test_scan_without_api_key(self, runner, fake_backend, monkeypatch, tmp_path):
        monkeypatch.delenv("OPENAI_API_KEY")
        result = runner.invoke(cli, ["scan", str(tmp_path)])

        assert result.exit_code == 1
        assert "No API key configured" in result.output

    def test_fatal_error_surfaces(self, runner, fake_backend, monkeypatch, tmp_path):
        class BrokenAnalyzer(FakeAnalyzer):
            async def analyze(self, commit):
                raise GitCommandError("git exploded")

        monkeypatch.setattr(cli_module, "CommitAnalyzer", BrokenAnalyzer)
        result = runner.invoke(cli, ["scan", str(tmp_path)])

        assert result.exit_code == 1
        assert "git exploded" in result.output

    def test_invalid_concurrency(self, runner, fake_backend, tmp_path):
        result = runner.invoke(cli, ["scan", str(tmp_path), "--concurrency", "0"])
        assert result.exit_code == 2


class TestAuthorsCommand:
    """Tests for `commitscan authors`."""

    def test_lists_authors(self, runner, fake_backend, tmp_path):
        result = runner.invoke(cli, ["authors", str(tmp_path)])

        assert result.exit_code == 0, result.output
        assert result.output.splitlines() == ["Ada <ada@example.com>", "Eve <eve@example.com>"]


def test_version(runner):
    result = runner.invoke(cli, ["--version"])
    assert result.exit_code == 0
    assert result.output.strip() == __version__
