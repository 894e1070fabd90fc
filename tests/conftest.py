"""Shared pytest fixtures: an in-memory GitHub client and compliant repository trees."""

from __future__ import annotations

import threading
from collections.abc import Callable, Iterator
from dataclasses import dataclass, field
from typing import Any

import pytest

from orgcheck.exceptions import FetchCancelled
from orgcheck.github import Committer, RepoFile
from orgcheck.rules import load_rulepack
from orgcheck.rules.types import Rule

COMPLIANT_WORKFLOW = """\
name: ci
on: [push, pull_request]
jobs:
  check:
    runs-on: ubuntu-latest
    steps:
      - uses: actions/checkout@v4
      - uses: jdx/mise-action@v2
      - run: mise run lint
      - run: mise run fmt -- --check
      - run: mise run test
"""

COMPLIANT_MISE_CONFIG = """\
[tools]
python = "3.12"
"""


def build_compliant_files() -> dict[str, str]:
    return {
        ".mise.toml": COMPLIANT_MISE_CONFIG,
        ".mise/tasks/lint": "#!/usr/bin/env bash\nruff check .\n",
        ".mise/tasks/fmt": "#!/usr/bin/env bash\nruff format .\n",
        ".mise/tasks/test": "#!/usr/bin/env bash\npytest\n",
        ".github/workflows/ci.yml": COMPLIANT_WORKFLOW,
        "renovate.json": '{"extends": ["config:recommended"]}\n',
        "README.md": "# repo\n",
    }


@dataclass
class FakeRepo:
    full_name: str
    files: dict[str, str] = field(default_factory=dict)
    languages: dict[str, int] = field(default_factory=lambda: {"Python": 1000})
    default_branch: str = "main"
    archived: bool = False
    fork: bool = False
    topics: tuple[str, ...] = ()

    def payload(self) -> dict[str, Any]:
        return {
            "name": self.full_name.split("/", 1)[1],
            "full_name": self.full_name,
            "default_branch": self.default_branch,
            "archived": self.archived,
            "fork": self.fork,
            "topics": list(self.topics),
        }


class FakeGitHubClient:
    """In-memory stand-in for GitHubClient with the same method surface."""

    def __init__(self, repos: list[FakeRepo], *, page_size: int = 2) -> None:
        self.repos = {repo.full_name: repo for repo in repos}
        self.page_size = page_size
        self.cancel_event = threading.Event()
        self.pages_fetched = 0
        self.failures: dict[str, Exception] = {}
        self.blocked: set[str] = set()
        self.open_pulls: dict[tuple[str, str], dict[str, Any]] = {}
        self.created_pulls: list[dict[str, Any]] = []
        self.branches: dict[tuple[str, str], str] = {}
        self.writes: list[tuple[str, str, str, str | None]] = []
        self.committers: list[Committer] = []
        self._lock = threading.Lock()

    def iter_org_repositories(self, organization: str) -> Iterator[dict[str, Any]]:
        names = sorted(name for name in self.repos if name.startswith(f"{organization}/"))
        for start in range(0, len(names), self.page_size):
            self.pages_fetched += 1
            for name in names[start : start + self.page_size]:
                yield self.repos[name].payload()

    def _before_read(self, repository: str) -> FakeRepo:
        if repository in self.failures:
            raise self.failures[repository]
        if repository in self.blocked:
            self.cancel_event.wait(5)
            raise FetchCancelled(f"fetch of {repository} cancelled")
        return self.repos[repository]

    def get_file(self, repository: str, path: str, ref: str | None = None) -> RepoFile | None:
        text = self._before_read(repository).files.get(path)
        if text is None:
            return None
        return RepoFile(path=path, text=text, sha=f"sha-{path}")

    def get_file_text(self, repository: str, path: str, ref: str | None = None) -> str | None:
        return self._before_read(repository).files.get(path)

    def list_directory(self, repository: str, path: str, ref: str | None = None) -> tuple[str, ...] | None:
        prefix = path.rstrip("/") + "/"
        files = self._before_read(repository).files
        entries = {name[len(prefix) :].split("/", 1)[0] for name in files if name.startswith(prefix)}
        return tuple(sorted(entries)) if entries else None

    def get_languages(self, repository: str) -> dict[str, int]:
        return dict(self._before_read(repository).languages)

    def get_branch_head(self, repository: str, branch: str) -> str:
        return f"head-of-{branch}"

    def create_or_reset_branch(self, repository: str, branch: str, sha: str) -> None:
        self.branches[(repository, branch)] = sha

    def put_file(
        self,
        repository: str,
        path: str,
        *,
        content: str,
        message: str,
        branch: str,
        committer: Committer,
        sha: str | None = None,
    ) -> None:
        self.writes.append((repository, branch, path, content))
        self.committers.append(committer)

    def delete_file(
        self,
        repository: str,
        path: str,
        *,
        sha: str,
        message: str,
        branch: str,
        committer: Committer,
    ) -> None:
        self.writes.append((repository, branch, path, None))
        self.committers.append(committer)

    def find_open_pull(self, repository: str, head: str) -> dict[str, Any] | None:
        return self.open_pulls.get((repository, head))

    def create_pull(self, repository: str, *, title: str, head: str, base: str, body: str) -> dict[str, Any]:
        with self._lock:
            number = len(self.created_pulls) + 1
            pull = {
                "number": number,
                "html_url": f"https://github.com/{repository}/pull/{number}",
                "title": title,
                "head": head,
                "base": base,
                "body": body,
            }
            owner = repository.split("/", 1)[0]
            self.open_pulls[(repository, f"{owner}:{head}")] = pull
            self.created_pulls.append(pull)
        return pull


@pytest.fixture()
def compliant_files() -> dict[str, str]:
    """Return a fresh file tree that satisfies every bundled rule."""
    return build_compliant_files()


@pytest.fixture()
def make_repo() -> Callable[..., FakeRepo]:
    """Return a factory for in-memory repositories (compliant by default)."""

    def _make(name: str, files: dict[str, str] | None = None, **kwargs: Any) -> FakeRepo:
        full_name = name if "/" in name else f"acme/{name}"
        return FakeRepo(full_name=full_name, files=build_compliant_files() if files is None else files, **kwargs)

    return _make


@pytest.fixture()
def make_client() -> Callable[..., FakeGitHubClient]:
    """Return a factory for FakeGitHubClient instances."""

    def _make(*repos: FakeRepo, page_size: int = 2) -> FakeGitHubClient:
        return FakeGitHubClient(list(repos), page_size=page_size)

    return _make


@pytest.fixture(scope="session")
def bundled_rules() -> tuple[Rule, ...]:
    """Load the bundled rulepack once per session."""
    return load_rulepack()
