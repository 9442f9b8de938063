"""Git repository helpers: trellis config, repo checks and commit plumbing."""

import asyncio
import os
import subprocess
import tempfile
from contextlib import contextmanager
from pathlib import Path
from typing import Any

from git import InvalidGitRepositoryError, NoSuchPathError, Repo

TRELLIS_DEFAULTS = {
    "app-id": "default-app-id",
    "user": None,
    "poll-interval": 2.0,
    "branch": "trellis",
}

ZERO_OID = "0" * 40


def _python_key(git_key: str) -> str:
    """Convert git-style key (hyphenated) to Python-style (underscored)."""
    return git_key.replace("-", "_")


def _git_key(python_key: str) -> str:
    """Convert Python-style key (underscored) to git-style (hyphenated)."""
    return python_key.replace("_", "-")


def _coerce(git_key: str, raw: str):
    """Type-coerce a trellis config value by the type of its default."""
    default = TRELLIS_DEFAULTS.get(git_key)
    if isinstance(default, float):
        return float(raw)
    return raw


def _section(reader, name: str) -> dict[str, str]:
    """Every key of one config section, or {} when the section is absent."""
    if not reader.has_section(name):
        return {}
    return dict(reader.items(name))


def read_config(repo_path: str | Path) -> dict[str, Any]:
    """Read the [trellis] config section merged over the defaults.

    Keys come back python-style (app_id, poll_interval, ...). When no
    user is configured, falls back to git's user.email, then "local".
    """
    repo = _get_repo(repo_path)
    reader = repo.config_reader()
    config: dict[str, Any] = {}
    for git_k, raw in _section(reader, "trellis").items():
        config[_python_key(git_k)] = _coerce(git_k, raw)
    for git_k, default in TRELLIS_DEFAULTS.items():
        config.setdefault(_python_key(git_k), default)
    if not config["user"]:
        config["user"] = _section(reader, "user").get("email") or "local"
    return config


def write_config_key(repo_path: str | Path, key: str, value) -> None:
    """Write one [trellis] key. key is python-style (underscores)."""
    repo = _get_repo(repo_path)
    writer = repo.config_writer("repository")
    writer.set_value("trellis", _git_key(key), str(value))
    writer.release()


def _get_repo(repo_path: str | Path) -> Repo:
    return Repo(repo_path)


def is_git_repo(path: str | Path) -> bool:
    """Check if path is inside a git repository."""
    try:
        Repo(path)
        return True
    except (InvalidGitRepositoryError, NoSuchPathError):
        return False


def init_repo(path: str | Path) -> Repo:
    """Initialize a new git repository at path."""
    return Repo.init(path)


# --- Plumbing ---


def run_git(repo_path: Path, args: list[str], input: str | None = None, env: dict | None = None) -> str:
    """Run a git command and return stdout."""
    result = subprocess.run(
        ["git", *args],
        cwd=repo_path,
        input=input.encode("utf-8") if input is not None else None,
        capture_output=True,
        check=True,
        env=env,
    )
    return result.stdout.decode("utf-8").strip()


def hash_blob(repo_path: Path, content: str) -> str:
    """Write content to the object store and return the blob hash."""
    return run_git(repo_path, ["hash-object", "-w", "--stdin"], input=content)


def get_ref(repo_path: Path, ref: str) -> str | None:
    """Get the commit hash for a ref, or None if it doesn't exist."""
    result = subprocess.run(
        ["git", "rev-parse", "--verify", "--quiet", ref],
        cwd=repo_path,
        capture_output=True,
    )
    if result.returncode != 0:
        return None
    return result.stdout.decode("utf-8").strip()


def compare_and_swap_ref(repo_path: Path, ref: str, new: str, old: str | None) -> bool:
    """Point ref at new only if it still points at old (None = must not exist)."""
    result = subprocess.run(
        ["git", "update-ref", ref, new, old or ZERO_OID],
        cwd=repo_path,
        capture_output=True,
    )
    return result.returncode == 0


def changed_files(repo_path: Path, old: str | None, new: str) -> list[str]:
    """Files that differ between two commits (every file when old is None)."""
    if old is None:
        out = run_git(repo_path, ["ls-tree", "-r", "--name-only", new])
    else:
        out = run_git(repo_path, ["diff-tree", "-r", "--name-only", "--no-commit-id", old, new])
    return [line for line in out.splitlines() if line]


@contextmanager
def scratch_index(repo_path: Path):
    """Yield an environment whose git index is a throwaway temp file.

    Lets commits be assembled without touching the working tree or the
    real index.
    """
    fd, idx = tempfile.mkstemp(prefix="trellis_idx_")
    os.close(fd)
    os.unlink(idx)
    try:
        yield {**os.environ, "GIT_INDEX_FILE": idx}
    finally:
        if os.path.exists(idx):
            os.unlink(idx)


def _has_identity(repo_path: Path) -> bool:
    result = subprocess.run(["git", "config", "user.email"], cwd=repo_path, capture_output=True)
    return result.returncode == 0


def commit_tree(repo_path: Path, tree: str, parent: str | None, message: str, env: dict | None = None) -> str:
    """Create a commit object for tree, falling back to a trellis identity."""
    env = dict(env or os.environ)
    if not _has_identity(repo_path):
        for var in ("GIT_AUTHOR", "GIT_COMMITTER"):
            env.setdefault(f"{var}_NAME", "trellis")
            env.setdefault(f"{var}_EMAIL", "trellis@localhost")
    args = ["commit-tree", tree, "-m", message]
    if parent:
        args += ["-p", parent]
    return run_git(repo_path, args, env=env)


async def create_store_branch(repo_path: str | Path, branch: str = "trellis") -> str | None:
    """Create an orphan branch with an empty commit if it doesn't exist yet.

    Does not touch the working tree. Returns the new commit hash, or
    None when the branch already existed.
    """

    def _create():
        path = Path(repo_path)
        if get_ref(path, f"refs/heads/{branch}") is not None:
            return None
        empty_tree = run_git(path, ["hash-object", "-t", "tree", "/dev/null"])
        commit = commit_tree(path, empty_tree, None, "Initialize trellis store")
        if not compare_and_swap_ref(path, f"refs/heads/{branch}", commit, None):
            return None
        return commit

    return await asyncio.to_thread(_create)
