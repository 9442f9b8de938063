"""Handler for 'trellis init'."""

import asyncio
from pathlib import Path

from trellis.cli._common import output_result
from trellis.git import create_store_branch, init_repo, is_git_repo, read_config


def init_store(args) -> int:
    """Create the store branch, initializing the git repository if needed."""
    repo_path = Path(args.repo).resolve()

    if not is_git_repo(repo_path):
        init_repo(repo_path)

    config = read_config(repo_path)
    commit = asyncio.run(create_store_branch(repo_path, config["branch"]))

    data = {"repo_path": str(repo_path), "branch": config["branch"], "created": commit is not None}
    if commit is None:
        text = f"Store already initialized at {repo_path}"
    else:
        text = f"Initialized trellis store on branch {config['branch']} ({commit[:7]})"
    output_result(data, text, args.json)
    return 0
