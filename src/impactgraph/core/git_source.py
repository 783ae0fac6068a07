"""Reads earlier versions of project files from git."""

import logging
import os
from typing import Optional

import git

logger = logging.getLogger(__name__)


class RevisionReadError(RuntimeError):
    """Raised when a revision cannot be read from the repository."""


def open_repository(path: str) -> git.Repo:
    try:
        return git.Repo(path, search_parent_directories=True)
    except (git.exc.InvalidGitRepositoryError, git.exc.NoSuchPathError) as e:
        raise RevisionReadError(f"Not inside a git repository: {path}") from e


def read_revision_text(project_root: str, file: str, revision: str = "HEAD") -> Optional[str]:
    """Text of root-relative ``file`` at ``revision``, or None if it did not exist there."""
    repo = open_repository(project_root)

    try:
        commit = repo.commit(revision)
    except (git.exc.BadName, git.exc.BadObject, ValueError) as e:
        raise RevisionReadError(f"Unknown revision {revision!r}") from e

    full_path = os.path.realpath(os.path.join(project_root, *file.split("/")))
    working_tree = os.path.realpath(repo.working_tree_dir)
    repo_path = os.path.relpath(full_path, working_tree).replace(os.sep, "/")

    try:
        blob = commit.tree / repo_path
    except KeyError:
        logger.debug("%s does not exist at %s", repo_path, revision)
        return None

    return blob.data_stream.read().decode("utf-8", errors="replace")
