"""Command line entry point for revision detection."""

import argparse
import json
import os
import sys
from dataclasses import replace
from typing import List, Optional

from loguru import logger

from gitrevision.config import load_settings
from gitrevision.models.cache import RevisionCache
from gitrevision.models.state import RevisionState
from gitrevision.nodes.revision_node import revision_node


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Show the git revision checked out in a working tree")
    parser.add_argument("--repo-path", type=str, help="Path to the working tree", default=".")
    parser.add_argument("--remote-url", type=str, help="Base URL of the revision API")
    parser.add_argument("--no-remote", action="store_true", help="Do not query the revision API")
    parser.add_argument("--json", action="store_true", help="Print the result as JSON")
    parser.add_argument("--verbose", action="store_true", help="Enable verbose logging")
    return parser.parse_args(argv)


def format_revision(state: RevisionState) -> str:
    """Human readable summary of a detected revision."""
    author = state["version_git_author"]
    committer = state["version_git_committer"]
    branch = state["version_git_branch"] or "(detached HEAD)"
    remote_commit = "yes" if state["version_git_isremotecommit"] else "no"
    remote_branch = "yes" if state["version_git_isremotebranch"] else "no"

    return f"""Commit: {state['version_git_commithash']}
Branch: {branch}
Author: {author['name']} <{author['email']}> {author['date']}
Committer: {committer['name']} <{committer['email']}> {committer['date']}
Message: {state['version_git_message']}
Known upstream: commit {remote_commit}, branch {remote_branch}"""


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)

    logger.remove()
    logger.add(sys.stderr, level="DEBUG" if args.verbose else "INFO")

    try:
        settings = load_settings()
    except ValueError as e:
        logger.error(f"Invalid configuration: {e}")
        return 2

    if args.remote_url:
        settings = replace(settings, remote_url=args.remote_url.rstrip("/"))
    if args.no_remote:
        settings = replace(settings, remote_enabled=False)

    repo_path = os.path.abspath(args.repo_path)
    logger.info(f"Inspecting repository: {repo_path}")

    state = revision_node(RevisionState(repo_path=repo_path, errors=[]), cache=RevisionCache(), settings=settings)

    for error in state.get("errors", []):
        logger.error(f"- {error['node']}: {error['error']}")

    if args.json:
        print(json.dumps({key: value for key, value in state.items() if key != "errors"}, indent=2))
    elif state["version_git"]:
        print(format_revision(state))
    else:
        print("No git revision data available")

    return 0 if state["version_git"] else 1


if __name__ == "__main__":
    sys.exit(main())
