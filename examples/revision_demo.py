#!/usr/bin/env python3
"""
examples/revision_demo.py

Demonstrates the gitrevision pipeline step by step on a working tree: where
the metadata lives, what HEAD resolves to, where the commit object was found,
and what the commit says.
"""

import argparse
import os
import sys

from gitrevision.models.cache import RevisionCache
from gitrevision.models.errors import RevisionError
from gitrevision.nodes.commit_parser import parse_commit
from gitrevision.nodes.locator import locate_repository
from gitrevision.nodes.object_store import fetch_commit_body, list_pack_names
from gitrevision.nodes.refs import resolve_head, with_common_dir


def parse_args():
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(description="Walk through gitrevision's detection steps")
    parser.add_argument(
        "--repo-path",
        type=str,
        default=os.getcwd(),
        help="Path to the working tree (default: current directory)",
    )
    return parser.parse_args()


def main():
    """Run the pipeline one stage at a time."""
    args = parse_args()
    cache = RevisionCache()

    handle = locate_repository(args.repo_path, cache)
    if not handle.is_valid:
        print(f"{args.repo_path} is not a git working tree", file=sys.stderr)
        return 1
    handle = with_common_dir(handle)
    print(f"Metadata directory: {handle.path}")
    print(f"Objects and refs read from: {handle.object_root}")

    head = resolve_head(handle)
    if not head.found:
        print(f"Cannot resolve HEAD: {head.diagnostic}", file=sys.stderr)
        return 1
    print(f"HEAD: {head.value.hash} ({head.value.branch or 'detached'})")
    print(f"Packs: {', '.join(list_pack_names(handle.object_root / 'objects')) or 'none'}")

    try:
        body = fetch_commit_body(handle, head.value.hash, cache)
    except RevisionError as e:
        print(f"Repository storage is unusable: {e}", file=sys.stderr)
        return 1
    if not body.found:
        print(f"Commit body unavailable: {body.diagnostic}")
        return 1

    commit = parse_commit(body.value)
    if not commit.found:
        print(f"Commit is malformed: {commit.diagnostic}")
        return 1

    print(f"""
Author: {commit.value.author.name} <{commit.value.author.email}> {commit.value.author.date}
Committer: {commit.value.committer.name} <{commit.value.committer.email}> {commit.value.committer.date}
Message: {commit.value.message}
{'=' * 80}
""")
    return 0


if __name__ == "__main__":
    sys.exit(main())
