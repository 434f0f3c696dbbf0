"""MyHub CLI.

Each command maps onto one RepositoryController operation. Exit status is
0 on success and the failure kind's own code otherwise (see myhub.errors).
"""

from __future__ import annotations

import argparse
import asyncio
import os
import sys
from pathlib import Path

from .. import __version__
from ..core.controller import RepositoryController
from ..errors import MyHubError
from ..utils.env import get_root_override


def create_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="myhub",
        description="MyHub - file-based snapshots with remote sync",
    )
    parser.add_argument(
        "--version",
        "-v",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug output",
    )

    subparsers = parser.add_subparsers(dest="command")

    subparsers.add_parser("init", help="Create an empty repository here")

    add = subparsers.add_parser("add", help="Stage files for the next commit")
    add.add_argument("paths", nargs="+", help="Files or directories to stage")

    commit = subparsers.add_parser("commit", help="Snapshot staged files")
    commit.add_argument("-m", "--message", required=True, nargs="+", help="Commit message")

    subparsers.add_parser("log", help="Show commit history, newest first")

    subparsers.add_parser("status", help="Show staged files")

    remote = subparsers.add_parser("remote", help="Manage remotes")
    remote_sub = remote.add_subparsers(dest="remote_command")
    remote_add = remote_sub.add_parser("add", help="Add or update a remote")
    remote_add.add_argument("name")
    remote_add.add_argument("url")
    remote_sub.add_parser("list", help="List remotes")

    push = subparsers.add_parser("push", help="Publish the working tree to a remote branch")
    push.add_argument("remote")
    push.add_argument("branch")

    pull = subparsers.add_parser("pull", help="Overwrite the working tree with a remote's files")
    pull.add_argument("remote", nargs="?", default=None)
    pull.add_argument("--branch", "-b", default=None, help="Remote branch to pull")

    restore = subparsers.add_parser("restore", help="Restore a snapshot onto the working tree")
    restore.add_argument("snapshot_id")

    return parser


def main(args: list[str] | None = None) -> int:
    parser = create_parser()
    parsed = parser.parse_args(args)

    if parsed.debug:
        os.environ["MYHUB_DEBUG"] = "1"

    if not parsed.command:
        parser.print_help()
        return 1

    if parsed.command == "init":
        return cmd_init(RepositoryController(_init_root()))

    try:
        controller = RepositoryController.discover(_search_start())
    except MyHubError as e:
        return _print_error(e.to_result())

    if parsed.command == "add":
        return cmd_add(parsed, controller)
    if parsed.command == "commit":
        return cmd_commit(parsed, controller)
    if parsed.command == "log":
        return cmd_log(controller)
    if parsed.command == "status":
        return cmd_status(controller)
    if parsed.command == "remote":
        return cmd_remote(parsed, controller)
    if parsed.command == "push":
        return cmd_push(parsed, controller)
    if parsed.command == "pull":
        return cmd_pull(parsed, controller)
    if parsed.command == "restore":
        return cmd_restore(parsed, controller)

    parser.print_help()
    return 1


def cmd_init(controller: RepositoryController) -> int:
    result = controller.init()
    if not result.get("success"):
        return _print_error(result)
    print(f"Initialized empty MyHub repository in {result['metadataDir']}")
    return 0


def cmd_add(args: argparse.Namespace, controller: RepositoryController) -> int:
    result = controller.add([Path(p).absolute() for p in args.paths])
    if not result.get("success"):
        return _print_error(result)

    for path in result["staged"]:
        print(f"Staged: {path}")
    for path in result["alreadyStaged"]:
        print(f"Already staged: {path}")
    for path in result["ignored"]:
        print(f"Skipped (ignored): {path}")
    return 0


def cmd_commit(args: argparse.Namespace, controller: RepositoryController) -> int:
    message = " ".join(args.message).strip()
    result = controller.commit(message)
    if not result.get("success"):
        return _print_error(result)
    print(f"Committed: {result['snapshotId']}  ({result['fileCount']} files)")
    return 0


def cmd_log(controller: RepositoryController) -> int:
    result = controller.history()
    if not result.get("success"):
        return _print_error(result)

    entries = result["entries"]
    if not entries:
        print("No commits found.")
        return 0

    for entry in entries:
        print(f"\nCommit:  {entry['snapshotId']}")
        print(f"Date:    {entry['timestamp']}")
        print(f"Files:   {entry['fileCount']}")
        print(f"Message: {entry['message']}")
    return 0


def cmd_status(controller: RepositoryController) -> int:
    result = controller.status()
    if not result.get("success"):
        return _print_error(result)

    print(f"Latest commit: {result['latest'] or '(none)'}")
    staged = result["staged"]
    if not staged:
        print("Nothing staged.")
        return 0
    print("Staged:")
    for path in staged:
        print(f"  {path}")
    return 0


def cmd_remote(args: argparse.Namespace, controller: RepositoryController) -> int:
    if args.remote_command == "add":
        result = controller.remote_add(args.name, args.url)
        if not result.get("success"):
            return _print_error(result)
        print(f"Remote \"{result['name']}\" set to {result['url']}")
        return 0

    if args.remote_command == "list":
        result = controller.remote_list()
        if not result.get("success"):
            return _print_error(result)
        for remote in result["remotes"]:
            print(f"{remote['name']:<16} {remote['url']}")
            for direction in ("push", "pull"):
                state = remote["sync"].get(direction)
                if state:
                    branch = f" ({state['branch']})" if state.get("branch") else ""
                    print(f"  last {direction}: {state.get('timestamp', '?')}{branch}")
        return 0

    print("Usage: myhub remote add <name> <url> | myhub remote list", file=sys.stderr)
    return 2


def cmd_push(args: argparse.Namespace, controller: RepositoryController) -> int:
    result = asyncio.run(controller.push(args.remote, args.branch))
    if not result.get("success"):
        return _print_error(result)
    print(f"Pushed {result['fileCount']} files to {result['remote']}/{result['branch']}")
    return 0


def cmd_pull(args: argparse.Namespace, controller: RepositoryController) -> int:
    result = asyncio.run(controller.pull(args.remote, args.branch))
    if not result.get("success"):
        return _print_error(result)
    print(f"Pulled {result['fileCount']} files from {result['remote']}")
    if result["ignored"]:
        print(f"Skipped {len(result['ignored'])} ignored files")
    return 0


def cmd_restore(args: argparse.Namespace, controller: RepositoryController) -> int:
    result = controller.restore(args.snapshot_id)
    if not result.get("success"):
        return _print_error(result)
    print(f"Restored {result['fileCount']} files from {result['snapshotId']}")
    return 0


def _print_error(result: dict) -> int:
    print(f"Error: {result.get('error')}", file=sys.stderr)
    return int(result.get("exitCode", 1))


def _init_root() -> Path:
    return get_root_override() or Path.cwd()


def _search_start() -> Path:
    return get_root_override() or Path.cwd()


if __name__ == "__main__":
    sys.exit(main())
