"""
Console entry point for NoteSync.

    python -m notesync connect
    python -m notesync status
    python -m notesync ls [path]
    python -m notesync set-vault /Notes
    python -m notesync set-inbox Inbox
    python -m notesync logout
"""

import argparse
import asyncio
import sys
from typing import List, Optional

from .config import ValidationError
from .exceptions import NoteSyncError
from .main import NoteSyncApp


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="notesync", description="Browse and edit a remote notes vault")
    parser.add_argument("--env-file", default=None, help="Path to a .env file")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("connect", help="Authorize access to the remote store")
    sub.add_parser("status", help="Show session and vault status")

    ls = sub.add_parser("ls", help="List entries recursively")
    ls.add_argument("path", nargs="?", default=None)

    vault = sub.add_parser("set-vault", help="Set the vault root folder")
    vault.add_argument("path")

    inbox = sub.add_parser("set-inbox", help="Set the inbox subfolder inside the vault")
    inbox.add_argument("path")

    sub.add_parser("logout", help="Revoke access and clear local state")
    return parser


async def run(args: argparse.Namespace) -> int:
    app = NoteSyncApp()
    try:
        await app.initialize(env_file=args.env_file)
        await app.start()

        if args.command == "connect":
            # Flow state never outlives this process, so finish it here
            print("Open this URL and approve access:\n")
            print(await app.begin_connect())
            redirect_url = input("\nPaste the URL you were redirected to: ").strip()
            if await app.complete_connect(redirect_url):
                print("Connected.")

        elif args.command == "status":
            for key, value in (await app.status()).items():
                print(f"{key}: {value}")

        elif args.command == "ls":
            for entry in await app.list_entries(args.path):
                suffix = "/" if entry.is_folder else ""
                print(f"{entry.path_display}{suffix}")

        elif args.command == "set-vault":
            print(f"Vault set to {await app.set_vault(args.path)}")

        elif args.command == "set-inbox":
            await app.set_inbox(args.path)
            print(f"Inbox set to {args.path}")

        elif args.command == "logout":
            await app.logout()
            print("Logged out.")

        return 0

    except ValidationError as e:
        print(f"{e}: {', '.join(e.errors)}", file=sys.stderr)
        return 2
    except NoteSyncError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    finally:
        await app.stop()


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    return asyncio.run(run(args))


if __name__ == "__main__":
    sys.exit(main())
