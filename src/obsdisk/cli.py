"""
obsdisk command line

    obsdisk create NAME --access-key AK --secret-key SK --bucket URL
    obsdisk mount NAME
    obsdisk unmount NAME
    obsdisk list
    obsdisk watch
    obsdisk serve
"""

import argparse
import getpass
import logging
import os
import sys
from typing import List, Optional

import yaml

from obsdisk.config import ObsDiskConfig
from obsdisk.errors import ObsDiskError
from obsdisk.types import VolumeRecord
from obsdisk.utils.logger import configure_logging

logger = logging.getLogger(__name__)


def _is_root() -> bool:
    geteuid = getattr(os, "geteuid", None)
    return geteuid is not None and geteuid() == 0


def _format_record(record: VolumeRecord) -> str:
    return f"{record.name}\t{record.created_at.isoformat()}\t{record.provider_type}"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="obsdisk",
        description="Manage object-storage-backed disks"
    )
    parser.add_argument(
        "--config",
        default=None,
        help="YAML or JSON config file; OBSDISK_* environment variables take precedence"
    )
    parser.add_argument(
        "--log-level",
        default="warning",
        choices=["debug", "info", "warning", "error"],
        help="Logging level"
    )
    parser.add_argument(
        "--log-file",
        default=None,
        help="Also write log lines to this file"
    )
    sub = parser.add_subparsers(dest="command", required=True)

    create = sub.add_parser("create", help="Format and register a new volume")
    create.add_argument("name")
    create.add_argument("--access-key", required=True)
    create.add_argument(
        "--secret-key",
        default=None,
        help="Access key secret (prompted if omitted)"
    )
    create.add_argument("--bucket", required=True)

    mount = sub.add_parser("mount", help="Mount a volume")
    mount.add_argument("name")

    unmount = sub.add_parser("unmount", help="Unmount a volume")
    unmount.add_argument("name")

    sub.add_parser("list", help="List registered volumes")
    sub.add_parser("watch", help="Print volumes as they are registered")

    serve = sub.add_parser("serve", help="Run the REST API server")
    serve.add_argument("--host", default=None)
    serve.add_argument("--port", type=int, default=None)

    return parser


def _watch(manager) -> None:
    def on_records(records: List[VolumeRecord]) -> None:
        for record in records:
            print(_format_record(record), flush=True)

    def on_error(exc: Exception) -> None:
        print(f"error: {exc}", file=sys.stderr, flush=True)

    loop = manager.refresh_loop(on_records, on_error=on_error)
    loop.start()
    try:
        while loop.is_running:
            loop.thread.join(timeout=0.5)
    except KeyboardInterrupt:
        pass
    finally:
        loop.stop()


def _serve(config: ObsDiskConfig, args: argparse.Namespace) -> None:
    import uvicorn
    from obsdisk.api.rest import create_app

    uvicorn.run(
        create_app(config),
        host=args.host or config.api_host,
        port=args.port or config.api_port,
        log_level=args.log_level,
    )


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(
        level=getattr(logging, args.log_level.upper()),
        file_path=args.log_file,
    )

    try:
        config = ObsDiskConfig.load(args.config)
    except (OSError, ValueError, yaml.YAMLError) as e:
        print(f"error: cannot load config: {e}", file=sys.stderr)
        return 2

    if _is_root() and not config.allow_root:
        print("error: don't run as root", file=sys.stderr)
        return 2

    if args.command == "serve":
        _serve(config, args)
        return 0

    from obsdisk.manager import ObsDiskManager

    try:
        manager = ObsDiskManager(config)
    except ObsDiskError as e:
        print(f"error: {e.message}", file=sys.stderr)
        return 1

    try:
        if args.command == "create":
            secret_key = args.secret_key
            if secret_key is None:
                secret_key = getpass.getpass("AccessKey Secret: ")
            record = manager.create_volume(args.name, args.access_key, secret_key, args.bucket)
            print(_format_record(record))
        elif args.command == "mount":
            print(manager.mount(args.name))
        elif args.command == "unmount":
            print(manager.unmount(args.name))
        elif args.command == "list":
            for record in manager.list_volumes():
                print(_format_record(record))
        elif args.command == "watch":
            _watch(manager)
    except ObsDiskError as e:
        print(f"error: {e.message}", file=sys.stderr)
        return 1
    finally:
        manager.close()

    return 0


if __name__ == "__main__":
    sys.exit(main())
