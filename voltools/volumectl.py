#!/usr/bin/env python3

import argparse
import sys
from typing import List

from voltools.cloud.errors import VolumeError
from voltools.cloud.factory import get_provider
from voltools.config import load_config
from voltools.types import Volume

COLUMNS = ("NAME", "STATUS", "SIZE", "ATTACHED TO", "CREATED AT")


def format_volumes(volumes: List[Volume]) -> str:
    """
    Render volumes as an aligned text table.
    """
    rows = [COLUMNS] + [(v.name, v.status, v.size, v.attached_to, v.created_at) for v in volumes]
    widths = [max(len(row[i]) for row in rows) for i in range(len(COLUMNS))]
    return "\n".join(
        "  ".join(cell.ljust(width) for cell, width in zip(row, widths)).rstrip()
        for row in rows
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="volumectl", description="Manage cloud volumes")
    parser.add_argument("--config", help="Path to a YAML config file")
    parser.add_argument("--provider", help="Override the configured cloud provider")
    sub = parser.add_subparsers(dest="command", required=True)

    create = sub.add_parser("create", help="Create a volume from a local image")
    create.add_argument("name")
    create.add_argument("--size", required=True, help="Size in bytes")
    create.add_argument("--data", default="", help="Directory to seed the volume with")

    sub.add_parser("list", help="List volumes")

    delete = sub.add_parser("delete", help="Delete a volume")
    delete.add_argument("name")

    attach = sub.add_parser("attach", help="Attach a volume to an instance")
    attach.add_argument("instance")
    attach.add_argument("name")
    attach.add_argument("--mount", default="", help="Mount hint passed to the provider")

    detach = sub.add_parser("detach", help="Detach a volume from an instance")
    detach.add_argument("instance")
    detach.add_argument("name")

    return parser


def run(args) -> None:
    config = load_config(args.config, provider=args.provider)
    provider = get_provider(config)
    provider_name = config.cloud_config.provider

    if args.command == "create":
        vol = provider.create_volume(config, args.name, args.data, args.size, provider_name)
        print(f"✅ Volume {vol.name or args.name} created.")
    elif args.command == "list":
        print(format_volumes(provider.get_all_volumes(config)))
    elif args.command == "delete":
        provider.delete_volume(config, args.name)
        print(f"✅ Volume {args.name} deleted.")
    elif args.command == "attach":
        provider.attach_volume(config, args.instance, args.name, args.mount)
        print(f"✅ Volume {args.name} attached to {args.instance}.")
    elif args.command == "detach":
        provider.detach_volume(config, args.instance, args.name)
        print(f"✅ Volume {args.name} detached from {args.instance}.")


def main(argv=None):
    args = build_parser().parse_args(argv)
    try:
        run(args)
    except (VolumeError, ValueError) as e:
        print(f"❌ {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
