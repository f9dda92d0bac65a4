"""Command-line interface for packing and unpacking preset bundles.

Progress and errors go to stderr; command results (listings, JSON) go to
stdout so they can be piped.
"""

import argparse
import json
import logging
import sys
from pathlib import Path

from .config import Settings, settings_path
from .core.exceptions import KsPackerError
from .core.safety import sanitize_filename
from .core.types import BUNDLE_SUFFIX, AssetAction
from .core.version import format_version, get_installation_version
from .layout import DataLayout, default_data_root
from .packer import BundleInfo, Packer
from .unpacker import open_bundle

# Longest preset name accepted when packing
MAX_NAME_LENGTH = 64


def _data_root(args: argparse.Namespace) -> Path:
    return Path(args.data_dir) if args.data_dir else default_data_root()


def _layout(args: argparse.Namespace) -> DataLayout:
    """Build the data layout from arguments, falling back to saved settings."""
    data_root = _data_root(args)
    install = args.install or Settings.load(settings_path(data_root)).keysight_path
    if not install:
        raise KsPackerError(
            "No installation path given. Pass --install or run 'kspacker set-install PATH'."
        )
    return DataLayout.from_paths(install, data_root)


def cmd_version(args: argparse.Namespace) -> int:
    layout = _layout(args)
    version = get_installation_version(layout.install_root)
    print(format_version(version))
    return 0


def cmd_set_install(args: argparse.Namespace) -> int:
    path = Path(args.path).resolve()
    version = get_installation_version(path)
    data_root = _data_root(args)
    Settings(keysight_path=str(path)).store(settings_path(data_root))
    print(f"Installation set to {path} (version {format_version(version)})", file=sys.stderr)
    return 0


def cmd_list(args: argparse.Namespace) -> int:
    layout = _layout(args)
    for name in layout.list_presets():
        print(name)
    return 0


def cmd_scan(args: argparse.Namespace) -> int:
    layout = _layout(args)
    version = get_installation_version(layout.install_root)
    packable = Packer(layout, version, args.preset).collect(allow_builtin=args.allow_builtin)

    for asset in sorted(packable.assets + packable.skipped, key=lambda a: a.reference):
        action = asset.action.value
        if asset.action is AssetAction.PACK and asset.random:
            action += " (random)"
        location = str(asset.path) if asset.path else "-"
        print(f"{asset.category.value:<13} {asset.name:<32} {action:<14} {location}")

    print(
        f"{len(packable.assets)} assets to pack, {len(packable.skipped)} skipped",
        file=sys.stderr,
    )
    return 0


def cmd_pack(args: argparse.Namespace) -> int:
    name = args.name or args.preset
    if len(name) > MAX_NAME_LENGTH:
        print(f"Error: Name is longer than {MAX_NAME_LENGTH} characters", file=sys.stderr)
        return 1

    layout = _layout(args)
    version = get_installation_version(layout.install_root)
    print(f"Installation version: {format_version(version)}", file=sys.stderr)

    packable = Packer(layout, version, args.preset).collect(allow_builtin=args.allow_builtin)
    output = Path(args.output) if args.output else Path(sanitize_filename(name) + BUNDLE_SUFFIX)

    metadata = packable.pack(
        output,
        BundleInfo(name=name, author=args.author, description=args.description),
    )
    blobs = len({entry["hash"] for entry in metadata["assets"]})
    print(
        f"Packed '{metadata['name']}' with {len(metadata['assets'])} assets "
        f"({blobs} unique) to {output}",
        file=sys.stderr,
    )
    return 0


def cmd_inspect(args: argparse.Namespace) -> int:
    layout = DataLayout.from_paths(args.install or ".", _data_root(args))
    bundle = open_bundle(args.file, layout)
    meta = bundle.metadata
    conflicts = bundle.conflicts()

    if args.json:
        json.dump(
            {
                "metadata": meta,
                "conflicts": {
                    "preset_exists": conflicts.preset_exists,
                    "assets": conflicts.assets,
                },
            },
            sys.stdout,
            indent=2,
        )
        print()
        return 0

    print(f"Name:             {meta['name']}")
    print(f"Author:           {meta['author']}")
    print(f"Description:      {meta['description']}")
    print(f"Packed on:        {bundle.packed_at:%Y-%m-%d %H:%M:%S}")
    print(f"Preset version:   {format_version(meta['preset_version'])}")
    print(f"Keysight version: {format_version(meta['target_version'])}")
    print(f"Assets:           {len(meta['assets'])}")

    if conflicts.preset_exists:
        print("Warning: A preset already exists under this name.")
    for entry in conflicts.assets:
        print(
            f"Conflict: {entry['name']}.{entry['extension']} "
            f"({entry['texture_type']}, {entry['hash'][:16]}...)"
        )
    return 0


def cmd_unpack(args: argparse.Namespace) -> int:
    layout = DataLayout.from_paths(args.install or ".", _data_root(args))
    bundle = open_bundle(args.file, layout)
    conflicts = bundle.conflicts()

    if conflicts and not args.force:
        if conflicts.preset_exists:
            print(
                f"Error: A preset named '{bundle.metadata['name']}' already exists",
                file=sys.stderr,
            )
        for entry in conflicts.assets:
            print(
                f"Error: Asset {entry['name']}.{entry['extension']} "
                f"({entry['texture_type']}) already exists",
                file=sys.stderr,
            )
        print("Re-run with --force to overwrite.", file=sys.stderr)
        return 1

    bundle.unpack()
    print(f"Successfully imported preset {bundle.metadata['name']}", file=sys.stderr)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="kspacker",
        description="Pack presets with their custom textures into portable bundles",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Remember the installation path
  kspacker set-install "C:/Program Files/Steam/steamapps/common/Keysight"

  # Pack a preset
  kspacker pack "Neon" --author me --description "Blue glow" -o Neon.kspreset

  # Check a bundle for conflicts, then import it
  kspacker inspect Neon.kspreset
  kspacker unpack Neon.kspreset --force
        """,
    )
    parser.add_argument("--install", help="Installation root (defaults to the saved path)")
    parser.add_argument("--data-dir", help="Local data directory (defaults to the platform one)")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")

    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("version", help="Show the installation version")
    p.set_defaults(func=cmd_version)

    p = sub.add_parser("set-install", help="Validate and remember the installation path")
    p.add_argument("path", help="Installation root")
    p.set_defaults(func=cmd_set_install)

    p = sub.add_parser("list", help="List saved presets")
    p.set_defaults(func=cmd_list)

    p = sub.add_parser("scan", help="Show the textures a preset uses and how each is handled")
    p.add_argument("preset", help="Preset name")
    p.add_argument("--allow-builtin", action="store_true", help="Allow built-in presets")
    p.set_defaults(func=cmd_scan)

    p = sub.add_parser("pack", help="Pack a preset into a bundle")
    p.add_argument("preset", help="Preset name")
    p.add_argument("-o", "--output", help=f"Output file (default: <name>{BUNDLE_SUFFIX})")
    p.add_argument("--name", help="Name the preset is imported under")
    p.add_argument("--author", default="", help="Author name")
    p.add_argument("--description", default="", help="Description")
    p.add_argument("--allow-builtin", action="store_true", help="Allow built-in presets")
    p.set_defaults(func=cmd_pack)

    p = sub.add_parser("inspect", help="Show bundle metadata and conflicts")
    p.add_argument("file", help="Bundle file")
    p.add_argument("--json", action="store_true", help="Print as JSON")
    p.set_defaults(func=cmd_inspect)

    p = sub.add_parser("unpack", help="Import a bundle")
    p.add_argument("file", help="Bundle file")
    p.add_argument("--force", action="store_true", help="Overwrite conflicting files")
    p.set_defaults(func=cmd_unpack)

    return parser


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the kspacker command."""
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    try:
        return args.func(args)
    except KsPackerError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
