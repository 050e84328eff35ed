"""CLI entrypoints for apidocs commands."""

from __future__ import annotations

import argparse
import dataclasses
import sys
from pathlib import Path

from .config import load_config
from .errors import BuildError
from .logging import configure_logging
from .pipeline import BuildPipeline


def _add_verbose_option(
    parser: argparse.ArgumentParser, *, suppress_default: bool = False
) -> None:
    kwargs: dict[str, object] = {
        "action": "store_true",
        "help": "Increase log verbosity for troubleshooting.",
    }
    kwargs["default"] = argparse.SUPPRESS if suppress_default else False
    parser.add_argument("-v", "--verbose", **kwargs)


def _add_config_argument(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "config",
        nargs="?",
        default=".",
        help="Path to .apidocs.yml or the directory containing it (defaults to current directory).",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="apidocs",
        description="Generate Markdown API reference pages from Hack sources.",
    )
    _add_verbose_option(parser)
    parser.add_argument(
        "--log-file",
        type=Path,
        default=None,
        help="Also write detailed logs to this file.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    build_parser = subparsers.add_parser(
        "build",
        help="Build the API reference unless it is already up to date.",
    )
    _add_verbose_option(build_parser, suppress_default=True)
    _add_config_argument(build_parser)
    build_parser.add_argument(
        "--force",
        action="store_true",
        help="Rebuild even when the stored fingerprint matches.",
    )
    build_parser.add_argument(
        "--skip-parse-errors",
        action="store_true",
        help="Log and skip files that fail to parse instead of aborting.",
    )

    status_parser = subparsers.add_parser(
        "status",
        help="Report whether the API reference is up to date.",
    )
    _add_verbose_option(status_parser, suppress_default=True)
    _add_config_argument(status_parser)

    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for apidocs commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    configure_logging(verbose=bool(args.verbose), log_file=args.log_file)

    try:
        config = load_config(Path(args.config))
        if getattr(args, "skip_parse_errors", False):
            config = dataclasses.replace(config, parse_errors="warn")
        pipeline = BuildPipeline(config)

        if args.command == "build":
            result = pipeline.run(force=bool(args.force))
            if result is None:
                print("API reference already up to date")
            else:
                rel_path = _relativize(config.output.markdown_dir)
                print(f"Wrote {len(result.files)} documents to {rel_path}")
        elif args.command == "status":
            if pipeline.check():
                print("API reference is up to date")
            else:
                parser.exit(1, "API reference is stale; run `apidocs build`\n")
        else:  # pragma: no cover - argparse enforces choices
            parser.exit(1, "Unknown command\n")
    except BuildError as exc:
        parser.exit(1, f"apidocs {args.command} failed: {exc}\nRun with --verbose for more details.\n")


def _relativize(path: Path) -> str:
    try:
        return str(path.relative_to(Path.cwd()))
    except ValueError:
        return str(path)


if __name__ == "__main__":
    main(sys.argv[1:])
