"""CLI for docweave - merge documentation from many repositories into one site."""

import argparse
import json
import logging
import platform
import sys
from pathlib import Path
from typing import Any

from . import __version__
from .core.document import Document
from .core.utils import heading_anchor_slug
from .diagnostics import Diagnostics, WarningLevel
from .report import ambiguous_links_report, external_links_report, orphans_report
from .runtime import ProcessResult, Runtime, assemble, build_runtime, process


def _version_text() -> str:
    return (
        f"docweave {__version__} "
        f"(python {platform.python_version()}, platform {sys.platform}-{platform.machine()})"
    )


def _print_reports(args: argparse.Namespace, result: ProcessResult) -> None:
    database = result.database
    sections: dict[str, Any] = {}
    if args.show_external_links:
        sections["external_links"] = external_links_report(database)
    if args.show_orphans:
        sections["orphans"] = orphans_report(database)
    if args.show_ambiguous:
        sections["ambiguous_links"] = ambiguous_links_report(database)
    if not sections:
        return

    if args.json:
        print(json.dumps(sections, indent=2))
        return

    if "external_links" in sections:
        print("External links:")
        for repo_id, urls in sections["external_links"].items():
            print(f"  {repo_id}:")
            for url in urls:
                print(f"    {url}")
    if "orphans" in sections:
        print("Unreferenced items:")
        for repo_id, paths in sections["orphans"].items():
            print(f"  {repo_id}:")
            for path in paths:
                print(f"    {path}")
    if "ambiguous_links" in sections:
        print("Ambiguous links:")
        for entry in sections["ambiguous_links"]:
            print(f"  {entry}")


def _finish(args: argparse.Namespace, rt: Runtime, result: ProcessResult) -> int:
    _print_reports(args, result)
    diag = rt.diagnostics
    if not args.quiet:
        print(
            f"Processed {len(result.database.all_documents())} documents, "
            f"saved {result.saved}, {diag.warning_count} warning(s)",
            file=sys.stderr,
        )
    diag.check_strict()
    return 0


def cmd_build(args: argparse.Namespace, rt: Runtime) -> int:
    """Assemble the merged tree from checkouts, then process it."""
    origins = assemble(rt)
    return _finish(args, rt, process(rt, origins))


def cmd_process(args: argparse.Namespace, rt: Runtime) -> int:
    """Process an already assembled tree in place."""
    return _finish(args, rt, process(rt))


def cmd_slug(args: argparse.Namespace, rt: Any) -> int:
    """Print heading anchors for the given titles."""
    for title in args.title:
        print(heading_anchor_slug(title))
    return 0


def cmd_inspect(args: argparse.Namespace, rt: Any) -> int:
    """Dump headings, links and metadata of one markdown file."""
    path: Path = args.file
    if not path.exists():
        print(f"File {path} not found", file=sys.stderr)
        return 1
    diagnostics = Diagnostics(parser_warnings=WarningLevel.from_name(args.parser_warnings))
    doc = Document.from_text(path.name, path.read_text(encoding="utf-8"), diagnostics=diagnostics)

    headings = [
        {
            "line": doc.line_of(h) + 1,  # type: ignore[operator]
            "level": h.level,
            "title": h.title,
            "anchor": heading_anchor_slug(h.title),
        }
        for h in doc.headings
    ]
    links = [
        {
            "line": doc.line_of(link) + 1,  # type: ignore[operator]
            "title": link.title,
            "path": link.path,
            "image": link.is_image,
        }
        for link in doc.links
    ]
    metadata = []
    for node in doc.metadata:
        parent = doc.parent_metadata(node)
        metadata.append({
            "name": node.name,
            "parameters": node.parameters,
            "begin": doc.line_number(node.begin_line) + 1,  # type: ignore[operator]
            "end": doc.line_number(node.end_line) + 1,  # type: ignore[operator]
            "parent": parent.name if parent else None,
        })

    if args.json:
        print(json.dumps({"headings": headings, "links": links, "metadata": metadata}, indent=2))
        return 0

    for h in headings:
        print(f"{h['line']}: {'#' * h['level']} {h['title']}  (#{h['anchor']})")
    for link in links:
        prefix = "!" if link["image"] else ""
        print(f"{link['line']}: {prefix}[{link['title']}]({link['path']})")
    for m in metadata:
        content = " ".join([m["name"], *m["parameters"]])
        span = f"{m['begin']}-{m['end']}" if m["begin"] != m["end"] else f"{m['begin']}"
        parent = f" in {m['parent']}" if m["parent"] else ""
        print(f"{span}: <!-- {content} -->{parent}")
    return 0


def _configure_logging(args: argparse.Namespace) -> None:
    level = logging.DEBUG if args.verbose else logging.INFO
    logging.basicConfig(level=level, format="%(levelname)s: %(message)s", stream=sys.stderr)


def _add_report_flags(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--output", type=Path, default=None,
        help="Merged documentation directory (overrides config)",
    )
    parser.add_argument(
        "--show-external-links", action="store_true",
        help="List links pointing outside of the configured repositories",
    )
    parser.add_argument(
        "--show-orphans", action="store_true",
        help="List files and documents nothing links to",
    )
    parser.add_argument(
        "--show-ambiguous", action="store_true",
        help="List links to anchors shared by several headings",
    )


def main() -> None:
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        prog="docweave", description="Merge markdown documentation from multiple repositories"
    )
    parser.add_argument("--version", action="version", version=_version_text())
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to config file (default: search cwd/docweave.toml)",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Print debug messages"
    )
    parser.add_argument(
        "-q", "--quiet", action="store_true", help="Minimize output"
    )
    parser.add_argument(
        "--json", action="store_true", help="Machine-readable output"
    )
    parser.add_argument(
        "--parser-warnings",
        choices=[level.name.lower() for level in WarningLevel],
        default="serious",
        help="Markdown parser warnings to report (default: serious)",
    )
    parser.add_argument(
        "--fail-on-warning",
        action="store_true",
        help="Exit with an error if any warning was reported",
    )

    subparsers = parser.add_subparsers(dest="cmd", required=True)

    # build command
    parser_build = subparsers.add_parser(
        "build", help="Assemble documentation from repository checkouts and process it"
    )
    parser_build.add_argument(
        "--repos", type=Path, default=None,
        help="Directory with repository checkouts (overrides config)",
    )
    _add_report_flags(parser_build)

    # process command
    parser_process = subparsers.add_parser(
        "process", help="Process an already assembled documentation tree in place"
    )
    _add_report_flags(parser_process)

    # slug command
    parser_slug = subparsers.add_parser("slug", help="Print heading anchors")
    parser_slug.add_argument("title", nargs="+", help="Heading title")

    # inspect command
    parser_inspect = subparsers.add_parser(
        "inspect", help="Show headings, links and metadata of a markdown file"
    )
    parser_inspect.add_argument("file", type=Path, help="Markdown file")

    args = parser.parse_args()
    _configure_logging(args)

    handlers = {
        "build": cmd_build,
        "process": cmd_process,
        "slug": cmd_slug,
        "inspect": cmd_inspect,
    }
    handler = handlers.get(args.cmd)
    if handler is None:
        print(f"Unknown command: {args.cmd}", file=sys.stderr)
        sys.exit(1)

    diagnostics = Diagnostics(
        parser_warnings=WarningLevel.from_name(args.parser_warnings),
        strict=args.fail_on_warning,
    )
    try:
        # -q silences everything below errors for the whole command
        with diagnostics.verbosity(logging.ERROR if args.quiet else logging.NOTSET):
            rt = None
            if args.cmd in ("build", "process"):
                rt = build_runtime(
                    config_path=args.config,
                    repositories_dir=getattr(args, "repos", None),
                    output_dir=args.output,
                    diagnostics=diagnostics,
                )
            exit_code = handler(args, rt)
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
