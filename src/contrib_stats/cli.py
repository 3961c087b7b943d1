from __future__ import annotations

import argparse
import sys
from pathlib import Path

from .config import find_config, resolve_settings, verify_settings
from .errors import ContribError
from .render import RENDER_FORMATS, render
from .run import Progress, build_report
from .server import serve
from .write import write_reports


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="contributors", description="Analyse contributors of the project.")
    parser.add_argument("root", nargs="?", type=Path, default=Path("."), help="Repository to analyse (default: current directory).")
    parser.add_argument("--config", type=Path, default=None, help="Path to a JSON config (default: <root>/.contributors.json if present).")
    parser.add_argument("--threshold", type=int, default=None, metavar="LINES", help="Ignore those who contributed less than LINES in a language (default: 15).")
    parser.add_argument("--classifier", choices=["linguist", "builtin"], default=None, help="How to bucket files by language.")
    parser.add_argument("--attribution", choices=["blame", "gitpython"], default=None, help="How to attribute lines to authors.")
    parser.add_argument("--revision", type=str, default=None, help="Revision to analyse (default: HEAD).")
    parser.add_argument("--format", choices=list(RENDER_FORMATS), default="text", help="Report format on stdout.")
    parser.add_argument("-o", "--output-dir", type=Path, default=None, help="Write index.html, report.txt and report.json here.")
    parser.add_argument("-f", "--force", action="store_true", help="Overwrite a non-empty output directory.")
    parser.add_argument("--serve", action="store_true", help="Serve the HTML report over HTTP.")
    parser.add_argument("-p", "--port", type=int, default=None, help="Port number (default: 8888).")
    parser.add_argument("--host", type=str, default=None, help="Address to listen on (default: all interfaces).")
    g = parser.add_mutually_exclusive_group()
    g.add_argument("-v", "--verbose", action="store_true", help="Print one line per attributed file.")
    g.add_argument("-q", "--quiet", action="store_true", help="Suppress progress output.")
    return parser


def run(args: argparse.Namespace) -> int:
    root = args.root if args.root.is_absolute() else Path.cwd() / args.root
    config = find_config(root, args.config)
    settings = resolve_settings(
        root,
        config,
        {
            "threshold": args.threshold,
            "classifier": args.classifier,
            "attribution": args.attribution,
            "revision": args.revision,
            "port": args.port,
            "host": args.host,
        },
    )
    verify_settings(settings)
    progress = Progress(verbose=bool(args.verbose), quiet=bool(args.quiet))
    report = build_report(settings, progress=progress)

    if args.output_dir is not None:
        for p in write_reports(args.output_dir, report, settings, force=bool(args.force)):
            progress.say(f"Wrote {p}")
    if args.serve:
        serve(report, settings)
        return 0
    if args.output_dir is None:
        sys.stdout.write(render(report, settings, args.format))
    return 0


def main(argv: list[str] | None = None) -> int:
    if argv is None:
        argv = sys.argv[1:]
    args = _build_parser().parse_args(argv)
    try:
        return run(args)
    except ContribError as e:
        print(f"error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
