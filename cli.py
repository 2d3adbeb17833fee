from __future__ import annotations

import argparse
import json
import logging
import sys
from typing import List, Optional

import uvicorn

from docgen.config import GenerateOptions, ScanOptions
from docgen.errors import DocgenError, ScanErrorGroup
from docgen.fs_scan import collect
from docgen.generate import Generator
from docgen.summarize import overview


def _scan_options(args: argparse.Namespace) -> dict:
	return dict(
		root=args.path,
		modules=not args.no_modules,
		packages=not args.no_packages,
		deep=not args.shallow,
		exclude=args.exclude or ["internal"],
		include_hidden=args.include_hidden,
	)


def cmd_scan(args: argparse.Namespace) -> int:
	opts = ScanOptions(**_scan_options(args))
	result = collect(opts.root, opts.mode, opts.build_filter())
	if args.summary:
		print(overview(result))
	else:
		print(json.dumps(result.model_dump(), indent=2))
	for failure in result.failures:
		print(f"error: {failure.error}", file=sys.stderr)
	return 1 if result.failures else 0


def cmd_generate(args: argparse.Namespace) -> int:
	opts = GenerateOptions(
		template=args.template,
		output=args.output,
		perm=int(args.perm, 8),
		**_scan_options(args),
	)
	gen = Generator(opts.root, opts.build_filter())
	status = 0
	try:
		gen.scan_dir(mode=opts.mode)
	except ScanErrorGroup as group:
		# Partial results are still rendered.
		for _, err in group.failures:
			print(f"error: {err}", file=sys.stderr)
		status = 1
	except DocgenError as err:
		print(f"error: {err}", file=sys.stderr)
		return 1
	try:
		if opts.output:
			gen.generate_file(opts.template, opts.output, opts.perm)
		else:
			gen.generate(opts.template, sys.stdout)
	except DocgenError as err:
		print(f"error: {err}", file=sys.stderr)
		return 1
	return status


def cmd_serve(args: argparse.Namespace) -> int:
	uvicorn.run("api:app", host=args.host, port=args.port, reload=args.reload)
	return 0


def _add_scan_arguments(p: argparse.ArgumentParser) -> None:
	p.add_argument("path", nargs="?", default=".", help="Root directory to scan")
	p.add_argument("--no-modules", action="store_true", help="Skip pyproject.toml detection")
	p.add_argument("--no-packages", action="store_true", help="Skip package extraction")
	p.add_argument("--shallow", action="store_true", help="Do not recurse into subdirectories")
	p.add_argument(
		"--exclude",
		action="append",
		metavar="NAME",
		help='Directory name to skip (repeatable, default "internal")',
	)
	p.add_argument("--include-hidden", action="store_true", help="Scan dot directories too")


def main(argv: Optional[List[str]] = None) -> int:
	parser = argparse.ArgumentParser(prog="docgen")
	parser.add_argument("-v", "--verbose", action="count", default=0)
	sub = parser.add_subparsers(dest="cmd", required=True)

	ps = sub.add_parser("scan", help="Scan a source tree and print modules and packages as JSON")
	_add_scan_arguments(ps)
	ps.add_argument("--summary", action="store_true", help="Print a short text overview instead")
	ps.set_defaults(func=cmd_scan)

	pg = sub.add_parser("generate", help="Render scan results through a Jinja2 template")
	_add_scan_arguments(pg)
	pg.add_argument("-t", "--template", required=True, help="Template path, relative to the root")
	pg.add_argument("-o", "--output", help="Output file, relative to the root (default stdout)")
	pg.add_argument("--perm", default="644", help="Octal mode of a created output file")
	pg.set_defaults(func=cmd_generate)

	pv = sub.add_parser("serve", help="Run FastAPI server")
	pv.add_argument("--host", default="127.0.0.1")
	pv.add_argument("--port", type=int, default=8000)
	pv.add_argument("--reload", action="store_true")
	pv.set_defaults(func=cmd_serve)

	args = parser.parse_args(argv)
	level = logging.WARNING
	if args.verbose == 1:
		level = logging.INFO
	elif args.verbose > 1:
		level = logging.DEBUG
	logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")
	return args.func(args)


if __name__ == "__main__":
	sys.exit(main())
