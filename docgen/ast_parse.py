from __future__ import annotations

import ast
import os
from typing import Dict, List

from .errors import DocgenIOError, PackageParseError
from .model import PackageDoc

INIT_FILE = "__init__.py"


def _source_files(dir: str) -> List[str]:
	try:
		with os.scandir(dir) as it:
			names = [e.name for e in it if e.name.endswith(".py") and e.is_file()]
	except OSError as err:
		raise DocgenIOError(f"cannot list directory: {err.strerror or err}", dir) from err
	return sorted(names)


def parse_module(path: str) -> ast.Module:
	try:
		# Bytes, so ast honours PEP 263 coding cookies.
		with open(path, "rb") as fh:
			source = fh.read()
	except OSError as err:
		raise DocgenIOError(f"cannot read source: {err.strerror or err}", path) from err

	try:
		return ast.parse(source, filename=path)
	except SyntaxError as err:
		raise PackageParseError(f"line {err.lineno}: {err.msg}", path) from err
	except ValueError as err:
		raise PackageParseError(str(err), path) from err


def parse_dir(dir: str) -> Dict[str, PackageDoc]:
	"""Parse the Python sources directly in dir.

	Every file has to parse, one bad file fails the directory. A directory
	holding an ``__init__.py`` is a package named after the directory and
	documented by that file's docstring.
	"""
	files = _source_files(dir)
	doc = None
	for name in files:
		tree = parse_module(os.path.join(dir, name))
		if name == INIT_FILE:
			doc = ast.get_docstring(tree, clean=True) or ""

	pkgs: Dict[str, PackageDoc] = {}
	if doc is not None:
		name = os.path.basename(os.path.normpath(dir))
		pkgs[name] = PackageDoc(name=name, dir=dir, doc=doc, files=files)
	return pkgs
