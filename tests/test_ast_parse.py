from textwrap import dedent

import pytest

from docgen.ast_parse import parse_dir
from docgen.errors import PackageParseError


def test_parse_package_dir(tmp_path):
	pkg = tmp_path / "foo"
	pkg.mkdir()
	(pkg / "__init__.py").write_text(
		dedent(
			'''
			"""Package foo does X.

			More words.
			"""

			import os
			'''
		)
	)
	(pkg / "util.py").write_text("def f(a, b=2):\n\treturn a + b\n")
	(pkg / "notes.txt").write_text("not python (")

	docs = parse_dir(str(pkg))
	assert list(docs) == ["foo"]
	d = docs["foo"]
	assert d.name == "foo"
	assert d.doc == "Package foo does X.\n\nMore words."
	assert d.files == ["__init__.py", "util.py"]


def test_dir_without_init_has_no_package(tmp_path):
	(tmp_path / "script.py").write_text('"""A script."""\n')
	assert parse_dir(str(tmp_path)) == {}


def test_init_without_docstring(tmp_path):
	(tmp_path / "__init__.py").write_text("")
	docs = parse_dir(str(tmp_path))
	assert docs[tmp_path.name].doc == ""


def test_syntax_error_fails_directory(tmp_path):
	(tmp_path / "__init__.py").write_text('"""Fine."""\n')
	(tmp_path / "broken.py").write_text("def f(:\n")
	with pytest.raises(PackageParseError) as exc:
		parse_dir(str(tmp_path))
	assert exc.value.path == str(tmp_path / "broken.py")
	assert "broken.py" in str(exc.value)


def test_coding_cookie_is_honoured(tmp_path):
	(tmp_path / "__init__.py").write_bytes(b'# -*- coding: latin-1 -*-\n"""Caf\xe9 package."""\n')
	docs = parse_dir(str(tmp_path))
	assert docs[tmp_path.name].doc == "Café package."
