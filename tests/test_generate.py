import io
import os
import stat
from textwrap import dedent

import pytest

from docgen.errors import DocgenIOError, TemplateRenderError
from docgen.fs_scan import ScanMode, ScanState
from docgen.generate import Generator

TEMPLATE = dedent(
	"""\
	{% for mod in modules %}
	module {{ mod.name }} {{ mod.version }}
	{% endfor %}
	{% for pkg in packages %}
	# {{ pkg.import_path }}: {{ pkg.synopsis }}
	{% for section in pkg.sections %}
	{% if section.heading %}## {{ section.heading }}
	{% endif %}
	{% for block in section.blocks %}
	{{ block.kind }}: {{ block }}
	{% endfor %}
	{% endfor %}
	{% endfor %}
	"""
)


@pytest.fixture
def project(tmp_path):
	root = tmp_path / "proj"
	pkg = root / "foo"
	pkg.mkdir(parents=True)
	(root / "pyproject.toml").write_text('[project]\nname = "proj"\nversion = "1.2"\n')
	(pkg / "__init__.py").write_text(
		'"""Foo does X & Z things. Then more.\n\nUsage\n-----\n\n    foo()\n"""\n'
	)
	(root / "docs.md.j2").write_text(TEMPLATE)
	return root


def test_generate(project):
	out = io.StringIO()
	gen = Generator(str(project))
	gen.generate("docs.md.j2", out)
	assert out.getvalue() == dedent(
		"""\
		module proj 1.2
		# proj/foo: Foo does X & Z things.
		paragraph: Foo does X & Z things. Then more.
		## Usage
		preformatted: foo()
		"""
	)
	assert gen.scanner.state is ScanState.SCANNED


def test_generate_scans_once(project):
	gen = Generator(str(project))
	gen.render("docs.md.j2")
	gen.render("docs.md.j2")
	assert len(gen.packages) == 1
	assert len(gen.modules) == 1


def test_explicit_scan_is_not_repeated(project):
	gen = Generator(str(project)).scan_dir("foo", ScanMode.PACKAGES)
	text = gen.render("docs.md.j2")
	assert "module proj" not in text
	assert [p.import_path for p in gen.packages] == ["foo"]


def test_generate_file(project):
	Generator(str(project)).generate_file("docs.md.j2", "out.md", 0o600)
	out = project / "out.md"
	assert out.read_text().startswith("module proj 1.2\n")
	assert stat.S_IMODE(os.stat(out).st_mode) & 0o077 == 0


def test_generate_file_truncates(project):
	(project / "out.md").write_text("x" * 10000)
	Generator(str(project)).generate_file("docs.md.j2", "out.md")
	assert "x" not in (project / "out.md").read_text()


def test_output_open_failure(project):
	with pytest.raises(DocgenIOError):
		Generator(str(project)).generate_file("docs.md.j2", "missing/dir/out.md")


def test_missing_template(project):
	with pytest.raises(TemplateRenderError):
		Generator(str(project)).render("nope.j2")


def test_undefined_variable_fails(project):
	(project / "bad.j2").write_text("{{ nothing.here }}")
	with pytest.raises(TemplateRenderError):
		Generator(str(project)).render("bad.j2")


def test_template_outside_root(project, tmp_path):
	tmpl = tmp_path / "outside.j2"
	tmpl.write_text("{{ packages | length }} packages in {{ root }}")
	gen = Generator(str(project))
	assert gen.render(str(tmpl)) == f"1 packages in {project}"


def test_paths(project, monkeypatch):
	real = os.path.realpath(project)
	monkeypatch.chdir(project.parent)
	gen = Generator("proj")
	assert gen.root == real
	assert gen.abs_path("") == real
	assert gen.abs_path("a/b") == os.path.join(real, "a/b")
	assert gen.abs_path("/x/../y") == "/y"
	monkeypatch.chdir(project)
	assert Generator().root == real
	assert Generator(".").root == real


def test_failed_render_keeps_existing_output(project):
	(project / "out.md").write_text("keep me")
	(project / "bad.j2").write_text("{{ nothing.here }}")
	with pytest.raises(TemplateRenderError):
		Generator(str(project)).generate_file("bad.j2", "out.md")
	assert (project / "out.md").read_text() == "keep me"
