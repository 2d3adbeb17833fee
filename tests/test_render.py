import io
from textwrap import dedent

from docgen import render
from docgen.render import blocks, heading_id, to_html


class Recorder:
	def __init__(self):
		self.fragments = []

	def write(self, fragment):
		self.fragments.append(fragment)
		return len(fragment)


DOC = dedent(
	"""\
	Package foo does X & Y.
	It is small.

	Usage
	-----

	Call it like this::

	    foo.run(1 < 2)

	>>> foo.run(1)
	2
	"""
)


def test_blocks():
	assert blocks(DOC) == [
		("para", ["Package foo does X & Y.", "It is small."]),
		("heading", ["Usage"]),
		("para", ["Call it like this::"]),
		("pre", ["foo.run(1 < 2)"]),
		("pre", [">>> foo.run(1)", "2"]),
	]


def test_fragments():
	rec = Recorder()
	to_html(rec, DOC)
	assert rec.fragments == [
		render.PARA_OPEN,
		"Package foo does X &amp; Y.\n",
		"It is small.",
		render.PARA_CLOSE,
		render.SECTION_OPEN,
		"hdr-Usage",
		render.ID_CLOSE,
		"Usage",
		render.HEADING_CLOSE,
		render.PARA_OPEN,
		"Call it like this::",
		render.PARA_CLOSE,
		render.PRE_OPEN,
		"foo.run(1 &lt; 2)",
		render.PRE_CLOSE,
		render.PRE_OPEN,
		"&gt;&gt;&gt; foo.run(1)\n",
		"2",
		render.PRE_CLOSE,
	]


def test_render_to_text_stream():
	out = io.StringIO()
	to_html(out, "Title\n=====\n\nBody.")
	assert out.getvalue() == '<h3 id="hdr-Title">Title</h3>\n<p>\nBody.</p>\n'


def test_preformatted_keeps_inner_blank_lines():
	doc = "Example:\n\n    a = 1\n\n    b = 2\n\nDone."
	assert blocks(doc)[1] == ("pre", ["a = 1", "", "b = 2"])


def test_underline_shorter_than_title_is_not_a_heading():
	assert blocks("Long title\n---") == [("para", ["Long title", "---"])]


def test_heading_id():
	assert heading_id("See Also") == "hdr-See_Also"
	assert heading_id("Übersicht & more") == "hdr-Ubersicht_more"


def test_empty_docstring_writes_nothing():
	rec = Recorder()
	to_html(rec, "")
	assert rec.fragments == []
