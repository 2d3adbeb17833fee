"""Render docstrings as a linear stream of HTML-like fragments.

Every marker of the vocabulary below is written as its own fragment, text is
HTML-escaped and written one line per fragment. Consumers such as
``docgen.unmarshal.Unmarshaler`` rely on exact matches of the markers.
"""

from __future__ import annotations

import html
import re
import textwrap
import unicodedata
from typing import List, Protocol, Tuple

SECTION_OPEN = '<h3 id="'
ID_CLOSE = '">'
HEADING_CLOSE = "</h3>\n"
PARA_OPEN = "<p>\n"
PARA_CLOSE = "</p>\n"
PRE_OPEN = "<pre>"
PRE_CLOSE = "</pre>\n"

_UNDERLINE = re.compile(r"^([=\-~])\1*$")


class FragmentSink(Protocol):
	def write(self, fragment: str) -> int: ...


def heading_id(title: str) -> str:
	text = unicodedata.normalize("NFKD", title)
	text = text.encode("ascii", "ignore").decode("ascii")
	text = re.sub(r"[^\w\s-]", "", text).strip()
	text = re.sub(r"[\s-]+", "_", text)
	return "hdr-" + text


def _is_indented(line: str) -> bool:
	return line[:1] in (" ", "\t")


def _is_heading(lines: List[str], i: int) -> bool:
	title = lines[i].strip()
	if not title or _is_indented(lines[i]) or i + 1 >= len(lines):
		return False
	if i > 0 and lines[i - 1].strip():
		return False
	under = lines[i + 1].strip()
	return bool(_UNDERLINE.match(under)) and len(under) >= len(title)


def _trim_blank(lines: List[str]) -> List[str]:
	while lines and not lines[-1].strip():
		lines.pop()
	return lines


def blocks(text: str) -> List[Tuple[str, List[str]]]:
	"""Split a docstring into ``(kind, lines)`` pairs.

	``kind`` is one of ``"heading"``, ``"para"`` or ``"pre"``.
	"""
	lines = text.expandtabs(4).splitlines()
	out: List[Tuple[str, List[str]]] = []
	i = 0
	while i < len(lines):
		line = lines[i]
		if not line.strip():
			i += 1
		elif _is_heading(lines, i):
			out.append(("heading", [line.strip()]))
			i += 2
		elif _is_indented(line):
			run: List[str] = []
			while i < len(lines) and (_is_indented(lines[i]) or not lines[i].strip()):
				run.append(lines[i])
				i += 1
			out.append(("pre", textwrap.dedent("\n".join(_trim_blank(run))).splitlines()))
		elif line.startswith(">>>"):
			run = []
			while i < len(lines) and lines[i].strip():
				run.append(lines[i])
				i += 1
			out.append(("pre", run))
		else:
			run = []
			while (
				i < len(lines)
				and lines[i].strip()
				and not _is_indented(lines[i])
				and not _is_heading(lines, i)
			):
				run.append(lines[i].strip())
				i += 1
			out.append(("para", run))
	return out


def _write_lines(sink: FragmentSink, lines: List[str]) -> None:
	last = len(lines) - 1
	for n, line in enumerate(lines):
		sink.write(html.escape(line, quote=False) + ("\n" if n < last else ""))


def to_html(sink: FragmentSink, text: str) -> None:
	for kind, lines in blocks(text):
		if kind == "heading":
			sink.write(SECTION_OPEN)
			sink.write(heading_id(lines[0]))
			sink.write(ID_CLOSE)
			sink.write(html.escape(lines[0], quote=False))
			sink.write(HEADING_CLOSE)
		elif kind == "pre":
			sink.write(PRE_OPEN)
			_write_lines(sink, lines)
			sink.write(PRE_CLOSE)
		else:
			sink.write(PARA_OPEN)
			_write_lines(sink, lines)
			sink.write(PARA_CLOSE)
