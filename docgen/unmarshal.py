"""Rebuild a package's section/block tree from a stream of markup fragments.

The renderer in ``docgen.render`` pushes fragments one at a time; the
unmarshaler never sees the full markup. Dispatch is a transition table keyed
on ``(State, FragmentClass)``. The id and heading closing markers only act as
controls in the states that expect them and are ordinary text elsewhere.
"""

from __future__ import annotations

import enum
import html
import logging
from typing import Callable, Dict, List, Optional, Tuple

from . import render
from .model import Package, Paragraph, Preformatted, Section

logger = logging.getLogger(__name__)


class State(enum.Enum):
	AWAITING_SECTION_ID = "awaiting-section-id"
	SECTION_ID = "section-id"
	HEADING = "heading"
	PARAGRAPH = "paragraph"
	PREFORMATTED = "preformatted"


class FragmentClass(enum.Enum):
	SECTION_OPEN = "section-open"
	ID_CLOSE = "id-close"
	HEADING_CLOSE = "heading-close"
	PARA_OPEN = "para-open"
	PARA_CLOSE = "para-close"
	PRE_OPEN = "pre-open"
	PRE_CLOSE = "pre-close"
	TEXT = "text"


_CONTROLS: Dict[str, FragmentClass] = {
	render.SECTION_OPEN: FragmentClass.SECTION_OPEN,
	render.PARA_OPEN: FragmentClass.PARA_OPEN,
	render.PARA_CLOSE: FragmentClass.PARA_CLOSE,
	render.PRE_OPEN: FragmentClass.PRE_OPEN,
	render.PRE_CLOSE: FragmentClass.PRE_CLOSE,
}

_STATE_MARKERS: Dict[str, FragmentClass] = {
	render.ID_CLOSE: FragmentClass.ID_CLOSE,
	render.HEADING_CLOSE: FragmentClass.HEADING_CLOSE,
}


def classify(fragment: str) -> FragmentClass:
	cls = _CONTROLS.get(fragment)
	if cls is not None:
		return cls
	return _STATE_MARKERS.get(fragment, FragmentClass.TEXT)


IDLE = State.AWAITING_SECTION_ID

# (state, fragment class) -> (next state, action name). Pairs missing from
# the table are handled as (state, TEXT).
TRANSITIONS: Dict[Tuple[State, FragmentClass], Tuple[State, Optional[str]]] = {}

for _state in State:
	TRANSITIONS[(_state, FragmentClass.SECTION_OPEN)] = (State.SECTION_ID, "clear")
	TRANSITIONS[(_state, FragmentClass.PARA_OPEN)] = (State.PARAGRAPH, "clear")
	TRANSITIONS[(_state, FragmentClass.PRE_OPEN)] = (State.PREFORMATTED, "clear")
	TRANSITIONS[(_state, FragmentClass.PARA_CLOSE)] = (IDLE, "emit_paragraph")
	TRANSITIONS[(_state, FragmentClass.PRE_CLOSE)] = (IDLE, "emit_preformatted")

TRANSITIONS.update({
	(IDLE, FragmentClass.TEXT): (IDLE, None),
	(State.SECTION_ID, FragmentClass.TEXT): (State.SECTION_ID, "accumulate"),
	(State.SECTION_ID, FragmentClass.ID_CLOSE): (State.HEADING, "start_section"),
	(State.HEADING, FragmentClass.TEXT): (State.HEADING, "accumulate"),
	(State.HEADING, FragmentClass.HEADING_CLOSE): (IDLE, "set_heading"),
	(State.PARAGRAPH, FragmentClass.TEXT): (State.PARAGRAPH, "accumulate"),
	(State.PREFORMATTED, FragmentClass.TEXT): (State.PREFORMATTED, "accumulate"),
})


def transition(state: State, cls: FragmentClass) -> Tuple[State, Optional[str]]:
	try:
		return TRANSITIONS[(state, cls)]
	except KeyError:
		return TRANSITIONS[(state, FragmentClass.TEXT)]


class Unmarshaler:
	"""Push-based sink building ``Package.sections``.

	Call ``reset`` before each package, ``feed`` (or ``write``) per fragment
	and ``close`` once the renderer is done. Not safe to share between
	concurrent streams.
	"""

	def __init__(self) -> None:
		self.pkg: Optional[Package] = None
		self.cur = Section()
		self.state = IDLE
		self._line: List[str] = []
		self._actions: Dict[str, Callable[[str], None]] = {
			"clear": self._clear,
			"accumulate": self._accumulate,
			"start_section": self._start_section,
			"set_heading": self._set_heading,
			"emit_paragraph": self._emit_paragraph,
			"emit_preformatted": self._emit_preformatted,
		}

	def reset(self, pkg: Package) -> "Unmarshaler":
		self.pkg = pkg
		self.cur = Section()
		self.state = IDLE
		self._line = []
		return self

	def feed(self, fragment: str) -> None:
		if self.pkg is None:
			raise RuntimeError("unmarshaler is not bound to a package, call reset first")
		self.state, action = transition(self.state, classify(fragment))
		if action is not None:
			self._actions[action](fragment)

	def write(self, fragment: str) -> int:
		self.feed(fragment)
		return len(fragment)

	def close(self) -> Package:
		"""Finish the stream and return the bound package.

		A section still open mid-block is dropped.
		"""
		if self.pkg is None:
			raise RuntimeError("unmarshaler is not bound to a package, call reset first")
		pkg = self.pkg
		if self.state is IDLE and not self._line:
			self._finalize()
		else:
			logger.debug(
				"dropping truncated section %r of package %s (state %s)",
				self.cur.id, pkg.name, self.state.value,
			)
		self.pkg = None
		self.cur = Section()
		self.state = IDLE
		self._line = []
		return pkg

	def _buffer(self) -> str:
		text = "".join(self._line)
		self._line = []
		return text

	def _finalize(self) -> None:
		cur = self.cur
		# The initial placeholder only counts when something was written to it.
		if cur.id or cur.heading or cur.blocks:
			self.pkg.sections.append(cur)

	def _clear(self, fragment: str) -> None:
		self._line = []

	def _accumulate(self, fragment: str) -> None:
		self._line.append(html.unescape(fragment))

	def _start_section(self, fragment: str) -> None:
		self._finalize()
		self.cur = Section(id=self._buffer())

	def _set_heading(self, fragment: str) -> None:
		self.cur.heading = self._buffer()

	def _emit_paragraph(self, fragment: str) -> None:
		self.cur.blocks.append(Paragraph(text=self._buffer()))

	def _emit_preformatted(self, fragment: str) -> None:
		self.cur.blocks.append(Preformatted(text=self._buffer()))
