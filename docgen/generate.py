from __future__ import annotations

import logging
import os
from typing import Dict, List, Optional, TextIO

import jinja2

from .errors import DocgenIOError, TemplateRenderError
from .fs_scan import ScanFilter, ScanMode, Scanner, ScanState, default_filter
from .model import Module, Package

logger = logging.getLogger(__name__)


def is_empty_path(p: Optional[str]) -> bool:
	return not p or p in (".", "./")


class Generator:
	"""Scans a root directory and renders what it found through a Jinja2 template.

	Templates see ``root``, ``modules`` and ``packages``.
	"""

	def __init__(self, root_dir: Optional[str] = None, scan_filter: Optional[ScanFilter] = None):
		if is_empty_path(root_dir):
			root_dir = os.getcwd()
		self.scanner = Scanner(os.path.abspath(root_dir))
		self.filter = scan_filter or default_filter
		self.env = jinja2.Environment(
			loader=jinja2.FileSystemLoader(self.root),
			undefined=jinja2.StrictUndefined,
			keep_trailing_newline=True,
			trim_blocks=True,
			lstrip_blocks=True,
		)
		self._templates: Dict[str, jinja2.Template] = {}

	@property
	def root(self) -> str:
		return self.scanner.start_dir

	@property
	def modules(self) -> List[Module]:
		return self.scanner.modules

	@property
	def packages(self) -> List[Package]:
		return self.scanner.packages

	def abs_path(self, path: Optional[str]) -> str:
		"""Return path as an absolute path, relative paths resolve against root."""
		if is_empty_path(path):
			return self.root
		if not os.path.isabs(path):
			return os.path.join(self.root, path)
		return os.path.normpath(path)

	def scan_dir(
		self,
		dir: Optional[str] = None,
		mode: ScanMode = ScanMode.ALL_DEEP,
		scan_filter: Optional[ScanFilter] = None,
	) -> "Generator":
		self.scanner.scan(self.abs_path(dir), mode, scan_filter or self.filter)
		return self

	def template(self, path: str) -> jinja2.Template:
		abs_path = self.abs_path(path)
		tmpl = self._templates.get(abs_path)
		if tmpl is not None:
			return tmpl

		rel = os.path.relpath(abs_path, self.root)
		try:
			if rel.startswith(os.pardir):
				with open(abs_path, "r", encoding="utf-8") as fh:
					tmpl = self.env.from_string(fh.read())
			else:
				tmpl = self.env.get_template(rel.replace(os.sep, "/"))
		except jinja2.TemplateNotFound as err:
			raise TemplateRenderError("template not found", abs_path) from err
		except jinja2.TemplateError as err:
			raise TemplateRenderError(str(err), abs_path) from err
		except OSError as err:
			raise DocgenIOError(f"cannot read template: {err.strerror or err}", abs_path) from err

		self._templates[abs_path] = tmpl
		return tmpl

	def render(self, template: str) -> str:
		"""Render template to a string, scanning root first if nothing was scanned yet."""
		if self.scanner.state is ScanState.UNSCANNED:
			self.scan_dir(self.root, ScanMode.ALL_DEEP, self.filter)

		tmpl = self.template(template)
		try:
			return tmpl.render(root=self.root, modules=self.modules, packages=self.packages)
		except jinja2.TemplateError as err:
			raise TemplateRenderError(str(err), self.abs_path(template)) from err

	def generate(self, template: str, out: TextIO) -> "Generator":
		text = self.render(template)
		try:
			out.write(text)
		except OSError as err:
			raise DocgenIOError(f"cannot write output: {err.strerror or err}") from err
		return self

	def generate_file(self, template: str, file: str, perm: int = 0o644) -> "Generator":
		path = self.abs_path(file)
		# Render first so a failing template leaves an existing output intact.
		text = self.render(template)
		try:
			fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, perm)
		except OSError as err:
			raise DocgenIOError(f"cannot open output: {err.strerror or err}", path) from err

		with os.fdopen(fd, "w", encoding="utf-8") as fh:
			try:
				fh.write(text)
			except OSError as err:
				raise DocgenIOError(f"cannot write output: {err.strerror or err}", path) from err
		logger.info("wrote %s", path)
		return self
