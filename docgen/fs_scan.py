from __future__ import annotations

import enum
import logging
import os
from typing import Dict, List, Optional, Protocol, Tuple

from . import render
from .ast_parse import parse_dir
from .errors import DocgenError, DocgenIOError, ScanErrorGroup, ScanErrors
from .manifest import detect_manifest
from .model import Module, Package, ScanFailure, ScanResult
from .unmarshal import Unmarshaler

logger = logging.getLogger(__name__)


class ScanMode(enum.IntFlag):
	NONE = 0
	MODULE = 1
	PACKAGES = 2
	DEEP = 4

	ALL = MODULE | PACKAGES
	ALL_DEEP = MODULE | PACKAGES | DEEP
	PACKAGES_DEEP = PACKAGES | DEEP


class ScanFilter(Protocol):
	def __call__(self, path: str, name: str, entry: os.DirEntry) -> bool: ...


def default_filter(path: str, name: str, entry: Optional[os.DirEntry] = None) -> bool:
	"""Skip hidden entries and directories named "internal"."""
	return bool(name) and name[0] != "." and name != "internal"


class ScanState(enum.Enum):
	UNSCANNED = "unscanned"
	SCANNING = "scanning"
	SCANNED = "scanned"


def _rel_path(dir: str, base: str) -> str:
	rel = os.path.relpath(dir, base)
	if rel == "." or rel == os.pardir or rel.startswith(os.pardir + os.sep):
		return ""
	return rel.replace(os.sep, "/")


class Scanner:
	"""Collects modules and packages below start_dir.

	Results accumulate across calls to scan; use a new Scanner for a clean
	result set. One scan at a time per instance.
	"""

	def __init__(self, start_dir: str):
		self.start_dir = os.path.abspath(start_dir)
		self.modules: List[Module] = []
		self.packages: List[Package] = []
		self.state = ScanState.UNSCANNED
		# Steps already run per directory, and the module found there.
		self._done: Dict[str, ScanMode] = {}
		self._dir_modules: Dict[str, Module] = {}
		self._unmarshaler = Unmarshaler()

	def scan(
		self,
		dir: Optional[str] = None,
		mode: ScanMode = ScanMode.ALL_DEEP,
		scan_filter: Optional[ScanFilter] = None,
	) -> None:
		"""Scan dir (default start_dir) according to mode.

		Failures in subdirectories of a deep scan are raised together as a
		ScanErrorGroup once every sibling has been tried. Whatever was found
		before an error is kept.
		"""
		if mode == ScanMode.NONE:
			return
		if scan_filter is None:
			scan_filter = default_filter
		path = self.start_dir if dir is None else os.path.abspath(dir)

		self.state = ScanState.SCANNING
		try:
			self._scan_dir(path, mode, scan_filter, None)
		finally:
			self.state = ScanState.SCANNED

	def _scan_dir(
		self,
		dir: str,
		mode: ScanMode,
		scan_filter: ScanFilter,
		enclosing: Optional[Module],
	) -> None:
		done = self._done.get(dir, ScanMode.NONE)
		if mode & ScanMode.MODULE and not done & ScanMode.MODULE:
			self._done[dir] = done = done | ScanMode.MODULE
			found = self._scan_module(dir)
			if found is not None:
				self._dir_modules[dir] = found
		mod = self._dir_modules.get(dir, enclosing)

		if mode & ScanMode.PACKAGES and not done & ScanMode.PACKAGES:
			self._done[dir] = done | ScanMode.PACKAGES
			base = mod.dir if mod is not None else self.start_dir
			self._scan_packages(dir, _rel_path(dir, base), mod)

		if mode & ScanMode.DEEP:
			errs = ScanErrors()
			for path, name, entry in self._subdirs(dir):
				if not scan_filter(path, name, entry):
					logger.debug("filtered out %s", path)
					continue
				try:
					self._scan_dir(path, mode, scan_filter, mod)
				except (DocgenError, ScanErrorGroup) as err:
					logger.warning("scan of %s failed: %s", path, err)
					errs.add(path, err)
			errs.raise_for_errors()

	def _subdirs(self, dir: str) -> List[Tuple[str, str, os.DirEntry]]:
		try:
			with os.scandir(dir) as it:
				entries = sorted(it, key=lambda e: e.name)
		except OSError as err:
			raise DocgenIOError(f"cannot list directory: {err.strerror or err}", dir) from err
		return [
			(os.path.join(dir, e.name), e.name, e)
			for e in entries
			if e.is_dir(follow_symlinks=False)
		]

	def _scan_module(self, dir: str) -> Optional[Module]:
		"""Detect and register the module whose manifest sits in dir."""
		mod = detect_manifest(dir)
		if mod is not None:
			logger.debug("found module %s %s at %s", mod.name, mod.version, mod.file_path)
			self.modules.append(mod)
		return mod

	def _scan_packages(self, dir: str, path: str, mod: Optional[Module]) -> None:
		docs = parse_dir(dir)
		for name in sorted(docs):
			pkg = Package(name=docs[name].name, path=path, module=mod)
			render.to_html(self._unmarshaler.reset(pkg), docs[name].doc)
			self._unmarshaler.close()
			logger.debug("found package %s (%s)", pkg.name, pkg.import_path or name)
			self.packages.append(pkg)


def scan_dir(
	path: str,
	mode: ScanMode = ScanMode.ALL_DEEP,
	scan_filter: Optional[ScanFilter] = None,
) -> Tuple[List[Module], List[Package]]:
	"""Scan path with a fresh Scanner and return its modules and packages."""
	s = Scanner(path)
	s.scan(mode=mode, scan_filter=scan_filter)
	return s.modules, s.packages


def collect(
	path: str,
	mode: ScanMode = ScanMode.ALL_DEEP,
	scan_filter: Optional[ScanFilter] = None,
) -> ScanResult:
	"""Scan path and return the results together with every failure."""
	s = Scanner(path)
	failures: List[ScanFailure] = []
	try:
		s.scan(mode=mode, scan_filter=scan_filter)
	except ScanErrorGroup as group:
		failures = [ScanFailure(path=p, error=str(err)) for p, err in group.failures]
	except DocgenError as err:
		failures = [ScanFailure(path=err.path or s.start_dir, error=str(err))]
	return ScanResult(root=s.start_dir, modules=s.modules, packages=s.packages, failures=failures)
