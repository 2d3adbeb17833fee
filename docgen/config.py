from __future__ import annotations

import os
from typing import List, Optional

from pydantic import BaseModel

from .fs_scan import ScanMode


class NameFilter:
	"""Filter rejecting excluded directory names and, unless allowed, hidden ones."""

	def __init__(self, exclude: List[str], include_hidden: bool = False):
		self.exclude = set(exclude)
		self.include_hidden = include_hidden

	def __call__(self, path: str, name: str, entry: Optional[os.DirEntry] = None) -> bool:
		if not name or name in self.exclude:
			return False
		return self.include_hidden or name[0] != "."


class ScanOptions(BaseModel):
	root: str = "."
	modules: bool = True
	packages: bool = True
	deep: bool = True
	exclude: List[str] = ["internal"]
	include_hidden: bool = False

	@property
	def mode(self) -> ScanMode:
		mode = ScanMode.NONE
		if self.modules:
			mode |= ScanMode.MODULE
		if self.packages:
			mode |= ScanMode.PACKAGES
		if self.deep:
			mode |= ScanMode.DEEP
		return mode

	def build_filter(self) -> NameFilter:
		return NameFilter(self.exclude, self.include_hidden)


class GenerateOptions(ScanOptions):
	template: str
	# Written to stdout when unset.
	output: Optional[str] = None
	perm: int = 0o644
