from __future__ import annotations

import os
import posixpath
from typing import Annotated, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, computed_field

from .summarize import synopsis


class Dependency(BaseModel):
	model_config = ConfigDict(frozen=True)

	name: str
	version: str = ""


class Module(BaseModel):
	model_config = ConfigDict(frozen=True)

	name: str
	version: str = ""
	deps: List[Dependency] = []
	# Location of the manifest the module was read from.
	file_path: str = Field(min_length=1)

	@property
	def dir(self) -> str:
		return os.path.dirname(self.file_path)


class Paragraph(BaseModel):
	model_config = ConfigDict(frozen=True)

	kind: Literal["paragraph"] = "paragraph"
	text: str

	def __str__(self) -> str:
		return self.text


class Preformatted(BaseModel):
	model_config = ConfigDict(frozen=True)

	kind: Literal["preformatted"] = "preformatted"
	text: str

	def __str__(self) -> str:
		return self.text


Block = Annotated[Union[Paragraph, Preformatted], Field(discriminator="kind")]


class Section(BaseModel):
	id: str = ""
	heading: str = ""
	blocks: List[Block] = []


def join_import_path(pkg_path: str, module: Optional[Module]) -> str:
	if module is None:
		return pkg_path
	if not pkg_path or pkg_path == ".":
		return module.name
	return posixpath.join(module.name, pkg_path)


class Package(BaseModel):
	# Name of the package directory.
	name: str
	# Path relative to Module.dir; joined with Module.name it forms import_path.
	path: str = ""
	module: Optional[Module] = Field(default=None, repr=False)
	sections: List[Section] = []

	@computed_field  # type: ignore[misc]
	@property
	def import_path(self) -> str:
		return join_import_path(self.path, self.module)

	@computed_field  # type: ignore[misc]
	@property
	def synopsis(self) -> str:
		if not self.sections or not self.sections[0].blocks:
			return ""
		return synopsis(str(self.sections[0].blocks[0]))

	def section(self, i: int) -> Section:
		return self.sections[i]


class PackageDoc(BaseModel):
	"""Documentation of one package as found by the source parser."""

	name: str
	dir: str
	doc: str = ""
	files: List[str] = []


class ScanFailure(BaseModel):
	path: str
	error: str


class ScanResult(BaseModel):
	root: str
	modules: List[Module]
	packages: List[Package]
	failures: List[ScanFailure] = []
