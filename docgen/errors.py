from __future__ import annotations

from typing import Iterator, List, Optional, Sequence, Tuple


class DocgenError(Exception):
	"""Base class for scan and generate failures.

	``path`` names the file or directory the failure belongs to.
	"""

	def __init__(self, message: str, path: Optional[str] = None):
		super().__init__(message)
		self.message = message
		self.path = path

	def __str__(self) -> str:
		if self.path:
			return f"{self.path}: {self.message}"
		return self.message


class ManifestError(DocgenError):
	"""A manifest file exists but is structurally malformed."""


class PackageParseError(DocgenError):
	"""Source files in a directory failed to parse."""


class DocgenIOError(DocgenError):
	"""Reading, listing or writing a path failed."""


class TemplateRenderError(DocgenError):
	"""A template could not be loaded or executed."""


Failure = Tuple[str, Exception]


class ScanErrorGroup(ExceptionGroup):
	"""All failures collected while recursing into sibling directories."""

	def __new__(cls, message: str, failures: Sequence[Failure]):
		obj = super().__new__(cls, message, [exc for _, exc in failures])
		obj.failures = list(failures)
		return obj

	def derive(self, excs):
		return ExceptionGroup(self.message, excs)

	def paths(self) -> List[str]:
		return [path for path, _ in self.failures]


class ScanErrors:
	"""Ordered collector of ``(path, error)`` pairs.

	Nested groups are flattened so the top-level caller sees one entry per
	failing directory.
	"""

	def __init__(self) -> None:
		self._failures: List[Failure] = []

	def add(self, path: str, exc: Exception) -> None:
		if isinstance(exc, ScanErrorGroup):
			self._failures.extend(exc.failures)
		else:
			self._failures.append((path, exc))

	def __bool__(self) -> bool:
		return bool(self._failures)

	def __len__(self) -> int:
		return len(self._failures)

	def __iter__(self) -> Iterator[Failure]:
		return iter(self._failures)

	def raise_for_errors(self) -> None:
		if not self._failures:
			return
		count = len(self._failures)
		noun = "directory" if count == 1 else "directories"
		raise ScanErrorGroup(f"{count} {noun} failed to scan", self._failures)
