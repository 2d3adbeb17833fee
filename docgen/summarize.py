from __future__ import annotations

from typing import TYPE_CHECKING, List

if TYPE_CHECKING:
	from .model import ScanResult

_IGNORED_PREFIXES = ("copyright", "all rights", "author")


def first_sentence(text: str) -> str:
	"""Return text up to and including the first sentence terminator.

	A period only ends the sentence when followed by whitespace and not
	preceded by a single uppercase letter (initials such as "J. Doe").
	"""
	upper_run = 0
	for i, ch in enumerate(text):
		if ch in ".!?" and (i + 1 == len(text) or text[i + 1].isspace()):
			if ch != "." or upper_run != 1:
				return text[: i + 1]
		if ch.isupper():
			upper_run += 1
		else:
			upper_run = 0
	return text


def synopsis(text: str) -> str:
	s = " ".join(first_sentence(" ".join(text.split())).split())
	if s.lower().startswith(_IGNORED_PREFIXES):
		return ""
	return s


def overview(result: "ScanResult") -> str:
	parts: List[str] = []
	parts.append(
		f"Scanned {result.root}: {len(result.modules)} modules, {len(result.packages)} packages"
	)
	for mod in result.modules:
		parts.append(f"  Module {mod.name} {mod.version} ({len(mod.deps)} deps)")
	for pkg in result.packages:
		line = f"  Package {pkg.import_path or pkg.name}"
		if pkg.synopsis:
			line += f": {pkg.synopsis}"
		parts.append(line)
	if result.failures:
		parts.append(f"  {len(result.failures)} failures")
	return "\n".join(parts)
