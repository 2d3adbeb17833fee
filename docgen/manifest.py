from __future__ import annotations

import logging
import os
import re
import tomllib
from typing import Any, Dict, List, Optional

from .errors import DocgenIOError, ManifestError
from .model import Dependency, Module

logger = logging.getLogger(__name__)

MANIFEST_FILE = "pyproject.toml"

_REQUIREMENT = re.compile(r"^\s*([A-Za-z0-9](?:[A-Za-z0-9._/-]*[A-Za-z0-9])?)\s*(\[[^\]]*\])?\s*(.*)$")


def parse_requirement(req: str, path: str) -> Dependency:
	"""Split a PEP 508 requirement into its name and version constraint.

	Environment markers are dropped, a direct ``name @ url`` reference keeps
	the url as its version.
	"""
	m = _REQUIREMENT.match(req.split(";", 1)[0])
	if m is None:
		raise ManifestError(f"invalid requirement {req!r}", path)
	spec = m.group(3).strip()
	if spec.startswith("@"):
		spec = spec[1:].strip()
	else:
		spec = spec.strip("()").replace(" ", "")
	return Dependency(name=m.group(1), version=spec)


def _project_module(project: Dict[str, Any], path: str) -> Module:
	name = project.get("name")
	if not isinstance(name, str) or not name:
		raise ManifestError("[project] table has no name", path)
	requires = project.get("dependencies", [])
	if not isinstance(requires, list):
		raise ManifestError("[project].dependencies must be a list", path)
	deps: List[Dependency] = []
	for req in requires:
		if not isinstance(req, str):
			raise ManifestError(f"invalid requirement {req!r}", path)
		deps.append(parse_requirement(req, path))
	return Module(name=name, version=str(project.get("version", "")), deps=deps, file_path=path)


def _poetry_module(poetry: Dict[str, Any], path: str) -> Module:
	name = poetry.get("name")
	if not isinstance(name, str) or not name:
		raise ManifestError("[tool.poetry] table has no name", path)
	requires = poetry.get("dependencies", {})
	if not isinstance(requires, dict):
		raise ManifestError("[tool.poetry.dependencies] must be a table", path)
	deps: List[Dependency] = []
	for dep, spec in requires.items():
		if dep == "python":
			continue
		if isinstance(spec, dict):
			spec = spec.get("version", "")
		deps.append(Dependency(name=dep, version=str(spec)))
	return Module(name=name, version=str(poetry.get("version", "")), deps=deps, file_path=path)


def module_from_manifest(data: Dict[str, Any], path: str) -> Optional[Module]:
	project = data.get("project")
	if project is not None:
		if not isinstance(project, dict):
			raise ManifestError("[project] must be a table", path)
		return _project_module(project, path)
	tool = data.get("tool")
	poetry = tool.get("poetry") if isinstance(tool, dict) else None
	if poetry is not None:
		if not isinstance(poetry, dict):
			raise ManifestError("[tool.poetry] must be a table", path)
		return _poetry_module(poetry, path)
	return None


def detect_manifest(dir: str) -> Optional[Module]:
	"""Read the module manifest in dir.

	Returns None when there is no manifest, or when it only carries tool
	configuration and declares no project.
	"""
	path = os.path.join(dir, MANIFEST_FILE)
	try:
		with open(path, "rb") as fh:
			data = tomllib.load(fh)
	except FileNotFoundError:
		return None
	except tomllib.TOMLDecodeError as err:
		raise ManifestError(f"malformed manifest: {err}", path) from err
	except UnicodeDecodeError as err:
		raise ManifestError(f"malformed manifest: {err.reason}", path) from err
	except OSError as err:
		raise DocgenIOError(f"cannot read manifest: {err.strerror or err}", path) from err

	mod = module_from_manifest(data, path)
	if mod is None:
		logger.debug("%s declares no project", path)
	return mod
