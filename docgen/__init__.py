"""Extract package documentation from a source tree and render it through templates.

Modules:
- fs_scan.py: Directory traversal, scan modes and filters.
- manifest.py: pyproject.toml module detection.
- ast_parse.py: Package discovery and docstrings via the stdlib AST.
- render.py: Docstring to markup fragment stream.
- unmarshal.py: Fragment stream to section/block tree.
- model.py: Modules, packages, sections and blocks.
- generate.py: Jinja2 rendering of scan results.
"""

from .errors import (
	DocgenError,
	DocgenIOError,
	ManifestError,
	PackageParseError,
	ScanErrorGroup,
	TemplateRenderError,
)
from .fs_scan import Scanner, ScanMode, ScanState, collect, default_filter, scan_dir
from .generate import Generator
from .model import Dependency, Module, Package, Paragraph, Preformatted, Section

__all__ = [
	"DocgenError",
	"DocgenIOError",
	"ManifestError",
	"PackageParseError",
	"ScanErrorGroup",
	"TemplateRenderError",
	"Scanner",
	"ScanMode",
	"ScanState",
	"default_filter",
	"scan_dir",
	"collect",
	"Generator",
	"Dependency",
	"Module",
	"Package",
	"Paragraph",
	"Preformatted",
	"Section",
]
