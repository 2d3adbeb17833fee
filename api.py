from __future__ import annotations

import json
import logging
import os
from typing import List

from fastapi import FastAPI, HTTPException
from fastapi.responses import PlainTextResponse

from docgen.config import ScanOptions
from docgen.errors import DocgenError, ScanErrorGroup
from docgen.fs_scan import collect
from docgen.generate import Generator
from docgen.model import ScanFailure, ScanResult

logger = logging.getLogger(__name__)

app = FastAPI(title="docgen")

FAILURES_HEADER = "X-Docgen-Failures"


class ScanRequest(ScanOptions):
	pass


class GenerateRequest(ScanOptions):
	template: str


def _root(path: str) -> str:
	root = os.path.abspath(path)
	if not os.path.isdir(root):
		raise HTTPException(status_code=400, detail=f"Invalid root: {root}")
	return root


@app.post("/scan", response_model=ScanResult)
def scan(req: ScanRequest) -> ScanResult:
	return collect(_root(req.root), req.mode, req.build_filter())


@app.post("/generate", response_class=PlainTextResponse)
def generate(req: GenerateRequest) -> PlainTextResponse:
	gen = Generator(_root(req.root), req.build_filter())
	failures: List[ScanFailure] = []
	try:
		gen.scan_dir(mode=req.mode)
	except ScanErrorGroup as group:
		# Partial results are rendered, the failures travel in a header.
		for path, err in group.failures:
			logger.warning("scan of %s failed: %s", path, err)
			failures.append(ScanFailure(path=path, error=str(err)))
	except DocgenError as err:
		raise HTTPException(status_code=422, detail=str(err)) from err
	try:
		text = gen.render(req.template)
	except DocgenError as err:
		raise HTTPException(status_code=422, detail=str(err)) from err

	headers = {}
	if failures:
		headers[FAILURES_HEADER] = json.dumps([f.model_dump() for f in failures])
	return PlainTextResponse(text, headers=headers)


def create_app() -> FastAPI:
	return app
