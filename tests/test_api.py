import json

import pytest
from fastapi.testclient import TestClient

from api import FAILURES_HEADER, create_app


@pytest.fixture
def client():
	return TestClient(create_app())


@pytest.fixture
def tree(tmp_path):
	pkg = tmp_path / "pkg"
	pkg.mkdir()
	(pkg / "__init__.py").write_text('"""Pkg &amp; friends."""\n')
	bad = tmp_path / "bad"
	bad.mkdir()
	(bad / "__init__.py").write_text("def (:\n")
	(tmp_path / "index.j2").write_text("{% for p in packages %}{{ p.name }}={{ p.synopsis }};{% endfor %}")
	return tmp_path


def test_scan(client, tree):
	response = client.post("/scan", json={"root": str(tree)})
	assert response.status_code == 200
	data = response.json()
	assert [p["name"] for p in data["packages"]] == ["pkg"]
	assert data["packages"][0]["sections"][0]["blocks"][0] == {
		"kind": "paragraph",
		"text": "Pkg &amp; friends.",
	}
	assert [f["path"] for f in data["failures"]] == [str(tree / "bad")]


def test_scan_with_exclude(client, tree):
	response = client.post("/scan", json={"root": str(tree), "exclude": ["bad"]})
	assert response.json()["failures"] == []


def test_scan_invalid_root(client, tmp_path):
	response = client.post("/scan", json={"root": str(tmp_path / "missing")})
	assert response.status_code == 400


def test_generate(client, tree):
	response = client.post("/generate", json={"root": str(tree), "template": "index.j2"})
	assert response.status_code == 200
	assert response.text == "pkg=Pkg &amp; friends.;"


def test_generate_missing_template(client, tree):
	response = client.post("/generate", json={"root": str(tree), "template": "nope.j2"})
	assert response.status_code == 422


def test_generate_reports_failures(client, tree):
	response = client.post("/generate", json={"root": str(tree), "template": "index.j2"})
	assert response.status_code == 200
	assert response.text == "pkg=Pkg &amp; friends.;"
	failures = json.loads(response.headers[FAILURES_HEADER])
	assert [f["path"] for f in failures] == [str(tree / "bad")]
	assert failures[0]["error"]


def test_generate_without_failures_has_no_header(client, tree):
	response = client.post("/generate", json={"root": str(tree), "template": "index.j2", "exclude": ["bad"]})
	assert response.status_code == 200
	assert FAILURES_HEADER not in response.headers
