"""Tests for the analysis REST API."""

from __future__ import annotations

from dataclasses import replace

import pytest
from fastapi.testclient import TestClient

from thinktest.web.api import analyses, elementor
from thinktest.web.app import create_app


@pytest.fixture
def client(config):
    with TestClient(create_app(config)) as client:
        yield client


class TestAnalysesApi:
    def test_create_and_fetch(self, client, sample_plugin: str):
        resp = client.post(
            "/api/analyses", json={"code": sample_plugin, "filename": "sample.php"}
        )
        assert resp.status_code == 200
        body = resp.json()
        assert body["analysis"]["filename"] == "sample.php"
        assert len(body["analysis"]["hooks"]) == 4

        resp = client.get(f"/api/analyses/{body['id']}")
        assert resp.status_code == 200
        assert resp.json()["analysis"] == body["analysis"]

        listing = client.get("/api/analyses").json()
        assert [row["id"] for row in listing] == [body["id"]]

    def test_default_filename(self, client):
        resp = client.post("/api/analyses", json={"code": "<?php echo 1;"})
        assert resp.json()["analysis"]["filename"] == "plugin.php"

    def test_multi_file_bundle(self, client):
        code = "\n\n// File: a.php\n<?php echo 1;\n\n// File: b.php\n<?php echo (;"
        resp = client.post("/api/analyses", json={"code": code, "filename": "o/r@main"})
        analysis = resp.json()["analysis"]
        assert analysis["parsed_file_count"] == 1
        assert analysis["failed_file_count"] == 1
        assert analysis["analysis_method"] == "regex_fallback"

    def test_missing(self, client):
        resp = client.get("/api/analyses/nope")
        assert resp.status_code == 404
        assert resp.json() == {"detail": "Analysis not found"}

    def test_missing_code(self, client):
        assert client.post("/api/analyses", json={}).status_code == 422


class TestElementorApi:
    def test_create_and_fetch(self, client, hello_widget: str):
        resp = client.post("/api/elementor", json={"code": hello_widget})
        assert resp.status_code == 200
        body = resp.json()
        assert body["analysis"]["widget_name"] == "hello-widget"

        fetched = client.get(f"/api/elementor/{body['id']}").json()
        assert fetched["analysis"]["controls"][0]["id"] == "title"

    def test_missing(self, client):
        resp = client.get("/api/elementor/nope")
        assert resp.status_code == 404
        assert resp.json() == {"detail": "Elementor analysis not found"}


def test_size_limit(config):
    with TestClient(create_app(replace(config, max_file_size=10))) as client:
        resp = client.post("/api/analyses", json={"code": "<?php echo 'too long';"})
        assert resp.status_code == 413


class TestWorkerThreads:
    @pytest.fixture
    def offloaded(self, monkeypatch):
        calls = []

        def spy(module):
            real = module.run_in_threadpool

            async def run(func, *args, **kwargs):
                calls.append(func)
                return await real(func, *args, **kwargs)

            monkeypatch.setattr(module, "run_in_threadpool", run)

        spy(analyses)
        spy(elementor)
        return calls

    def test_plugin_analysis_runs_in_threadpool(self, client, offloaded, sample_plugin: str):
        resp = client.post("/api/analyses", json={"code": sample_plugin})
        assert resp.status_code == 200
        assert [f.__name__ for f in offloaded] == ["analyze"]

    def test_widget_analysis_runs_in_threadpool(self, client, offloaded, hello_widget: str):
        resp = client.post("/api/elementor", json={"code": hello_widget})
        assert resp.status_code == 200
        assert [f.__name__ for f in offloaded] == ["analyze_elementor_widget"]
