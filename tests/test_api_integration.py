"""
Integration tests for the HTTP query surface.

Runs the FastAPI app against a real ConfigService backed by a temporary
INI file stack.
"""

import pytest
from fastapi.testclient import TestClient

from nodeconf.api import create_app
from nodeconf.service import ConfigService


@pytest.fixture
def ini_files(tmp_path):
    default = tmp_path / "default.ini"
    default.write_text("[db]\nmax_size = 100\nname = widget\n[httpd]\nport = 5984\n", encoding="utf-8")
    local = tmp_path / "local.ini"
    local.write_text("[db]\nname = gadget\n", encoding="utf-8")
    return [default, local]


@pytest.fixture
def service(ini_files):
    svc = ConfigService(ini_files).start()
    yield svc
    svc.stop()


@pytest.fixture
def client(service):
    return TestClient(create_app(service))


class TestReadRoutes:
    def test_health(self, client):
        assert client.get("/health").json() == {"ok": True, "state": "running"}

    def test_all(self, client):
        resp = client.get("/config")
        assert resp.status_code == 200
        assert resp.json() == {
            "db": {"max_size": "100", "name": "gadget"},
            "httpd": {"port": "5984"},
        }

    def test_section(self, client):
        assert client.get("/config/httpd").json() == {"port": "5984"}
        assert client.get("/config/unknown").json() == {}

    def test_value(self, client):
        resp = client.get("/config/db/name")
        assert resp.status_code == 200
        assert resp.json() == "gadget"

    def test_missing_value(self, client):
        assert client.get("/config/db/missing").status_code == 404


class TestWriteRoutes:
    def test_put_persists_to_last_file(self, client, service, ini_files):
        resp = client.put("/config/db/max_size", json={"value": "200"})
        assert resp.status_code == 200
        assert resp.json()["data"] == {"previous": "100"}
        assert service.get("db", "max_size") == "200"
        assert "max_size = 200" in ini_files[1].read_text(encoding="utf-8")
        assert "max_size = 100" in ini_files[0].read_text(encoding="utf-8")

    def test_put_without_persist(self, client, service, ini_files):
        resp = client.put("/config/db/max_size", params={"persist": "false"}, json={"value": "7"})
        assert resp.status_code == 200
        assert service.get("db", "max_size") == "7"
        assert "max_size" not in ini_files[1].read_text(encoding="utf-8")

    def test_put_rejects_value_with_line_break(self, client, service, ini_files):
        resp = client.put("/config/db/name", json={"value": "x\nadmin = yes"})
        assert resp.status_code == 400
        assert service.get("db", "name") == "gadget"
        assert "admin" not in ini_files[1].read_text(encoding="utf-8")

    def test_put_requires_value(self, client):
        assert client.put("/config/db/max_size", json={}).status_code == 422

    def test_delete(self, client, service):
        resp = client.delete("/config/httpd/port")
        assert resp.status_code == 200
        assert resp.json()["detail"] == "deleted"
        assert resp.json()["data"] == {"previous": "5984"}
        assert service.get("httpd", "port") is None

    def test_delete_missing(self, client):
        assert client.delete("/config/db/missing").status_code == 404
