"""
test_service.py — Tests for the HTTP service, the remote client and the CLI.

Tests cover:
    - /health, /api/parse-document, /api/generate-ppt, /api/generate-html
    - 400 / 415 / 422 error replies
    - Remote deck client retries and failures (requests monkeypatched)
    - CLI pipeline exit codes and output files
"""

import logging
import sys
import threading
from pathlib import Path

import pytest
import requests
import yaml

sys.path.insert(0, str(Path(__file__).parent.parent))

import main as cli
from server import PPTX_MIME, build_server
from statusdeck import remote
from statusdeck.config import load_config
from statusdeck.errors import RemoteRenderError
from statusdeck.records import Record

CONFIG = str(Path(__file__).parent.parent / "config.yaml")
TAB_LINE = b"SNU\tAcademic\tBuild report\tLive\t02/05/2025\n"
ROW = {
    "client": "SNU",
    "module": "Academic",
    "description": "Build report",
    "deploymentStatus": "Live",
    "deliveryDate": "02/05/2025",
}


@pytest.fixture
def base_url():
    server = build_server(load_config(CONFIG), "127.0.0.1", 0)
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    host, port = server.server_address[:2]
    yield f"http://{host}:{port}"
    server.shutdown()
    server.server_close()


# ---------------------------------------------------------------------------
# HTTP service
# ---------------------------------------------------------------------------

class TestServer:
    """End-to-end requests against a server on an ephemeral port."""

    def test_health(self, base_url):
        resp = requests.get(f"{base_url}/health", timeout=5)
        assert resp.status_code == 200
        assert resp.json()["status"] == "healthy"

    def test_unknown_route(self, base_url):
        assert requests.get(f"{base_url}/nope", timeout=5).status_code == 404

    def test_parse_document(self, base_url):
        resp = requests.post(
            f"{base_url}/api/parse-document", params={"filename": "status.txt"},
            data=TAB_LINE, timeout=5,
        )
        body = resp.json()
        assert resp.status_code == 200
        assert body["success"] is True
        assert body["fileName"] == "status.txt"
        assert body["tableData"] == [ROW]

    def test_parse_document_unsupported_type(self, base_url):
        resp = requests.post(
            f"{base_url}/api/parse-document", params={"filename": "report.pdf"},
            data=b"%PDF-1.4", timeout=5,
        )
        assert resp.status_code == 415
        assert resp.json()["success"] is False

    def test_parse_document_presentation_mime_rejected(self, base_url):
        mime = "application/vnd.openxmlformats-officedocument.presentationml.presentation"
        resp = requests.post(
            f"{base_url}/api/parse-document", params={"filename": "upload"},
            data=b"PK\x03\x04", headers={"Content-Type": mime}, timeout=5,
        )
        assert resp.status_code == 415

    def test_parse_document_corrupt(self, base_url):
        resp = requests.post(
            f"{base_url}/api/parse-document", params={"filename": "broken.docx"},
            data=b"not a zip archive", timeout=5,
        )
        assert resp.status_code == 422

    def test_generate_ppt(self, base_url):
        resp = requests.post(f"{base_url}/api/generate-ppt",
                             json={"tableData": [ROW]}, timeout=30)
        assert resp.status_code == 200
        assert resp.headers["Content-Type"] == PPTX_MIME
        assert "WorkDoneStatus.pptx" in resp.headers["Content-Disposition"]
        assert resp.content[:2] == b"PK"

    @pytest.mark.parametrize("payload", [b"{not json", b'{"tableData": []}', b'{"rows": []}', b"[]"])
    def test_generate_ppt_invalid_data(self, base_url, payload):
        resp = requests.post(f"{base_url}/api/generate-ppt", data=payload,
                             headers={"Content-Type": "application/json"}, timeout=5)
        assert resp.status_code == 400
        assert resp.json() == {"success": False, "message": "Invalid or missing data"}

    def test_generate_html(self, base_url):
        resp = requests.post(f"{base_url}/api/generate-html",
                             json={"tableData": [ROW]}, timeout=30)
        assert resp.status_code == 200
        assert "<td>1. SNU</td>" in resp.text


# ---------------------------------------------------------------------------
# Remote client
# ---------------------------------------------------------------------------

class _FakeResponse:
    def __init__(self, status_code, content=b""):
        self.status_code = status_code
        self.content = content
        self.text = content.decode("utf-8", errors="replace")

    @property
    def ok(self):
        return 200 <= self.status_code < 300


class TestRemoteClient:
    """Tests for request_remote_deck with requests.post patched."""

    @pytest.fixture(autouse=True)
    def no_sleep(self, monkeypatch):
        monkeypatch.setattr(remote.time, "sleep", lambda seconds: None)

    def test_success_writes_file(self, monkeypatch, tmp_path):
        sent = {}

        def fake_post(url, json=None, timeout=None):
            sent.update(url=url, json=json)
            return _FakeResponse(200, b"PKdeck")

        monkeypatch.setattr(remote.requests, "post", fake_post)
        out = remote.request_remote_deck((Record("SNU"),), "http://svc/api", tmp_path / "d.pptx")
        assert out.read_bytes() == b"PKdeck"
        assert sent["json"]["tableData"][0]["client"] == "SNU"
        assert "deploymentStatus" in sent["json"]["tableData"][0]

    def test_retries_transport_errors(self, monkeypatch, tmp_path):
        replies = [requests.ConnectionError("down"), _FakeResponse(200, b"ok")]

        def fake_post(url, json=None, timeout=None):
            reply = replies.pop(0)
            if isinstance(reply, Exception):
                raise reply
            return reply

        monkeypatch.setattr(remote.requests, "post", fake_post)
        out = remote.request_remote_deck((Record("SNU"),), "http://svc", tmp_path / "d.pptx")
        assert out.exists()
        assert replies == []

    def test_client_error_not_retried(self, monkeypatch, tmp_path):
        calls = []

        def fake_post(url, json=None, timeout=None):
            calls.append(url)
            return _FakeResponse(400, b'{"success": false}')

        monkeypatch.setattr(remote.requests, "post", fake_post)
        with pytest.raises(RemoteRenderError) as exc_info:
            remote.request_remote_deck((Record("SNU"),), "http://svc", tmp_path / "d.pptx")
        assert len(calls) == 1
        assert "HTTP 400" in exc_info.value.message

    def test_empty_records_rejected(self, tmp_path):
        with pytest.raises(ValueError):
            remote.request_remote_deck((), "http://svc", tmp_path / "d.pptx")


# ---------------------------------------------------------------------------
# CLI
# ---------------------------------------------------------------------------

class TestCli:
    """Tests for main.run_pipeline."""

    @pytest.fixture
    def config_path(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text(
            yaml.safe_dump({"paths": {"output_dir": str(tmp_path / "out")}}),
            encoding="utf-8",
        )
        return str(path)

    def test_excel_and_html_outputs(self, tmp_path, config_path):
        src = tmp_path / "weekly.txt"
        src.write_bytes(TAB_LINE)
        args = cli._parse_args([str(src), "--excel", "--html", "--config", config_path])
        assert cli.run_pipeline(args, logging.getLogger("test")) == 0
        assert (tmp_path / "out" / "WorkDoneStatus_weekly.xlsx").exists()
        assert (tmp_path / "out" / "WorkDoneStatus_weekly.html").exists()

    def test_unsupported_input_exit_code(self, tmp_path, config_path):
        args = cli._parse_args([str(tmp_path / "weekly.pdf"), "--pptx", "--config", config_path])
        assert cli.run_pipeline(args, logging.getLogger("test")) == 1

    def test_corrupt_input_exit_code(self, tmp_path, config_path):
        src = tmp_path / "weekly.docx"
        src.write_bytes(b"not a zip archive")
        args = cli._parse_args([str(src), "--preview", "--config", config_path])
        assert cli.run_pipeline(args, logging.getLogger("test")) == 1

    def test_remote_flag_uses_configured_url(self, monkeypatch, tmp_path, config_path):
        src = tmp_path / "weekly.txt"
        src.write_bytes(TAB_LINE)
        seen = {}

        def fake_request(records, url, output_path, timeout=60):
            seen.update(url=url, path=output_path, rows=len(records))
            return output_path

        monkeypatch.setattr(remote, "request_remote_deck", fake_request)
        args = cli._parse_args([str(src), "--remote", "--config", config_path])
        assert cli.run_pipeline(args, logging.getLogger("test")) == 0
        assert seen["url"] == "http://localhost:5000/api/generate-ppt"
        assert seen["rows"] == 1
        assert Path(seen["path"]).name == "WorkDoneStatus_weekly_remote.pptx"
