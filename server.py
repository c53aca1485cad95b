"""
server.py — HTTP service for document parsing and deck rendering.

Routes
------
    GET  /health                          → 200 {"status":"healthy", ...}
    POST /api/parse-document?filename=X   raw file body → {"success": true,
                                          "fileName": X, "tableData": [...]}
    POST /api/generate-ppt                {"tableData": [...]} → .pptx bytes
    POST /api/generate-html               {"tableData": [...]} → HTML report

Error replies are JSON {"success": false, "message": ...}:
    400  invalid JSON, missing or empty tableData
    415  unsupported file type (InputRejected)
    422  corrupt or unconvertible upload (DecodeFailure)
    500  renderer failure

Each request is handled on its own thread (ThreadingHTTPServer) and shares
nothing with other requests except the read-only configuration. No
third-party HTTP framework is needed; http.server covers four routes.
$PORT overrides server.port from config.yaml.
"""

import argparse
import json
import logging
import sys
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from typing import Any
from urllib.parse import parse_qs, urlparse

from statusdeck.config import load_config
from statusdeck.errors import DecodeFailure, InputRejected
from statusdeck.extraction import extract_records
from statusdeck.fallback import KnownPatternRecognizer
from statusdeck.html_report import render_html
from statusdeck.loaders import load_bytes
from statusdeck.records import records_from_dicts, records_to_dicts
from statusdeck.slides import render_pptx_bytes

logger = logging.getLogger("server")

_HEALTH_PATHS = frozenset(("/", "/health", "/healthz", "/ping"))
_HEALTH_BODY = {"status": "healthy", "service": "work-done-status-deck"}

PPTX_MIME = "application/vnd.openxmlformats-officedocument.presentationml.presentation"
INVALID_DATA = "Invalid or missing data"


class StatusDeckHandler(BaseHTTPRequestHandler):
    """Routes requests to the extraction pipeline and the renderers.

    ``cfg`` and ``recognizer`` are bound per server by make_handler().
    """

    cfg: dict[str, Any] = {}
    recognizer: KnownPatternRecognizer = KnownPatternRecognizer(())

    # -- helpers ------------------------------------------------------------

    def _send(self, status: int, body: bytes, content_type: str, extra_headers=None) -> None:
        self.send_response(status)
        self.send_header("Content-Type", content_type)
        self.send_header("Content-Length", str(len(body)))
        for name, value in (extra_headers or {}).items():
            self.send_header(name, value)
        self.end_headers()
        self.wfile.write(body)

    def _send_json(self, status: int, payload: dict) -> None:
        self._send(status, json.dumps(payload).encode("utf-8"), "application/json")

    def _fail(self, status: int, message: str) -> None:
        self._send_json(status, {"success": False, "message": message})

    def _read_body(self) -> bytes:
        length = int(self.headers.get("Content-Length") or 0)
        return self.rfile.read(length) if length > 0 else b""

    def _read_records(self):
        """Return the RecordSet posted as {"tableData": [...]}, or None."""
        try:
            payload = json.loads(self._read_body() or b"null")
        except (ValueError, UnicodeDecodeError):
            return None
        if not isinstance(payload, dict):
            return None
        rows = payload.get("tableData")
        if not isinstance(rows, list):
            return None
        return records_from_dicts(rows) or None

    # -- routes -------------------------------------------------------------

    def do_GET(self) -> None:  # noqa: N802
        if urlparse(self.path).path in _HEALTH_PATHS:
            self._send_json(200, _HEALTH_BODY)
        else:
            self._fail(404, "Not found")

    def do_POST(self) -> None:  # noqa: N802
        route = urlparse(self.path).path
        if route == "/api/parse-document":
            self._parse_document()
        elif route == "/api/generate-ppt":
            self._generate_ppt()
        elif route == "/api/generate-html":
            self._generate_html()
        else:
            self._fail(404, "Not found")

    def _parse_document(self) -> None:
        query = parse_qs(urlparse(self.path).query)
        filename = (query.get("filename") or [""])[0]
        content_type = self.headers.get("Content-Type")
        data = self._read_body()

        try:
            payload = load_bytes(data, filename, content_type)
        except InputRejected as exc:
            logger.warning("Rejected upload %r: %s", filename, exc.message)
            self._fail(415, exc.message)
            return
        except DecodeFailure as exc:
            logger.warning("Could not process file %r: %s", filename, exc.message)
            self._fail(422, exc.message)
            return

        records = extract_records(payload, self.cfg, self.recognizer)
        self._send_json(200, {
            "success": True,
            "fileName": payload.source_name,
            "tableData": records_to_dicts(records),
        })

    def _generate_ppt(self) -> None:
        records = self._read_records()
        if records is None:
            self._fail(400, INVALID_DATA)
            return
        try:
            body = render_pptx_bytes(records, self.cfg)
        except Exception as exc:
            logger.error("PowerPoint generation failed: %s", exc, exc_info=True)
            self._fail(500, f"Error generating PowerPoint: {exc}")
            return
        logger.info("Generated deck for %d row(s)", len(records))
        self._send(200, body, PPTX_MIME, {
            "Content-Disposition": 'attachment; filename="WorkDoneStatus.pptx"',
        })

    def _generate_html(self) -> None:
        records = self._read_records()
        if records is None:
            self._fail(400, INVALID_DATA)
            return
        try:
            body = render_html(records, self.cfg).encode("utf-8")
        except Exception as exc:
            logger.error("HTML generation failed: %s", exc, exc_info=True)
            self._fail(500, f"Error generating HTML: {exc}")
            return
        self._send(200, body, "text/html; charset=utf-8")

    def log_message(self, fmt: str, *args: object) -> None:  # noqa: D102
        logger.debug("%s - %s", self.address_string(), fmt % args)


def make_handler(cfg: dict[str, Any]) -> type:
    """Bind configuration to a handler class for one server instance."""
    return type(
        "BoundStatusDeckHandler",
        (StatusDeckHandler,),
        {"cfg": cfg, "recognizer": KnownPatternRecognizer.from_config(cfg)},
    )


def build_server(cfg: dict[str, Any], host: str = None, port: int = None) -> ThreadingHTTPServer:
    """Create (but do not start) the HTTP server.

    Args:
        cfg: Full configuration dict.
        host: Bind address; defaults to server.host.
        port: TCP port; defaults to server.port. 0 picks a free port.

    Returns:
        ThreadingHTTPServer ready for serve_forever().
    """
    host = cfg["server"]["host"] if host is None else host
    port = cfg["server"]["port"] if port is None else port
    server = ThreadingHTTPServer((host, port), make_handler(cfg))
    server.daemon_threads = True
    return server


def main(argv=None) -> None:
    parser = argparse.ArgumentParser(description="Work Done Status Deck HTTP service")
    parser.add_argument("--config", default="config.yaml")
    parser.add_argument("--host", default=None)
    parser.add_argument("--port", type=int, default=None)
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s | %(levelname)-8s | %(name)-20s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stdout,
    )
    cfg = load_config(args.config)
    server = build_server(cfg, args.host, args.port)
    host, port = server.server_address[:2]
    logger.info("Listening on %s:%d  [GET /health, POST /api/*]", host, port)
    try:
        server.serve_forever()
    except KeyboardInterrupt:
        logger.info("Shutting down")
    finally:
        server.server_close()


if __name__ == "__main__":
    main()
