"""
Serve one precomputed report over HTTP.

The report is rendered once before the listener binds; request handlers only
read those bytes, so concurrent requests need no locking.
"""
from __future__ import annotations

import sys
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer

from .errors import ConfigError
from .models import Report, Settings
from .render import render_html, render_json


def make_handler(pages: dict[str, tuple[str, bytes]]) -> type[BaseHTTPRequestHandler]:
    class Handler(BaseHTTPRequestHandler):
        def do_GET(self) -> None:  # noqa: N802
            path = self.path.split("?", 1)[0]
            page = pages.get(path)
            if page is None:
                self.send_error(404, "Not Found")
                return
            content_type, body = page
            self.send_response(200)
            self.send_header("Content-Type", content_type)
            self.send_header("Content-Length", str(len(body)))
            self.end_headers()
            self.wfile.write(body)

        def log_message(self, fmt: str, *args: object) -> None:
            return

    return Handler


def make_server(report: Report, settings: Settings) -> ThreadingHTTPServer:
    html = ("text/html; charset=utf-8", render_html(report, settings).encode("utf-8"))
    pages = {
        "/": html,
        "/index.html": html,
        "/report.json": ("application/json", render_json(report).encode("utf-8")),
    }
    try:
        return ThreadingHTTPServer((settings.host, settings.port), make_handler(pages))
    except OSError as e:
        raise ConfigError(f"cannot listen: {e}", listen=settings.listen) from e


def serve(report: Report, settings: Settings) -> None:
    server = make_server(report, settings)
    host, port = server.server_address[:2]
    print(f"Listening on {host or '*'}:{port}...", file=sys.stderr, flush=True)
    try:
        server.serve_forever()
    except KeyboardInterrupt:
        pass
    finally:
        server.server_close()
