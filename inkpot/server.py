from __future__ import annotations

import functools
import http.server
import socketserver
import sys
from pathlib import Path

from .errors import IoError


def serve(directory: Path, port: int) -> None:
    handler = functools.partial(http.server.SimpleHTTPRequestHandler, directory=str(directory))
    try:
        httpd = socketserver.TCPServer(("", port), handler)
    except OSError as exc:
        raise IoError(f"error binding port {port} to serve", directory) from exc

    print(f"Serving {directory} at http://localhost:{port}")
    sys.stdout.flush()

    try:
        httpd.serve_forever()
    except KeyboardInterrupt:
        pass
    finally:
        httpd.server_close()
