"""
Lightweight mock of the GTI dialer's postback endpoint for local runs.

Endpoints:
- POST /postback/<call_uuid>  -> stores the request, returns 200 (or 503, see below)
- GET  /_requests             -> returns every stored request
- GET  /_last                 -> returns the last stored request
- POST /_reset                -> clears stored requests and the failure budget
- GET  /_health               -> returns 200

MOCK_GTI_FAIL_COUNT=N answers the first N postbacks with 503 so the
dispatcher's retries can be watched end to end.
"""
import json
import os
from http.server import BaseHTTPRequestHandler, HTTPServer
from typing import List
from urllib.parse import unquote


REQUESTS: List[dict] = []
FAILURES_LEFT = int(os.getenv("MOCK_GTI_FAIL_COUNT", "0"))


def reset(fail_count: int = 0) -> None:
    global FAILURES_LEFT
    REQUESTS.clear()
    FAILURES_LEFT = fail_count


class Handler(BaseHTTPRequestHandler):
    def _send_json(self, status_code: int, payload) -> None:
        body = json.dumps(payload).encode("utf-8")
        self.send_response(status_code)
        self.send_header("Content-Type", "application/json")
        self.send_header("Content-Length", str(len(body)))
        self.end_headers()
        self.wfile.write(body)

    def do_GET(self):  # noqa: N802
        if self.path == "/_health":
            return self._send_json(200, {"status": "ok"})

        if self.path == "/_requests":
            return self._send_json(200, {"requests": REQUESTS})

        if self.path == "/_last":
            return self._send_json(200, {"last": REQUESTS[-1] if REQUESTS else None})

        return self._send_json(404, {"error": "not_found"})

    def do_POST(self):  # noqa: N802
        global FAILURES_LEFT

        if self.path == "/_reset":
            reset()
            return self._send_json(200, {"status": "reset"})

        if self.path.startswith("/postback/"):
            length = int(self.headers.get("Content-Length", "0"))
            raw = self.rfile.read(length).decode("utf-8") if length else ""
            try:
                payload = json.loads(raw) if raw else {}
            except json.JSONDecodeError:
                payload = {"_raw": raw}

            REQUESTS.append({
                "call_uuid": unquote(self.path[len("/postback/"):]),
                "headers": {k.lower(): v for k, v in self.headers.items()},
                "payload": payload,
            })

            if FAILURES_LEFT > 0:
                FAILURES_LEFT -= 1
                return self._send_json(503, {"error": "unavailable"})
            return self._send_json(200, {"status": "received"})

        return self._send_json(404, {"error": "not_found"})

    def log_message(self, format, *args):  # noqa: A003
        # Keep test output clean.
        return


def main() -> None:
    port = int(os.getenv("MOCK_GTI_PORT", "8081"))
    server = HTTPServer(("0.0.0.0", port), Handler)
    server.serve_forever()


if __name__ == "__main__":
    main()
