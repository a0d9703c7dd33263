"""Helpers for writing JSON and error responses from an HTTP handler."""

import json
from http import HTTPStatus


def write_json(handler, obj) -> None:
    """Send ``obj`` as a JSON response, or an error response if it cannot be encoded."""
    try:
        data = json.dumps(obj, separators=(",", ":")).encode("utf-8")
    except (TypeError, ValueError) as exc:
        write_error(handler, exc)
        return
    handler.send_response(HTTPStatus.OK)
    handler.send_header("Content-type", "application/json")
    handler.send_header("Content-Length", str(len(data)))
    handler.end_headers()
    handler.wfile.write(data)


def write_error(handler, error) -> None:
    """Send an internal server error response whose body is the error text."""
    body = str(error).encode("utf-8")
    handler.send_response(HTTPStatus.INTERNAL_SERVER_ERROR)
    handler.send_header("Content-Length", str(len(body)))
    handler.end_headers()
    handler.wfile.write(body)