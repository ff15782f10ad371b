import uuid

from flask import Response, g, request

REQUEST_ID_HEADER = "X-Request-ID"
MAX_REQUEST_ID_LENGTH = 128


def init_request_id() -> str:
    """Take the caller's request id if it is usable, else mint one."""
    incoming = (request.headers.get(REQUEST_ID_HEADER) or "").strip()
    if not incoming or len(incoming) > MAX_REQUEST_ID_LENGTH or not incoming.isprintable():
        incoming = uuid.uuid4().hex
    g.request_id = incoming
    return incoming


def echo_request_id(response: Response) -> Response:
    rid = g.get("request_id")
    if rid:
        response.headers[REQUEST_ID_HEADER] = rid
    return response
