"""
Stateless route handlers: echo, user-agent and the root path.
"""

from ..http.request import HTTPRequest
from ..http.response import HTTPResponse


def echo(request: HTTPRequest, response: HTTPResponse, text: str) -> None:
    """GET /echo/<text>: send the segment back verbatim, not URL-decoded."""
    response.set_body(text)


def user_agent(request: HTTPRequest, response: HTTPResponse) -> None:
    """GET /user-agent: send the User-Agent header ("" when absent)."""
    response.set_body(request.user_agent)


def index(request: HTTPRequest, response: HTTPResponse) -> None:
    # 200 OK with no body and no Content-Length
    pass
