from io import BytesIO
from typing import Mapping, Union
from urllib.parse import urlparse

from werkzeug import Request
from werkzeug.datastructures import Headers
from werkzeug.test import EnvironBuilder

from .client import HttpClient, SimpleRequestsClient
from .request import get_raw_path, set_environment_headers
from .response import Response


class Proxy(HttpClient):
    """
    Relays incoming requests to the CloudFormation endpoint. Method, path, query string, headers and body are sent
    as they arrived, only the scheme and host of the target change.
    """

    def __init__(self, forward_base_url: str, client: HttpClient = None, preserve_host: bool = True):
        """
        :param forward_base_url: the backend to send requests to, e.g.,
            ``https://cloudformation.us-east-1.amazonaws.com``
        :param client: the HTTP client that performs the upstream call
        :param preserve_host: keep the ``Host`` header of the incoming request, which request signatures of the
            deployment tool are computed over. If False (or the request has none), the host of
            ``forward_base_url`` is sent.
        """
        self.forward_base_url = forward_base_url
        self.client = client or SimpleRequestsClient()
        self.preserve_host = preserve_host

        target = urlparse(forward_base_url)
        self._server = f"{target.scheme}://{target.netloc}"

    def request(self, request: Request, server: str | None = None) -> Response:
        """Same as ``forward(request)``, the server is always the one of ``forward_base_url``."""
        return self.forward(request)

    def forward(self, request: Request, headers: Union[Headers, Mapping[str, str]] = None) -> Response:
        """
        Sends a copy of the request to the backend and returns its buffered reply.

        :param request: the incoming request
        :param headers: extra headers for the upstream request
        :return: the reply of the backend
        :raises UpstreamUnavailableError: if the backend could not be reached
        """
        extra = Headers(headers) if headers else Headers()

        if client_ip := request.remote_addr:
            forwarded_for = request.headers.get("X-Forwarded-For")
            extra["X-Forwarded-For"] = f"{forwarded_for}, {client_ip}" if forwarded_for else client_ip

        upstream_request = _copy_request(request, self.forward_base_url, extra)

        if self.preserve_host and "Host" in request.headers:
            upstream_request.headers["Host"] = request.headers["Host"]

        return self.client.request(upstream_request, server=self._server)

    def close(self):
        self.client.close()


def _copy_request(request: Request, base_url: str, headers: Headers = None) -> Request:
    """
    Builds the upstream request: a fresh environment pointed at ``base_url`` that carries the payload, raw path and
    headers of ``request``.

    :param request: the incoming request
    :param base_url: the backend URL
    :param headers: headers to set on top of the incoming ones
    :return: a request with mutable headers
    """
    set_environment_headers(request.environ, request.headers)
    # HTTP/1.0 clients may leave out the Host header, which the builder cannot do without
    request.environ.setdefault("HTTP_HOST", request.host)

    data = request.get_data()
    raw_path = get_raw_path(request) or "/"

    builder = EnvironBuilder.from_environ(request.environ)
    builder.base_url = base_url
    builder.headers["Host"] = builder.host
    if headers:
        builder.headers.update(headers)

    # the buffered payload is sent in one piece
    builder.input_stream = BytesIO(data)
    builder.content_length = len(data)
    builder.headers.pop("Transfer-Encoding", None)

    upstream_request = builder.get_request()
    upstream_request.environ["RAW_URI"] = raw_path
    upstream_request.headers = Headers(upstream_request.headers)

    return upstream_request
