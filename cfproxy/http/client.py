import abc
import logging
from urllib.parse import urlparse

import requests
from werkzeug import Request
from werkzeug.datastructures import Headers

from cfproxy.constants import DEFAULT_UPSTREAM_TIMEOUT
from cfproxy.exceptions import UpstreamUnavailableError
from cfproxy.http.request import get_raw_current_url, get_raw_path
from cfproxy.http.response import Response
from cfproxy.utils.strings import to_str

LOG = logging.getLogger(__name__)

# headers that describe the upstream connection or the encoding of the original body, which are recomputed for
# the buffered response
HOP_BY_HOP_HEADERS = (
    "Connection",
    "Keep-Alive",
    "Transfer-Encoding",
    "Content-Encoding",
    "Content-Length",
)


class HttpClient(abc.ABC):
    """
    Performs werkzeug requests against a server and returns werkzeug responses.
    """

    def request(self, request: Request, server: str | None = None) -> Response:
        """
        Sends the request and returns the reply.

        :param request: the request to send
        :param server: where to send it (``http://host:port`` or ``host:port``), by default the host of the request
        :return: the reply
        """
        raise NotImplementedError

    def close(self):
        pass

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.close()


class SimpleRequestsClient(HttpClient):
    """
    HttpClient that performs requests with a ``requests.Session`` and buffers the entire reply, so the body can
    be inspected (and rewritten) before it is returned to the caller.
    """

    session: requests.Session
    timeout: float

    def __init__(self, session: requests.Session = None, timeout: float = DEFAULT_UPSTREAM_TIMEOUT):
        self.session = session or requests.Session()
        self.timeout = timeout

    @staticmethod
    def _get_destination_url(request: Request, server: str | None = None) -> str:
        scheme, host = request.scheme, request.host
        if server:
            # either a URL ("https://cloudformation.us-east-1.amazonaws.com") or a bare "host:port"
            if "://" in server:
                parts = urlparse(server)
                scheme, host = parts.scheme, parts.netloc
            else:
                host = server

        return get_raw_current_url(
            scheme,
            host,
            request.root_path,
            get_raw_path(request),
            to_str(request.query_string, "latin-1"),
        )

    def request(self, request: Request, server: str | None = None) -> Response:
        """
        Performs the given HTTP request using the requests library and returns the buffered reply.

        :param request: the request to perform
        :param server: where to send it, by default the host of the request
        :return: the response.
        :raises UpstreamUnavailableError: if the server could not be reached or did not reply in time
        """
        url = self._get_destination_url(request, server)

        headers = dict(request.headers.items())

        # urllib3 would otherwise add "Accept-Encoding: gzip, deflate"
        if not request.headers.get("accept-encoding"):
            headers["accept-encoding"] = "identity"

        try:
            response = self.session.request(
                method=request.method,
                # the query string is part of the url to preserve its encoding (it may be signed)
                url=url,
                headers=headers,
                data=request.get_data(),
                timeout=self.timeout,
                allow_redirects=False,
            )
        except requests.RequestException as e:
            LOG.debug("error while forwarding %s %s: %s", request.method, url, e)
            raise UpstreamUnavailableError(url, e) from e

        response_headers = Headers(dict(response.headers))
        for header in HOP_BY_HOP_HEADERS:
            response_headers.pop(header, None)

        final_response = Response(
            response=response.content,
            status=response.status_code,
            headers=response_headers,
        )

        if request.method == "HEAD":
            # HEAD replies have no body, keep the content length the server announced
            final_response.content_length = response.headers.get("Content-Length", 0)

        return final_response

    def close(self):
        self.session.close()
