"""Helpers to work with the raw WSGI environment of a request that is about to be forwarded."""
from typing import TYPE_CHECKING, Mapping, Optional, Union
from urllib.parse import urlparse

from werkzeug.datastructures import Headers

if TYPE_CHECKING:
    from _typeshed.wsgi import WSGIEnvironment


def set_environment_headers(environ: "WSGIEnvironment", headers: Union[Mapping, Headers]):
    """
    Replaces all ``HTTP_*`` keys of the environment with the given headers. Repeated headers are joined with a
    comma, ``Content-Type`` and ``Content-Length`` are stored without the ``HTTP_`` prefix.
    """
    # headers may be a view on ``environ`` itself, so they are collected before anything is removed
    collected = {}
    for name, value in headers.items():
        key = name.upper().replace("-", "_")
        if key not in ("CONTENT_TYPE", "CONTENT_LENGTH"):
            key = "HTTP_" + key
        collected[key] = f"{collected[key]},{value}" if key in collected else value

    for key in [k for k in environ if k.startswith("HTTP_")]:
        del environ[key]

    environ.update(collected)


def get_raw_path(request) -> str:
    """
    Returns the path of the request as it appeared on the request line (percent-encoding intact), without the
    query string. Falls back to the decoded path if the server did not record a ``RAW_URI``.
    """
    return urlparse(request.environ.get("RAW_URI", request.path)).path


def get_raw_current_url(
    scheme: str,
    host: str,
    root_path: Optional[str] = None,
    path: Optional[str] = None,
    query_string: Optional[str] = None,
) -> str:
    """
    Joins the URL parts without quoting any of them, so an already encoded path and query string reach the
    backend byte for byte.

    :param scheme: ``http`` or ``https``
    :param host: the host (and port) to send the request to
    :param root_path: the prefix the application is mounted under
    :param path: the path after ``root_path``
    :param query_string: the raw query string (without ``?``)
    """
    if root_path is None:
        return f"{scheme}://{host}/"

    url = f"{scheme}://{host}{root_path.rstrip('/')}/"
    if path is None:
        return url

    url += path.lstrip("/")
    if query_string:
        url += "?" + query_string
    return url
