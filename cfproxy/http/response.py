from typing import Iterable, Union

from werkzeug.wrappers import Response as WerkzeugResponse


class Response(WerkzeugResponse):
    """
    werkzeug's Response with helpers to copy an upstream reply and to replace the body.
    """

    def update_from(self, other: WerkzeugResponse):
        """
        Takes over status, body and headers of ``other``. Headers of this response that ``other`` does not set are
        kept.
        """
        self.status_code = other.status_code
        self.response = other.response
        self.headers.update(other.headers)

    def set_response(self, response: Union[str, bytes, bytearray, Iterable[bytes], None]):
        """
        Replaces the body. Strings and bytes go through ``data`` (so ``Content-Length`` follows), None empties the
        body, and any other iterable of bytes is used as it is.
        """
        if response is None:
            self.response = []
        elif isinstance(response, (str, bytes, bytearray)):
            self.data = response
        else:
            self.response = response

        return self

    def set_xml(self, document: Union[str, bytes]):
        """Sets an XML document as body, served as ``text/xml`` like the CloudFormation query API does."""
        self.data = document
        self.mimetype = "text/xml"
