import logging
from typing import Optional, Union
from xml.parsers.expat import ExpatError

import xmltodict

from cfproxy.exceptions import MalformedBackendReplyError
from cfproxy.utils.strings import to_str, truncate
from cfproxy.utils.xml import find_first_leaf, strip_xmlns

LOG = logging.getLogger(__name__)

STACK_STATUS_TAG = "StackStatus"


def extract_stack_status(body: Union[str, bytes]) -> Optional[str]:
    """
    Extracts the ``StackStatus`` of a ``DescribeStacks`` reply. The envelope around the element is not
    interpreted, the first ``StackStatus`` element of the document is used::

        <DescribeStacksResponse xmlns="http://cloudformation.amazonaws.com/doc/2010-05-15/">
          <DescribeStacksResult>
            <Stacks>
              <member>
                <StackName>my-stack</StackName>
                <StackStatus>UPDATE_IN_PROGRESS</StackStatus>
                ...

    :param body: the reply body
    :return: the stack status, or None if the reply does not contain one (e.g., an ``ErrorResponse``)
    :raises MalformedBackendReplyError: if the body is not a well-formed XML document
    """
    try:
        document = strip_xmlns(xmltodict.parse(body))
    except ExpatError as e:
        LOG.debug("unable to parse CloudFormation reply %s: %s", truncate(to_str(body, errors="replace")), e)
        raise MalformedBackendReplyError(f"unable to parse CloudFormation reply: {e}", body) from e

    return find_first_leaf(document, STACK_STATUS_TAG)
