from typing import Dict, List, Optional

from werkzeug import Request
from werkzeug.datastructures import Headers
from werkzeug.test import EnvironBuilder

from cfproxy.notifications.chat import ChatClient

DESCRIBE_STACKS_REPLY = """<DescribeStacksResponse xmlns="http://cloudformation.amazonaws.com/doc/2010-05-15/">
  <DescribeStacksResult>
    <Stacks>
      <member>
        <StackName>%(name)s</StackName>
        <StackId>arn:aws:cloudformation:us-east-1:000000000000:stack/%(name)s/4b6d9b40</StackId>
        <CreationTime>2023-05-02T08:21:34.045Z</CreationTime>
        <StackStatus>%(status)s</StackStatus>
        <DisableRollback>false</DisableRollback>
      </member>
    </Stacks>
  </DescribeStacksResult>
  <ResponseMetadata>
    <RequestId>b9b4b068-3a41-11e5-94eb-example</RequestId>
  </ResponseMetadata>
</DescribeStacksResponse>
"""


def describe_stacks_reply(name: str, status: str) -> str:
    return DESCRIBE_STACKS_REPLY % {"name": name, "status": status}


def create_change_set_body(name: str, create: bool = False) -> str:
    change_set_type = "CREATE" if create else "UPDATE"
    return (
        f"Action=CreateChangeSet&StackName={name}&ChangeSetName=cs-1&ChangeSetType={change_set_type}"
        f"&Version=2010-05-15"
    )


def describe_stacks_body(name: str) -> str:
    return f"Action=DescribeStacks&StackName={name}&Version=2010-05-15"


class FakeChatClient(ChatClient):
    """ChatClient that records messages instead of sending them."""

    def __init__(self):
        self.posts: List[Dict] = []
        self.updates: List[Dict] = []
        self.fail_with: Optional[Exception] = None

    def post(self, channel, text, attachments=None, thread_ts=None) -> str:
        if self.fail_with:
            raise self.fail_with
        self.posts.append(
            {"channel": channel, "text": text, "attachments": attachments, "thread_ts": thread_ts}
        )
        return "1700000000.%06d" % len(self.posts)

    def update(self, channel, ts, text, attachments=None) -> None:
        if self.fail_with:
            raise self.fail_with
        self.updates.append({"channel": channel, "ts": ts, "text": text, "attachments": attachments})

    def replies(self, thread_ts: str) -> List[str]:
        return [post["text"] for post in self.posts if post["thread_ts"] == thread_ts]




def make_request(
    method: str = "GET",
    path: str = "/",
    body: str = None,
    headers: Dict[str, str] = None,
    query_string: str = None,
    remote_addr: str = None,
    host: Optional[str] = "localhost",
) -> Request:
    """
    Builds a request as the server would hand it to the proxy. ``host=None`` leaves out the Host header, like an
    HTTP/1.0 client does.
    """
    builder = EnvironBuilder(
        path=path,
        method=method,
        data=body,
        headers=headers,
        query_string=query_string,
        environ_base={"REMOTE_ADDR": remote_addr} if remote_addr else None,
    )
    environ = builder.get_environ()
    if host is None:
        environ.pop("HTTP_HOST", None)
    elif not (headers and "Host" in headers):
        environ["HTTP_HOST"] = host

    request = Request(environ)
    request.headers = Headers(request.headers)
    return request
