import cfproxy

# cfproxy version
VERSION = cfproxy.__version__

# default CloudFormation endpoint the proxy forwards to
DEFAULT_CLOUDFORMATION_ENDPOINT = "cloudformation.us-east-1.amazonaws.com"
DEFAULT_CLOUDFORMATION_SCHEME = "https"

# host to bind to when starting the proxy
BIND_HOST = "0.0.0.0"

# port the proxy listens on by default
DEFAULT_PORT_GATEWAY = 8442

# seconds until a forwarded call to CloudFormation is abandoned
DEFAULT_UPSTREAM_TIMEOUT = 30

# seconds between two periodic refreshes of the status card
DEFAULT_BROADCAST_INTERVAL = 15

# query API actions the proxy interprets (everything else is passed through)
ACTION_CREATE_CHANGE_SET = "CreateChangeSet"
ACTION_DESCRIBE_STACKS = "DescribeStacks"

# synthetic stack statuses sent to the deployment tool for skipped stacks
STACK_STATUS_CREATE_COMPLETE = "CREATE_COMPLETE"
STACK_STATUS_UPDATE_COMPLETE = "UPDATE_COMPLETE"

# XML namespace of CloudFormation query API responses
CLOUDFORMATION_XMLNS = "http://cloudformation.amazonaws.com/doc/2010-05-15/"

# greeting posted to the channel when the command listener connects
SLACK_HELLO_MESSAGE = "let's do this"

# values considered true in environment variables
TRUE_STRINGS = ("1", "true", "True")

# log levels accepted by CFPROXY_LOG
LOG_LEVELS = ("trace", "debug", "info", "warn", "error", "warning")
LOG_LEVEL_TRACE = "trace"
TRACE_LOG_LEVELS = [LOG_LEVEL_TRACE]

# header values masked when printing the configuration
MASKED_VALUE = "****"
