"""Constants for the strois S3 client."""

# Signing
SERVICE_NAME = "s3"
DEFAULT_REGION = "us-east-1"
DEFAULT_ACTIONS_EXPIRES_IN = 60 * 60

# Transport
DEFAULT_TIMEOUT_SECONDS = 60.0
USER_AGENT = "strois-python"
ACCEPT_ENCODING = "identity"

# S3 API
S3_XML_NAMESPACE = "http://s3.amazonaws.com/doc/2006-03-01/"
LIST_TYPE_V2 = "2"
ENCODING_TYPE_URL = "url"
MAX_KEY_LENGTH = 1024

# Environment variables read by Builder.from_environment
ENV_ENDPOINT = "S3_ENDPOINT"
ENV_ACCESS_KEY = "S3_ACCESS_KEY"
ENV_SECRET_KEY = "S3_SECRET_KEY"
ENV_SESSION_TOKEN = "S3_SESSION_TOKEN"
ENV_REGION = "S3_REGION"
ENV_PATH_STYLE = "S3_PATH_STYLE"
ENV_TIMEOUT = "S3_TIMEOUT_SECONDS"

# Operation names used for metrics and logs
OP_CREATE_BUCKET = "create_bucket"
OP_DELETE_BUCKET = "delete_bucket"
OP_HEAD_BUCKET = "head_bucket"
OP_PUT_OBJECT = "put_object"
OP_GET_OBJECT = "get_object"
OP_DELETE_OBJECT = "delete_object"
OP_LIST_OBJECTS = "list_objects"
