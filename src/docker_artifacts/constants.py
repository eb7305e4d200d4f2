DOCKERFILE_NAME = "Dockerfile"
DOCKERFILE_HEADER = "# Auto Generated Dockerfile"

# Fixed Dockerfile values
DEFAULT_MAINTAINER = "dev@ballerina.io"
DEFAULT_ARTIFACT_DIR = "/home/ballerina"
DEFAULT_RUN_COMMAND = "ballerina run"
DEFAULT_DEBUG_PORT = 5005

DEFAULT_DOCKER_HOST = "unix://var/run/docker.sock"
DEFAULT_ENGINE_TIMEOUT = 60  # seconds, per HTTP request to the daemon

# TLS material expected inside a docker cert directory
TLS_CA_CERT = "ca.pem"
TLS_CLIENT_CERT = "cert.pem"
TLS_CLIENT_KEY = "key.pem"
