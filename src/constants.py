"""Constants used in the project."""

from enum import Enum


class ExitCodes(Enum):
    """Exit codes for the program.

    Args:
        Enum (int): Exit codes for the program.
    """

    SUCCESS = 0
    FILE_ERROR = 1
    TOOLCHAIN_ERROR = 2
    CONFIG_ERROR = 3


class FileRole(Enum):
    """Files the go command produces for a downloaded module version.

    Args:
        Enum (string): Role name, matching the proxy URL suffix.
    """

    INFO = "info"
    MOD = "mod"
    ZIP = "zip"


class Constants:  # pylint: disable=too-few-public-methods
    """General constants used in the project.
    Data holder for configuration constants; not intended to provide behavior.
    """

    DEFAULT_LISTEN = "0.0.0.0:8081"
    DEFAULT_GO_BINARY = "go"
    LOG_FORMAT = "[%(levelname)s] %(message)s"
    ENV_LOG_LEVEL = "GOMODGATE_LOG_LEVEL"

    # Version list cache
    LIST_EXPIRE_SEC = 5 * 60
    LIST_CACHE_FILE = "listproxy"
    CACHE_DIR_MODE = 0o755
    DOWNLOAD_SUBDIR = "pkg/mod/cache/download"

    LATEST = "latest"
    HEALTH_PATH = "/_gomodgate/health"
