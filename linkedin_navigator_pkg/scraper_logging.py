import logging
import sys
from typing import List, Optional

from .config import LOG_LEVEL

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(level: Optional[str] = None) -> None:
    """Route all package logging to stderr.

    stdout is reserved for the MCP stdio protocol, so nothing in the package
    prints; hosts call this once before serving.
    """
    logging.basicConfig(
        level=(level or LOG_LEVEL).upper(),
        format=LOG_FORMAT,
        stream=sys.stderr,
    )
    # httpx logs every request line at INFO, including query strings.
    logging.getLogger("httpx").setLevel(logging.WARNING)


def add_debug(debug_list: List[str], tag: str) -> None:
    """Append a debug tag to the in-flight list.

    Using small, structured tags helps trace the executed strategies and
    decisions without exposing sensitive data.
    """
    debug_list.append(tag)
