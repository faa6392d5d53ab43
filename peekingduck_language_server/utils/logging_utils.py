import logging
import sys
from typing import Optional


def configure_server_logging(
    *,
    level: int = logging.INFO,
    log_file: Optional[str] = None,
    formatter: Optional[logging.Formatter] = None,
) -> None:
    """Configure root logging for the language server:

    - every record at or above ``level`` goes to stderr
    - if ``log_file`` is given, the same records are also written to that file

    stdout is left to the LSP transport.
    """

    root = logging.getLogger()
    root.handlers.clear()
    root.setLevel(level)

    if formatter is None:
        formatter = logging.Formatter("%(name)s - %(levelname)s - %(message)s")

    stderr_handler = logging.StreamHandler(stream=sys.stderr)
    stderr_handler.setLevel(level)
    stderr_handler.setFormatter(formatter)
    root.addHandler(stderr_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        root.addHandler(file_handler)
