# ABOUTME: Root logger configuration for the circulation CLI.
# ABOUTME: Routes log records through Rich to stderr so they stay apart from shell output.

import logging

from rich.console import Console
from rich.logging import RichHandler


def setup_logging(verbosity: int = 0) -> None:
    """Configure the root logger once for the current process.

    Args:
        verbosity: 0 for warnings only, 1 for INFO, 2 or more for DEBUG.
    """
    root = logging.getLogger()
    if root.handlers:
        return

    if verbosity >= 2:
        level = logging.DEBUG
    elif verbosity == 1:
        level = logging.INFO
    else:
        level = logging.WARNING

    handler = RichHandler(console=Console(stderr=True), show_path=False)
    handler.setFormatter(logging.Formatter("%(name)s: %(message)s"))
    root.setLevel(level)
    root.addHandler(handler)
