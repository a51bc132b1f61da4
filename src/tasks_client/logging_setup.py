from __future__ import annotations

import logging
from pathlib import Path
from typing import Union


# PUBLIC_INTERFACE
def setup_logging(log_file: Union[str, Path], level: int = logging.INFO) -> None:
    """
    Send all client logging to ``log_file``.

    The terminal belongs to the UI, so no console handler is attached.
    Call this ONCE, before the first log call.
    """
    path = Path(log_file)
    path.parent.mkdir(parents=True, exist_ok=True)

    root = logging.getLogger()
    root.setLevel(level)

    # Remove any pre-existing handlers to avoid duplicates.
    for h in list(root.handlers):
        root.removeHandler(h)

    fh = logging.FileHandler(str(path), encoding="utf-8")
    fh.setLevel(level)
    fh.setFormatter(
        logging.Formatter(
            fmt="%(asctime)s.%(msecs)03d %(levelname)s %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    )
    root.addHandler(fh)

    # Route warnings.warn(...) into the log file instead of the screen.
    logging.captureWarnings(True)
