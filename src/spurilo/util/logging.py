# spurilo/util/logging.py
from __future__ import annotations

import datetime
import sys

def log(msg: str) -> None:
    """Print a timestamped log line (local time with timezone)."""
    ts = datetime.datetime.now().astimezone().isoformat(timespec="seconds")
    print(f"{ts}  {msg}")

def warn(msg: str) -> None:
    """Print a warning line on stderr."""
    print(f"Warning: {msg}", file=sys.stderr)
