"""
Audit Log

Writes each prompt/response exchange to a file named after the request
time, the mode and an xxh64 hash of the diff. Exchanges that land on the
same name are stacked newest first. Write failures never reach the caller.
"""

import logging
from datetime import datetime
from pathlib import Path

import xxhash

from aic2 import REVIEW

logger = logging.getLogger(__name__)

FILE_PREFIX = "aic2"


def diff_hash(diff: str) -> str:
    """16 hex digit xxh64 digest (seed 0) of the diff text."""
    return xxhash.xxh64(diff.encode('utf-8'), seed=0).hexdigest()


def log_file_name(now: datetime, diff: str, mode: str) -> str:
    prefix = f"{FILE_PREFIX}_review" if mode == REVIEW else FILE_PREFIX
    return f"{prefix}_{now:%Y-%m-%d}_{now:%H-%M-%S}_{diff_hash(diff)}.log"


def format_entry(backend_label: str, reply: str, system_prompt: str) -> str:
    return f"[{backend_label}]\n- Response\n{reply}\n\n- System Prompt\n{system_prompt}"


class AuditLogger:
    """Side-channel sink for exchanges; does nothing unless enabled."""

    def __init__(self, logs_dir: str | Path, enabled: bool = False):
        self.logs_dir = Path(logs_dir).expanduser()
        self.enabled = enabled

    def path_for(self, now: datetime, diff: str, mode: str) -> Path:
        return self.logs_dir / log_file_name(now, diff, mode)

    def record(self, backend_label: str, diff: str, system_prompt: str, reply: str,
               mode: str, now: datetime) -> Path | None:
        """Write one exchange. Returns the file path, or None if skipped or failed."""
        if not self.enabled:
            return None

        path = self.path_for(now, diff, mode)
        entry = format_entry(backend_label, reply, system_prompt)
        try:
            if path.exists():
                previous = path.read_text(encoding='utf-8')
                content = f"{entry}\n\n{previous}"
            else:
                content = f"{entry}\n\n[Git Diff]\n{diff}"
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(content, encoding='utf-8')
        except (OSError, UnicodeDecodeError) as e:
            logger.warning("Could not write log file %s: %s", path, e)
            return None

        logger.debug("Logged %s exchange to %s", backend_label, path)
        return path
