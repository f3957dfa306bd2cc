"""
This module provides file-based logs that complement the console logger.

`ErrorLog` appends human-readable failure records to a text file, and
`SuccessLog` keeps a machine-readable YAML list of finished conversions.
"""

import random
import string
import threading
from datetime import datetime
from pathlib import Path
from typing import Dict, List

import yaml
from loguru import logger

from ..config.common import RANDOM_TAG_LENGTH


class Log:
    """
    Base class for file logs: resolves the log directory and creates it.
    """

    linesep_marker: str = "=" * 50

    def __init__(self, log_dir: Path):
        self.log_file_path: Path
        self.log_dir: Path = log_dir.resolve()
        self.log_dir.mkdir(parents=True, exist_ok=True)

    @staticmethod
    def generate_random_string(length: int = RANDOM_TAG_LENGTH) -> str:
        return "".join(random.choices(string.ascii_uppercase + string.digits, k=length))


class ErrorLog(Log):
    """Appends error records to a plain text file."""

    DEFAULT_ERROR_FILENAME = "error.txt"

    def __init__(self, error_log_dir: Path, filename: str = DEFAULT_ERROR_FILENAME):
        super().__init__(error_log_dir)
        self.log_file_path = self.log_dir / filename

    def write(self, *error_messages: str):
        """
        Appends the messages, one per line, followed by a separator line.
        """
        if not error_messages:
            return

        content_to_write = "\n".join(error_messages) + "\n" + self.linesep_marker + "\n"
        try:
            with self.log_file_path.open("a", encoding="utf-8") as f:
                f.write(content_to_write)
        except OSError as e:
            # Keep the message in the console log if the file is not writable.
            logger.error(f"Failed to write to error log {self.log_file_path}: {e}")
            for msg in error_messages:
                logger.error(f"  - {msg}")


class SuccessLog(Log):
    """
    Records finished conversions in a YAML file.

    Each process gets its own dated file so concurrent runs never write to the
    same report. Writes from threads of one process are serialized.
    """

    def __init__(self, success_log_dir: Path):
        super().__init__(success_log_dir)
        date_str = datetime.now().strftime("%Y%m%d")
        self.log_file_path = self.log_dir / f"log_{date_str}_{self.generate_random_string()}.yaml"
        self._lock = threading.Lock()

    def read_entries(self) -> List[Dict]:
        if not self.log_file_path.is_file():
            return []
        try:
            with self.log_file_path.open("r", encoding="utf-8") as f:
                entries = yaml.safe_load(f)
        except yaml.YAMLError as e:
            logger.error(f"Could not parse success log {self.log_file_path}: {e}")
            return []
        return entries if isinstance(entries, list) else []

    def write(self, new_log_entry: dict):
        """
        Appends one entry, rewriting the file so it always stays a valid YAML list.
        """
        entry = dict(new_log_entry)
        entry.setdefault("logged_at", datetime.now().isoformat(timespec="seconds"))

        with self._lock:
            entries = self.read_entries()
            entries.append(entry)
            try:
                with self.log_file_path.open("w", encoding="utf-8") as f:
                    yaml.dump(entries, f, default_flow_style=False, sort_keys=False, allow_unicode=True)
            except OSError as e:
                logger.error(f"Failed to write success log {self.log_file_path}: {e}")
