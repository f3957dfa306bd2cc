"""
Per-invocation namespaces inside the shared staging directory.

Concurrent conversions share one staging directory. Each invocation gets a
`StagingSession` whose prefix (nanosecond timestamp, caller id and a random
tag) keeps its files apart from everyone else's, and whose cleanup removes
every file carrying that prefix, whatever created it.
"""
import random
import re
import string
import time
from pathlib import Path

from loguru import logger

from ..config.common import RANDOM_TAG_LENGTH

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9_-]+")


def _safe_component(text: str, limit: int = 40) -> str:
    cleaned = _UNSAFE_CHARS.sub("_", text).strip("_")
    return cleaned[:limit] or "anon"


class StagingSession:
    """
    Context manager owning the temporary files of one invocation.

    Usage:
        with StagingSession(staging_dir, caller_id="42") as session:
            tmp = session.path_for("input.gif")
            ...
        # every file of the session is gone here
    """

    def __init__(self, staging_dir: Path, caller_id: str = "anon"):
        self.staging_dir = staging_dir.resolve()
        self.staging_dir.mkdir(parents=True, exist_ok=True)
        tag = "".join(random.choices(string.ascii_lowercase + string.digits, k=RANDOM_TAG_LENGTH))
        self.prefix = f"{time.time_ns()}_{_safe_component(caller_id)}_{tag}"

    def path_for(self, name: str) -> Path:
        """Returns a staging path for `name` inside this session's namespace."""
        return self.staging_dir / f"{self.prefix}_{_safe_component(Path(name).stem)}{Path(name).suffix.lower()}"

    def owned_files(self) -> list:
        return sorted(self.staging_dir.glob(f"{self.prefix}_*"))

    def cleanup(self):
        """Removes every file of this session from the staging directory."""
        for path in self.owned_files():
            try:
                path.unlink(missing_ok=True)
                logger.trace(f"Removed staging file {path.name}")
            except OSError as e:
                logger.error(f"Could not remove staging file {path}: {e}")

    def __enter__(self) -> "StagingSession":
        return self

    def __exit__(self, exc_type, exc, tb):
        self.cleanup()
        return False
