"""
Artifact naming and writing
"""

import hashlib
import logging
import re
from pathlib import Path

from ..errors import SerializationIOError

logger = logging.getLogger(__name__)

CALL_GRAPH_STEM = "callgraph"

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9_.-]+")
_MAX_SLUG_LENGTH = 64


def slugify(text: str) -> str:
    """Filesystem-safe version of a query string"""
    slug = _UNSAFE_CHARS.sub("_", text).strip("._")
    return slug[:_MAX_SLUG_LENGTH] or "target"


def callers_file_stem(query: str, by_hash: bool = False) -> str:
    """File name (without extension) for one find-callers report.

    Path queries get a short digest of the raw query appended, so two
    queries that slugify the same still land in different files.
    """
    if by_hash:
        return f"callers_by_hash_{slugify(query)}"

    digest = hashlib.blake2b(query.encode('utf-8'), digest_size=4).hexdigest()
    return f"callers_{slugify(query)}_{digest}"


def write_artifact(path: Path, content: str) -> Path:
    """Write one artifact, raising SerializationIOError on failure"""
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, 'w', encoding='utf-8') as f:
            f.write(content)
    except OSError as e:
        raise SerializationIOError(str(path), str(e)) from e

    logger.info("Wrote %s", path)
    return path
