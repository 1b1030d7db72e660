"""Parsing of store and archive descriptors.

A descriptor is the user-facing string that names a store: a Bolt URI for
a running Neo4j server, or something the transfer layer can fetch (a
local directory, a local ``.zip`` archive or an ``s3://`` reference).
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import PurePosixPath
from urllib.parse import urlparse

SERVER_SCHEMES = frozenset(
    {"bolt", "bolt+s", "bolt+ssc", "neo4j", "neo4j+s", "neo4j+ssc"}
)
ZIP_SUFFIX = ".zip"

_S3_RE = re.compile(r"^s3://(?P<bucket>[^/]+)(?:/(?P<key>.*))?$", re.IGNORECASE)


def is_server_descriptor(descriptor: str) -> bool:
    """Return ``True`` when *descriptor* points at a Neo4j server."""
    scheme = urlparse(descriptor.strip()).scheme.lower()
    return scheme in SERVER_SCHEMES


def is_zip(path: str) -> bool:
    return path.strip().lower().endswith(ZIP_SUFFIX)


def archive_folder_name(file_name: str) -> str:
    """Strip the ``.zip`` suffix from an archive file name."""
    idx = file_name.lower().rfind(ZIP_SUFFIX)
    if idx < 0:
        msg = f"Expected a ZIP archive name but got {file_name!r}"
        raise ValueError(msg)
    return file_name[:idx]


@dataclass(frozen=True)
class S3Path:
    """Bucket/key pair parsed from an ``s3://bucket/key`` reference."""

    bucket: str
    key: str

    @property
    def file(self) -> str:
        """Last path segment of the key (empty for a bucket-only reference)."""
        return PurePosixPath(self.key).name if self.key else ""

    @property
    def is_valid(self) -> bool:
        return bool(self.bucket) and bool(self.file)

    @classmethod
    def parse(cls, value: str) -> S3Path | None:
        """Parse *value*; return ``None`` when it is not an S3 reference."""
        match = _S3_RE.match(value.strip())
        if match is None:
            return None
        return cls(bucket=match.group("bucket"), key=match.group("key") or "")

    def __str__(self) -> str:
        return f"s3://{self.bucket}/{self.key}"
