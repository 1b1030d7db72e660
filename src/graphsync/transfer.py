"""Fetching and publishing store archives.

Stores travel as ZIP archives whose single top-level folder is named after
the archive (``graph-enriched-2024-01-31.zip`` holds
``graph-enriched-2024-01-31/graph.json``).  Fetching strips that folder;
archiving adds it back.  Remote archives live on S3 and are moved with a
``boto3`` S3 client, which callers may inject.
"""

from __future__ import annotations

import logging
import shutil
import zipfile
from datetime import date
from pathlib import Path
from pathlib import PurePosixPath

from botocore.exceptions import BotoCoreError
from botocore.exceptions import ClientError

from graphsync.descriptors import S3Path
from graphsync.descriptors import archive_folder_name
from graphsync.descriptors import is_zip
from graphsync.errors import TransferError

logger = logging.getLogger(__name__)

ENRICHED_ARCHIVE_PREFIX = "graph-enriched-"

_S3_ERRORS = (BotoCoreError, ClientError)


def _default_s3_client():
    import boto3

    return boto3.client("s3")


def enriched_archive_name(day: date | None = None) -> str:
    """Dated file name for a synchronized store archive."""
    day = day or date.today()
    return f"{ENRICHED_ARCHIVE_PREFIX}{day.isoformat()}.zip"


# ---------------------------------------------------------------------------
# Fetch
# ---------------------------------------------------------------------------


def fetch(descriptor: str, destination: Path | str, *, s3_client=None) -> Path:
    """Materialize the store named by *descriptor* as directory *destination*.

    *descriptor* is a local directory (copied), a local ``.zip`` archive
    (extracted) or an ``s3://bucket/key.zip`` reference (downloaded next to
    *destination*, then extracted).
    """
    destination = Path(destination)
    s3_path = S3Path.parse(descriptor)
    if s3_path is not None:
        return _fetch_s3(s3_path, destination, s3_client)

    local = Path(descriptor).expanduser()
    if local.is_dir():
        logger.info("Copying store from=%s to=%s", local, destination)
        try:
            shutil.copytree(local, destination)
        except OSError as exc:
            msg = f"Unable to copy store {local} to {destination}: {exc}"
            raise TransferError(msg) from exc
        return destination
    if local.is_file() and is_zip(local.name):
        return extract_archive(local, destination)
    if local.is_file():
        msg = f"Only ZIP archives are supported, got {local}"
        raise TransferError(msg)
    msg = f"The local path is invalid: {local}"
    raise TransferError(msg)


def _fetch_s3(s3_path: S3Path, destination: Path, s3_client) -> Path:
    if not s3_path.is_valid:
        msg = f"Incomplete S3 reference: {s3_path}"
        raise TransferError(msg)
    if not is_zip(s3_path.file):
        msg = f"Only ZIP archives are supported for S3, got {s3_path}"
        raise TransferError(msg)

    download = destination.parent / "downloads" / s3_path.file
    logger.info("Downloading store from=%s to=%s", s3_path, download)
    try:
        download.parent.mkdir(parents=True, exist_ok=True)
        client = s3_client or _default_s3_client()
        client.download_file(s3_path.bucket, s3_path.key, str(download))
    except (*_S3_ERRORS, OSError) as exc:
        msg = f"Unable to download {s3_path}: {exc}"
        raise TransferError(msg) from exc
    return extract_archive(download, destination)


def extract_archive(archive: Path | str, destination: Path | str) -> Path:
    """Extract *archive* into *destination*, dropping its top-level folder."""
    archive = Path(archive)
    destination = Path(destination)
    top = archive_folder_name(archive.name)
    root = destination.resolve()
    logger.info("Extracting archive=%s to=%s", archive, destination)
    try:
        with zipfile.ZipFile(archive) as zf:
            for info in zf.infolist():
                parts = PurePosixPath(info.filename).parts
                if parts and parts[0] == top:
                    parts = parts[1:]
                if not parts:
                    continue
                target = destination.joinpath(*parts)
                if not target.resolve().is_relative_to(root):
                    msg = f"Archive entry escapes the destination: {info.filename}"
                    raise TransferError(msg)
                if info.is_dir():
                    target.mkdir(parents=True, exist_ok=True)
                    continue
                target.parent.mkdir(parents=True, exist_ok=True)
                with zf.open(info) as src, target.open("wb") as dst:
                    shutil.copyfileobj(src, dst)
    except (OSError, zipfile.BadZipFile) as exc:
        msg = f"Unable to extract {archive}: {exc}"
        raise TransferError(msg) from exc
    destination.mkdir(parents=True, exist_ok=True)
    return destination


# ---------------------------------------------------------------------------
# Archive & publish
# ---------------------------------------------------------------------------


def archive_store(directory: Path | str, archive: Path | str) -> Path:
    """Zip *directory* into *archive* under a folder named after the archive."""
    directory = Path(directory)
    archive = Path(archive)
    top = archive_folder_name(archive.name)
    logger.info("Archiving store=%s to=%s", directory, archive)
    try:
        archive.parent.mkdir(parents=True, exist_ok=True)
        with zipfile.ZipFile(archive, "w", compression=zipfile.ZIP_DEFLATED) as zf:
            zf.writestr(f"{top}/", "")
            for path in sorted(directory.rglob("*")):
                name = f"{top}/{path.relative_to(directory).as_posix()}"
                if path.is_dir():
                    zf.writestr(f"{name}/", "")
                else:
                    zf.write(path, name)
    except OSError as exc:
        msg = f"Unable to archive {directory}: {exc}"
        raise TransferError(msg) from exc
    return archive


def publish(archive: Path | str, destination: str, *, s3_client=None) -> str:
    """Upload or copy *archive* to *destination*; return where it landed.

    ``s3://bucket[/prefix]`` uploads to the bucket, with the object key
    being the prefix plus the archive file name.  Anything else names a
    local directory, created if needed.
    """
    archive = Path(archive)
    s3_path = S3Path.parse(destination)
    if s3_path is not None:
        prefix = s3_path.key.strip("/")
        key = f"{prefix}/{archive.name}" if prefix else archive.name
        target = str(S3Path(bucket=s3_path.bucket, key=key))
        logger.info("Uploading archive=%s to=%s", archive, target)
        try:
            client = s3_client or _default_s3_client()
            client.upload_file(str(archive), s3_path.bucket, key)
        except (*_S3_ERRORS, OSError) as exc:
            msg = f"Unable to upload {archive} to {target}: {exc}"
            raise TransferError(msg) from exc
        return target

    folder = Path(destination).expanduser()
    logger.info("Copying archive=%s to=%s", archive, folder)
    try:
        folder.mkdir(parents=True, exist_ok=True)
        copied = shutil.copy2(archive, folder / archive.name)
    except OSError as exc:
        msg = f"Unable to copy {archive} to {folder}: {exc}"
        raise TransferError(msg) from exc
    return str(copied)
