# ebook_studio/services/export/serializer.py
# SPDX-License-Identifier: Apache-2.0
from __future__ import annotations

import io
import zipfile
from dataclasses import dataclass

import structlog

from ...errors import SerializationError
from ...utils.time import zip_timestamp
from .epub_builder import EPUB_MIMETYPE, ArchiveEntry, ArchiveManifest

log = structlog.get_logger("ebook.export.serializer")


@dataclass(frozen=True)
class EpubBlob:
    data: bytes
    size: int
    content_type: str = EPUB_MIMETYPE


def _zip_info(entry: ArchiveEntry, date_time, compress: bool) -> zipfile.ZipInfo:
    info = zipfile.ZipInfo(entry.path, date_time=date_time)
    info.compress_type = zipfile.ZIP_DEFLATED if compress else zipfile.ZIP_STORED
    info.external_attr = 0o644 << 16
    return info


def serialize_archive(manifest: ArchiveManifest) -> EpubBlob:
    """
    Zip the manifest into a single EPUB byte stream.

    The OCF container requires "mimetype" to be the first entry and stored
    uncompressed; everything else is deflated.
    """
    mimetype = [e for e in manifest.entries if e.path == "mimetype"]
    if len(mimetype) != 1:
        raise SerializationError(
            "archive must contain exactly one mimetype entry",
            details={"found": len(mimetype)},
        )
    names = manifest.paths
    if len(set(names)) != len(names):
        dupes = sorted({n for n in names if names.count(n) > 1})
        raise SerializationError("duplicate archive entries", details={"paths": dupes})

    date_time = zip_timestamp(manifest.modified)
    buf = io.BytesIO()
    try:
        with zipfile.ZipFile(buf, "w") as zout:
            # 1) mimetype first, stored
            zout.writestr(_zip_info(mimetype[0], date_time, compress=False), mimetype[0].data)
            # 2) the rest, compressed
            for entry in manifest.entries:
                if entry.path == "mimetype":
                    continue
                zout.writestr(_zip_info(entry, date_time, compress=entry.compress), entry.data)
    except (zipfile.BadZipFile, zipfile.LargeZipFile, ValueError, TypeError, MemoryError, OSError) as e:
        log.error("epub_serialization_failed", identifier=manifest.identifier, error=str(e))
        raise SerializationError(f"failed to write EPUB archive: {e}") from e

    data = buf.getvalue()
    log.info("epub_serialized", identifier=manifest.identifier, bytes=len(data), entries=len(names))
    return EpubBlob(data=data, size=len(data))
