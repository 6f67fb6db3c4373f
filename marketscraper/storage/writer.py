"""JSON catalog persistence, one file per category."""

from __future__ import annotations

import json
import os
from pathlib import Path
from tempfile import NamedTemporaryFile
from typing import Iterable

from marketscraper.errors import CatalogWriteError
from marketscraper.extractors.schemas import ProductRecord

CATALOG_FILE_MODE = 0o644


def catalog_path(output_dir: str | Path, slug: str) -> Path:
    return Path(output_dir) / f"{slug}.json"


def write_category(records: Iterable[ProductRecord], output_dir: str | Path, slug: str) -> Path:
    """Write *records* as pretty JSON to ``<output_dir>/<slug>.json``.

    The file is replaced atomically, so a crash never leaves a half-written
    catalog behind. Any failure raises :class:`CatalogWriteError`.
    """

    path = catalog_path(output_dir, slug)
    payload = [record.to_catalog_dict() for record in records]
    tmp_name: str | None = None
    try:
        os.makedirs(path.parent, exist_ok=True)
        with NamedTemporaryFile(
            mode="w", encoding="utf-8", dir=str(path.parent), suffix=".tmp", delete=False
        ) as handle:
            tmp_name = handle.name
            json.dump(payload, handle, ensure_ascii=False, indent=2)
            handle.flush()
            os.fsync(handle.fileno())
        os.chmod(tmp_name, CATALOG_FILE_MODE)
        os.replace(tmp_name, path)
    except OSError as exc:
        if tmp_name and os.path.exists(tmp_name):
            os.unlink(tmp_name)
        raise CatalogWriteError(str(exc), path=str(path)) from exc
    return path


__all__ = ["catalog_path", "write_category"]
