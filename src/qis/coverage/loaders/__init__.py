"""Coverage dataset loader registry and auto-detection.

This module provides:
- LOADER_REGISTRY: All available loaders
- detect_loader: Pick a loader for a parsed document
- load_dataset: Read an artifact from disk into a CoverageDataset
"""

import xml.etree.ElementTree as ET
from collections.abc import Sequence
from pathlib import Path

from qis.core.errors import CoverageReportError
from qis.coverage.models import CoverageDataset

from .base import DatasetLoader
from .clover import CloverLoader
from .cobertura import CoberturaLoader

# Order matters: Clover is checked first, Cobertura is the generic fallback
LOADER_REGISTRY: Sequence[DatasetLoader] = (
    CloverLoader(),
    CoberturaLoader(),
)

LOADER_BY_FORMAT: dict[str, DatasetLoader] = {loader.format_id: loader for loader in LOADER_REGISTRY}

__all__ = [
    "LOADER_BY_FORMAT",
    "LOADER_REGISTRY",
    "CloverLoader",
    "CoberturaLoader",
    "DatasetLoader",
    "detect_loader",
    "load_dataset",
]


def detect_loader(root: ET.Element) -> DatasetLoader | None:
    for loader in LOADER_REGISTRY:
        if loader.can_load(root):
            return loader
    return None


def load_dataset(path: Path, *, format_id: str | None = None) -> CoverageDataset:
    """Parse a coverage artifact into a CoverageDataset.

    Args:
        path: Path to the XML artifact.
        format_id: Force a specific format (skip auto-detection).

    Raises:
        CoverageReportError: If the file is missing, not well-formed XML, or
            in an unknown format.
    """
    if not path.is_file():
        raise CoverageReportError.not_found(str(path))

    try:
        root = ET.parse(path).getroot()
    except ET.ParseError as e:
        raise CoverageReportError.malformed(str(path), str(e)) from e
    except OSError as e:
        raise CoverageReportError.not_found(str(path)) from e

    if format_id:
        loader = LOADER_BY_FORMAT.get(format_id)
        if loader is None:
            valid = ", ".join(sorted(LOADER_BY_FORMAT))
            raise CoverageReportError.malformed(
                str(path), f"Unknown coverage format {format_id!r}, valid formats: {valid}"
            )
    else:
        loader = detect_loader(root)
        if loader is None:
            raise CoverageReportError.malformed(
                str(path), f"Unrecognized coverage document <{root.tag}>"
            )

    return loader.load(root, path)
