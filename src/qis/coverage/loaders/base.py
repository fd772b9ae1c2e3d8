"""Coverage dataset loader protocol."""

import xml.etree.ElementTree as ET
from pathlib import Path
from typing import Protocol

from qis.coverage.models import CoverageDataset


class DatasetLoader(Protocol):
    """Protocol for coverage dataset loaders.

    Each loader handles one XML coverage format and converts it to the
    CoverageDataset model.
    """

    @property
    def format_id(self) -> str:
        """Format identifier (e.g., 'clover', 'cobertura')."""
        ...

    def can_load(self, root: ET.Element) -> bool:
        """Check whether a parsed document root belongs to this format."""
        ...

    def load(self, root: ET.Element, path: Path) -> CoverageDataset:
        """Convert a parsed document into a dataset.

        Raises:
            CoverageReportError: If the document is structurally invalid.
        """
        ...


def int_attr(elem: ET.Element | None, name: str) -> int:
    """Integer attribute value, 0 when absent or not numeric."""
    if elem is None:
        return 0
    raw = elem.get(name)
    if raw is None:
        return 0
    try:
        return int(float(raw))
    except ValueError:
        return 0
