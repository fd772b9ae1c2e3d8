"""Coverage datasets and report aggregation."""

from qis.coverage.loaders import load_dataset
from qis.coverage.models import CoverageDataset, DatasetFile, FileGroup, FileMetrics, LineStat
from qis.coverage.report import CoverageAggregator, coverage_bar

__all__ = [
    "CoverageAggregator",
    "CoverageDataset",
    "DatasetFile",
    "FileGroup",
    "FileMetrics",
    "LineStat",
    "coverage_bar",
    "load_dataset",
]
