"""Analysis modules and their registry."""

from qis.modules.analysis import AnalysisModule
from qis.modules.base import RETURN_BENIGN, RETURN_ERROR, RETURN_SUCCESS, Module
from qis.modules.codingstandard import CodingstandardModule
from qis.modules.coverage import CoverageModule
from qis.modules.registry import BUILTIN_MODULES, ModuleRegistry
from qis.modules.test import TestModule

__all__ = [
    "BUILTIN_MODULES",
    "RETURN_BENIGN",
    "RETURN_ERROR",
    "RETURN_SUCCESS",
    "AnalysisModule",
    "CodingstandardModule",
    "CoverageModule",
    "Module",
    "ModuleRegistry",
    "TestModule",
]
