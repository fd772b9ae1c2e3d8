"""Module registry - builds configured modules and maps them to keywords."""

from __future__ import annotations

import importlib
import re
import traceback
from collections.abc import Callable, Mapping
from typing import TYPE_CHECKING, Any

import structlog

from qis.modules.analysis import AnalysisModule
from qis.modules.base import Module
from qis.modules.codingstandard import CodingstandardModule
from qis.modules.coverage import CoverageModule
from qis.modules.test import TestModule

if TYPE_CHECKING:
    from qis.app import Qis

log = structlog.get_logger()

ModuleFactory = Callable[["Qis", Mapping[str, Any]], Module]

# Built-in modules by conventional name
BUILTIN_MODULES: dict[str, type[Module]] = {
    CodingstandardModule.name: CodingstandardModule,
    TestModule.name: TestModule,
    CoverageModule.name: CoverageModule,
    AnalysisModule.name: AnalysisModule,
}


def conventional_name(name: str) -> str:
    """Module name reduced to the form the built-in table is keyed by."""
    return re.sub(r"[^A-Za-z_]", "", name).lower()


def import_factory(class_path: str) -> ModuleFactory | None:
    """Import ``package.module:Class`` (or ``package.module.Class``)."""
    if ":" in class_path:
        module_path, _, attr = class_path.partition(":")
    else:
        module_path, _, attr = class_path.rpartition(".")
    if not module_path or not attr:
        return None

    try:
        target: Any = importlib.import_module(module_path)
        for part in attr.split("."):
            target = getattr(target, part)
    except (ImportError, AttributeError) as e:
        log.debug("module_class_import_failed", class_path=class_path, error=str(e))
        return None

    if isinstance(target, type) and issubclass(target, Module):
        return target
    return None


class ModuleRegistry:
    """Registry of loaded modules, keyed by command keyword.

    Implementations come from a static table of factories; a ``class``
    setting may instead name one as ``package.module:Class``. A module that
    cannot be resolved, built or initialized is reported and skipped.
    """

    def __init__(self, qis: Qis, factories: Mapping[str, ModuleFactory] | None = None) -> None:
        self._qis = qis
        self._factories: dict[str, ModuleFactory] = dict(
            BUILTIN_MODULES if factories is None else factories
        )
        self._modules: dict[str, Module] = {}
        self._names: dict[str, str] = {}

    def add_factory(self, name: str, factory: ModuleFactory) -> None:
        """Make an implementation available under a conventional name."""
        self._factories[conventional_name(name)] = factory

    def _resolve(self, name: str, settings: Mapping[str, Any]) -> tuple[str, ModuleFactory | None]:
        class_path = str(settings.get("class") or "").strip()
        if class_path:
            factory = self._factories.get(conventional_name(class_path))
            return class_path, factory or import_factory(class_path)

        key = conventional_name(name)
        return key, self._factories.get(key)

    def _warn(self, message: str, **context: Any) -> None:
        log.warning("module_load_failed", reason=message, **context)
        self._qis.warning_message(message)

    def register(self, name: str, settings: Any) -> Module | None:
        """Build, initialize and store one module.

        Returns the module, or None when it was skipped.
        """
        if settings is None or isinstance(settings, str):
            settings = {}
        elif not isinstance(settings, Mapping):
            self._warn(f"Failed to load module {name}. Settings must be key=value pairs.", module=name)
            return None

        binding, factory = self._resolve(name, settings)
        command = str(settings.get("command") or name).strip().lower()

        if factory is None:
            self._warn(f"Failed to load module {name}. Class {binding} not found.", module=name)
            return None

        try:
            module = factory(self._qis, settings)
            module.initialize()
        except Exception as e:
            frame = traceback.extract_tb(e.__traceback__)[-1]
            self._warn(
                f"Failed to load module {name}. Error message: {e}, "
                f"File:{frame.filename}:{frame.lineno}",
                module=name,
                error=str(e),
                file=frame.filename,
                line=frame.lineno,
            )
            return None

        previous = self._names.get(command)
        if previous is not None and previous != name:
            log.warning("module_keyword_reassigned", command=command, previous=previous, module=name)

        self._modules[command] = module
        self._names[command] = name
        log.debug("module_loaded", module=name, command=command)
        self._qis.log(f"Loaded module {name}.")
        return module

    def register_all(self, modules: Any) -> int | None:
        """Register every entry of a name -> settings map.

        Returns the number of registered modules, or None if the input is
        not a map (nothing is registered then).
        """
        if not isinstance(modules, Mapping):
            log.warning("modules_rejected", type=type(modules).__name__)
            self._qis.log("Cannot load modules due to incorrect input.")
            return None

        for name, settings in modules.items():
            self.register(str(name), settings)
        return len(self._modules)

    def get(self, command: str) -> Module | None:
        return self._modules.get(command)

    def all(self) -> dict[str, Module]:
        """Modules by keyword, in registration order."""
        return dict(self._modules)

    def __contains__(self, command: object) -> bool:
        return command in self._modules

    def __len__(self) -> int:
        return len(self._modules)
