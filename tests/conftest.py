"""Root conftest.py for test configuration.

Ensures local src/ directory takes priority over any installed packages.
"""

import io
import os
import sys
from collections.abc import Callable, Mapping
from pathlib import Path
from typing import Any

import pytest

# Insert local src directory at the beginning of sys.path
# This ensures that the local qis package is used, not any installed one
_src_dir = Path(__file__).parent.parent / "src"
if str(_src_dir) not in sys.path:
    sys.path.insert(0, str(_src_dir))

# Force reimport of qis modules if already imported
for module_name in list(sys.modules.keys()):
    if module_name.startswith("qis"):
        del sys.modules[module_name]

from rich.console import Console  # noqa: E402

from qis.app import Qis  # noqa: E402
from qis.core.arguments import Arguments  # noqa: E402
from qis.modules.base import Module  # noqa: E402

MINIMAL_CONFIG = "; QIS configuration file v1.2.3\nproject_name=Sample\n"


class StubModule(Module):
    """Module double: returns a fixed code and reports a fixed verdict."""

    name = "stub"
    command = "stub"

    def __init__(self, qis: Qis, settings: Mapping[str, Any]) -> None:
        super().__init__(qis, settings)
        self.return_code = int(self.setting("return_code", 0))
        self.status = str(self.setting("status", "1")) == "1"
        self.runs: list[Arguments] = []

    @classmethod
    def get_default_ini(cls) -> str:
        return f"{cls.name}.command={cls.command}\n"

    def execute(self, args: Arguments) -> int:
        self.runs.append(args)
        self._qis.qecho(f"stub {self.name} ran\n")
        return self.return_code

    def get_help_message(self) -> str:
        return "Stub module\n"

    def get_status(self) -> bool:
        return self.status

    def get_summary(self, short: bool = False) -> str:
        return "Stub: PASS" if short else "Stub results:\nall good"

    def get_metrics(self, only_primary: bool = False) -> Any:
        return 42 if only_primary else {"value": 42}


@pytest.fixture
def stub_module() -> type[StubModule]:
    return StubModule


@pytest.fixture
def console() -> Console:
    """Plain, wide, non-terminal console writing to memory."""
    return Console(file=io.StringIO(), force_terminal=False, color_system=None, width=200)


@pytest.fixture
def output(console: Console) -> Callable[[], str]:
    def read() -> str:
        assert isinstance(console.file, io.StringIO)
        return console.file.getvalue()

    return read


@pytest.fixture
def halts() -> list[int]:
    return []


@pytest.fixture
def project_root(tmp_path: Path) -> Path:
    """Project directory with a minimal .qis/config.ini."""
    root = tmp_path / "project"
    (root / ".qis").mkdir(parents=True)
    (root / ".qis" / "config.ini").write_text(MINIMAL_CONFIG)
    return root


@pytest.fixture
def make_qis(console: Console, halts: list[int], project_root: Path) -> Callable[..., Qis]:
    """Build a driver that prints to the memory console and records halts."""

    def factory(root: Path | None = None, **kwargs: Any) -> Qis:
        return Qis(
            project_root=root or project_root,
            console=console,
            halt=halts.append,
            **kwargs,
        )

    return factory


@pytest.fixture(autouse=True)
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep the user's global config and QIS__ env vars out of tests."""
    monkeypatch.setattr("qis.config.loader.GLOBAL_CONFIG_PATH", tmp_path / "no-global.yaml")
    for key in list(os.environ):
        if key.upper().startswith("QIS__"):
            monkeypatch.delenv(key)
