"""Fixtures for command tests: a driver with commands and stub modules."""

from collections.abc import Callable

import pytest

from qis.app import Qis


@pytest.fixture
def qis(make_qis: Callable[..., Qis], stub_module: type) -> Qis:
    """Driver with every command registered and a stub factory available."""
    qis = make_qis()
    qis.modules.add_factory("stub", stub_module)
    qis.commands.register_all()
    return qis
