"""Readers for the machine output of ruff, mypy and pytest.

The linters' readers raise ``ValueError`` when the output is not what the
tool emits in JSON mode; the calling module turns that into a ModuleError.
"""

from __future__ import annotations

import json
import xml.etree.ElementTree as ET
from typing import Any

from qis.modules.models import CaseStatus, Finding, JunitCase, JunitReport

# JUnit child element -> case status, first match wins
_OUTCOME_TAGS: tuple[tuple[str, CaseStatus], ...] = (
    ("failure", "failed"),
    ("error", "error"),
    ("skipped", "skipped"),
)


def parse_ruff(stdout: str, error_codes: tuple[str, ...] = ()) -> list[Finding]:
    """Findings from ``ruff check --output-format=json``.

    A finding is an error when its code starts with one of ``error_codes``
    or when it has no code at all (ruff reports syntax errors that way).
    """
    try:
        items = json.loads(stdout or "[]")
    except json.JSONDecodeError as e:
        raise ValueError(f"Ruff JSON parse error: {e}") from e
    if not isinstance(items, list):
        raise ValueError(f"Ruff JSON parse error: expected a list, got {type(items).__name__}")

    findings = []
    for item in items:
        if not isinstance(item, dict):
            raise ValueError(f"Ruff JSON parse error: unexpected entry {item!r}")
        code = item.get("code")
        location: dict[str, Any] = item.get("location") or {}
        findings.append(
            Finding(
                path=item.get("filename", ""),
                line=location.get("row", 1),
                column=location.get("column"),
                message=item.get("message", ""),
                code=code,
                is_error=code is None or (bool(error_codes) and code.startswith(error_codes)),
            )
        )
    return findings


def parse_mypy(stdout: str) -> list[Finding]:
    """Findings from ``mypy --output=json``, one JSON object per line.

    Only mypy's ``error`` severity counts as an error; notes ride along.
    """
    findings = []
    for raw in stdout.splitlines():
        if not raw.strip():
            continue
        try:
            item = json.loads(raw)
        except json.JSONDecodeError as e:
            raise ValueError(f"Mypy JSON parse error: {e}") from e
        findings.append(
            Finding(
                path=item.get("file", ""),
                line=item.get("line", 1),
                column=item.get("column"),
                message=item.get("message", ""),
                code=item.get("code"),
                is_error=item.get("severity", "error") == "error",
            )
        )
    return findings


def _case_outcome(element: ET.Element) -> tuple[CaseStatus, str | None]:
    for tag, status in _OUTCOME_TAGS:
        child = element.find(tag)
        if child is not None:
            return status, child.get("message")
    return "passed", None


def parse_junit_xml(content: str) -> JunitReport:
    """Read pytest's ``--junitxml`` file.

    A file that is not well-formed XML reads as one errored case, so a
    crashed run never looks green.
    """
    try:
        root = ET.fromstring(content)
    except ET.ParseError as e:
        broken = JunitCase(name="parse_error", classname=None, status="error", message=str(e))
        return JunitReport(name="parse_error", cases=[broken])

    suites = list(root) if root.tag == "testsuites" else [root]
    cases = []
    for suite in suites:
        for element in suite.iter("testcase"):
            status, message = _case_outcome(element)
            cases.append(
                JunitCase(
                    name=element.get("name", "unknown"),
                    classname=element.get("classname"),
                    status=status,
                    duration=float(element.get("time") or 0),
                    message=message,
                )
            )

    name = suites[0].get("name", "testsuite") if suites else "unknown"
    return JunitReport(name=name, cases=cases)
