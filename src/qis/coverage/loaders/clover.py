"""Clover XML dataset loader.

Clover is what phpunit --coverage-clover, kover and OpenClover write:

<coverage generated="..." clover="...">
  <project name="..." timestamp="...">
    <metrics statements="..." coveredstatements="..."/>
    <file name="/abs/path/Foo.py">
      <line num="1" type="stmt" count="1"/>
      <line num="5" type="method" name="bar" count="0"/>
      <metrics statements="..." coveredstatements="..."/>
    </file>
    <package name="com.example">
      <file name="/abs/path/Bar.py">...</file>
    </package>
  </project>
</coverage>
"""

import xml.etree.ElementTree as ET
from pathlib import Path

from qis.coverage.loaders.base import int_attr
from qis.coverage.models import CoverageDataset, DatasetFile, FileGroup, LineStat


class CloverLoader:
    """Loader for Clover XML."""

    @property
    def format_id(self) -> str:
        return "clover"

    def can_load(self, root: ET.Element) -> bool:
        if root.tag != "coverage":
            return False
        if root.get("line-rate") is not None:
            return False
        return (
            root.get("generated") is not None
            or root.get("clover") is not None
            or root.find("project") is not None
        )

    def load(self, root: ET.Element, path: Path) -> CoverageDataset:  # noqa: ARG002
        project = root.find("project")
        if project is None:
            return CoverageDataset(source_format=self.format_id, has_project=False)

        timestamp = project.get("timestamp")
        dataset = CoverageDataset(
            source_format=self.format_id,
            project_name=project.get("name") or None,
            timestamp=int_attr(project, "timestamp") if timestamp else None,
        )
        dataset.files.extend(self._load_files(project))
        for package in project.findall("package"):
            dataset.groups.append(
                FileGroup(name=package.get("name") or None, files=self._load_files(package))
            )
        return dataset

    def _load_files(self, parent: ET.Element) -> list[DatasetFile]:
        files: list[DatasetFile] = []
        for file_elem in parent.findall("file"):
            name = file_elem.get("name") or file_elem.get("path", "")
            if not name:
                continue

            metrics = file_elem.find("metrics")
            entry = DatasetFile(
                name=name,
                statements=int_attr(metrics, "statements"),
                covered_statements=int_attr(metrics, "coveredstatements"),
            )
            for line in file_elem.findall("line"):
                num = int_attr(line, "num")
                if num <= 0:
                    continue
                entry.lines[num] = LineStat(
                    num=num,
                    type=line.get("type", "stmt"),
                    count=int_attr(line, "count"),
                    name=line.get("name"),
                )
            files.append(entry)
        return files
