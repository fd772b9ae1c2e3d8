"""Cobertura XML dataset loader.

Cobertura is what coverage.py (and so pytest-cov) writes:

<coverage line-rate="0.85" timestamp="1700000000000" ...>
  <sources>
    <source>/abs/project/src</source>
  </sources>
  <packages>
    <package name="qis.core">
      <classes>
        <class name="errors.py" filename="qis/core/errors.py" line-rate="...">
          <lines>
            <line number="1" hits="1"/>
          </lines>
        </class>
      </classes>
    </package>
  </packages>
</coverage>

Each class filename becomes a file entry joined onto the first source
directory; statements are the instrumented lines and covered statements the
lines with at least one hit.
"""

import posixpath
import xml.etree.ElementTree as ET
from pathlib import Path

from qis.coverage.loaders.base import int_attr
from qis.coverage.models import CoverageDataset, DatasetFile, FileGroup, LineStat


class CoberturaLoader:
    """Loader for Cobertura XML."""

    @property
    def format_id(self) -> str:
        return "cobertura"

    def can_load(self, root: ET.Element) -> bool:
        return root.tag == "coverage" and (
            root.get("line-rate") is not None or root.find("packages") is not None
        )

    def load(self, root: ET.Element, path: Path) -> CoverageDataset:  # noqa: ARG002
        # Strip namespace if present
        for elem in root.iter():
            if "}" in elem.tag:
                elem.tag = elem.tag.split("}", 1)[1]

        source_elem = root.find("./sources/source")
        source = (source_elem.text or "").strip() if source_elem is not None else ""

        timestamp = root.get("timestamp")
        dataset = CoverageDataset(
            source_format=self.format_id,
            timestamp=int_attr(root, "timestamp") // 1000 if timestamp else None,
        )

        for package in root.findall(".//package"):
            name = package.get("name")
            group = FileGroup(name=name if name and name != "." else None)
            by_name: dict[str, DatasetFile] = {}
            for cls in package.findall(".//class"):
                filename = cls.get("filename", "")
                if not filename:
                    continue
                if source and not posixpath.isabs(filename):
                    filename = posixpath.join(source, filename)

                entry = by_name.get(filename)
                if entry is None:
                    entry = DatasetFile(name=filename)
                    by_name[filename] = entry
                    group.files.append(entry)

                # Class-level lines only; method lines repeat them
                for line in cls.findall("./lines/line"):
                    num = int_attr(line, "number")
                    if num <= 0:
                        continue
                    hits = int_attr(line, "hits")
                    previous = entry.lines.get(num)
                    if previous is not None:
                        hits = max(previous.count, hits)
                    entry.lines[num] = LineStat(num=num, count=hits)

            for entry in group.files:
                entry.statements = len(entry.lines)
                entry.covered_statements = sum(1 for stat in entry.lines.values() if stat.count > 0)
            dataset.groups.append(group)

        return dataset
