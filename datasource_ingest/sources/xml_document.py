"""
XML document reader for datasource-ingest.

Document layout::

    <datasource>
      <tables>
        <table name="Customers" label="顧客">
          <fields>
            <field name="id" label="ID" type="INTEGER"/>
            ...
          </fields>
          <records>
            <record><data value="1"/>...</record>
          </records>
        </table>
      </tables>
    </datasource>

Every ``table`` element of every configured document is a table unit.
Table and field identity come from attributes, not from the name
resolver.  A ``data`` element without a ``value`` attribute reads as
absent (``None``).  Record numbers in diagnostics and errors are the
0-based position of the ``record`` element inside its table.
"""

from __future__ import annotations

import logging
import xml.etree.ElementTree as ET
from collections.abc import Iterator
from pathlib import Path
from typing import Any

from datasource_ingest.exceptions import SourceUnavailable
from datasource_ingest.model import Field
from datasource_ingest.normalize.assemble import read_field_definitions
from datasource_ingest.sources.base import DataRow, SourceReader, TableUnit

logger = logging.getLogger(__name__)

_TABLE_PATH = "tables/table"


class XmlReader(SourceReader):
    """Reader for XML datasource documents."""

    format_name = "xml"

    def __init__(self, config: Any) -> None:
        super().__init__(config)
        self._element: ET.Element | None = None

    def open_source(self) -> None:
        for path in self.config.files:
            if not Path(path).is_file():
                raise SourceUnavailable(f"XML document not found: {path}")

    @staticmethod
    def _parse(path: str) -> ET.Element:
        try:
            return ET.parse(path).getroot()
        except (OSError, ET.ParseError) as exc:
            raise SourceUnavailable(f"Cannot parse XML document {path}: {exc}") from exc

    def list_table_units(self) -> Iterator[TableUnit]:
        for path in self.config.files:
            logger.info("Reading XML document %s", path)
            root = self._parse(str(path))
            if root.tag != "datasource":
                logger.warning(
                    "Root element of %s is <%s>, expected <datasource>", path, root.tag
                )
            for index, element in enumerate(root.findall(_TABLE_PATH)):
                self._element = element
                name = element.get("name", "")
                yield TableUnit(
                    source=str(path),
                    identifier=name,
                    name=name,
                    label=element.get("label", ""),
                    index=index,
                )
            self._element = None

    def read_field_defs(self, unit: TableUnit) -> list[Field] | None:
        fields_element = self._element.find("fields") if self._element is not None else None
        if fields_element is None:
            return None
        declared = fields_element.findall("field")
        return read_field_definitions(
            [f.get("label", "") for f in declared],
            [f.get("name", "") for f in declared],
            [f.get("type", "") for f in declared],
            trim_trailing=False,
        )

    def read_data_rows(self, unit: TableUnit) -> Iterator[DataRow]:
        if self._element is None:
            return
        for row_number, record in enumerate(self._element.findall("records/record")):
            yield DataRow(
                row_number=row_number,
                values=[data.get("value") for data in record.findall("data")],
            )

    def close(self) -> None:
        # ElementTree holds no open handle once parsed.
        self._element = None
