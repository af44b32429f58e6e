"""
Reader registry for datasource-ingest.

Maps a source config's ``format`` value to the ``SourceReader`` subclass
that handles it.  Adding a format means adding a reader module and one
entry here; the builder never branches on format.
"""

from __future__ import annotations

import logging

from datasource_ingest.exceptions import ConfigValidationError
from datasource_ingest.sources.base import SourceReader

logger = logging.getLogger(__name__)

# Maps source format to reader class
_READER_MAP: dict[str, type[SourceReader]] = {}


def _get_reader_map() -> dict[str, type[SourceReader]]:
    """Lazily build the reader map so optional drivers load on first use."""
    if not _READER_MAP:
        from datasource_ingest.sources.database import DatabaseReader
        from datasource_ingest.sources.delimited import DelimitedReader
        from datasource_ingest.sources.spreadsheet import SpreadsheetReader
        from datasource_ingest.sources.xml_document import XmlReader

        for reader_class in (SpreadsheetReader, DelimitedReader, XmlReader, DatabaseReader):
            _READER_MAP[reader_class.format_name] = reader_class
    return _READER_MAP


def available_formats() -> list[str]:
    """Source formats with a registered reader."""
    return sorted(_get_reader_map())


def get_reader_class(source_format: str) -> type[SourceReader]:
    """Return the reader class for *source_format*.

    Raises:
        ConfigValidationError: No reader is registered for the format.
    """
    reader_map = _get_reader_map()
    try:
        reader_class = reader_map[source_format]
    except KeyError:
        raise ConfigValidationError(
            f"No reader for source format '{source_format}'. "
            f"Available: {sorted(reader_map)}"
        ) from None
    logger.debug("Selected %s for format '%s'", reader_class.__name__, source_format)
    return reader_class
