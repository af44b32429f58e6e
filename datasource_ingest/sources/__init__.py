"""
Sources sub-package for datasource-ingest.

Contains one reader per source format.  Every reader implements the
``SourceReader`` capability interface from base.py, so the builder
drives all formats the same way.

Design: Strategy Pattern
- base.py defines the SourceReader ABC plus TableUnit / DataRow.
- spreadsheet.py implements SpreadsheetReader (one table per sheet).
- delimited.py implements DelimitedReader (one table per CSV file).
- xml_document.py implements XmlReader (one table per ``table`` element).
- database.py implements DatabaseReader (one table per configured table).

The registry (registry.py) picks the reader class from the config's
``format`` field at runtime.
"""
