"""
Normalization core for datasource-ingest.

Shared by every source reader; each step lives in its own module so it
can be tested in isolation:

  - coerce.py: raw text + FieldType -> typed value (null sentinel, parsing).
  - names.py: sheet / file name -> (name, label).
  - rows.py: empty-row and field-count checks.
  - assemble.py: header rows -> Fields, raw row -> Record.

Readers only translate their format into raw values; they never parse
types themselves.
"""
