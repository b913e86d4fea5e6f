"""Purchase invoice import & reconciliation pipeline.

Turns pasted spreadsheet cells, CSV/xlsx uploads and AI-extracted JSON into
validated purchase invoice records and persists them one row at a time.
"""

__version__ = "0.1.0"
