from __future__ import annotations


class ExportError(Exception):
    """The extracted data could not be written to the chosen output."""
