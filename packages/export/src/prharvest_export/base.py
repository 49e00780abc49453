"""Abstract exporter interface.

The CLI depends on BaseExporter, not on a concrete output, so the CSV file
and the console preview are interchangeable from the command's point of
view.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from prharvest_export.models import ExportData


class BaseExporter(ABC):
    """Output sink for one extraction run.

    write() receives the complete data set; extraction never hands over a
    partial result.
    """

    @abstractmethod
    def write(self, data: ExportData) -> None:
        """Render ``data``. Raises ExportError when it cannot be written."""

    def close(self) -> None:
        """Release any resources held by the exporter.

        Default is a no-op so callers can always call close() safely.
        """
