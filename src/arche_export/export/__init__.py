"""One export run: plan the graphs, store them in one transaction."""

from arche_export.export.models import ExportResult
from arche_export.export.pipeline import build_plan, export

__all__ = ["ExportResult", "build_plan", "export"]
