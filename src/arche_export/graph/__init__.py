"""Resource graph construction.

Provides the resource node and graph models, deterministic identifiers,
the graph builder and the ordered export plan.
"""

from arche_export.graph.builder import BuildResult, ResourceGraphBuilder
from arche_export.graph.identifiers import IdentifierScheme
from arche_export.graph.models import ResourceGraph, ResourceNode, Statement
from arche_export.graph.plan import ExportPlan, dump_plan, plan_export

__all__ = [
    "BuildResult",
    "ExportPlan",
    "IdentifierScheme",
    "ResourceGraph",
    "ResourceGraphBuilder",
    "ResourceNode",
    "Statement",
    "dump_plan",
    "plan_export",
]
