"""Assemble the ordered list of resource graphs for one export run."""

from __future__ import annotations

import logging
from collections import Counter
from pathlib import Path

from pydantic import BaseModel, Field

from arche_export.core.config import ExportConfig
from arche_export.core.errors import InputError
from arche_export.core.types import ResourceType
from arche_export.graph.builder import ResourceGraphBuilder
from arche_export.graph.models import ResourceGraph
from arche_export.graph.turtle import to_turtle
from arche_export.vocabulary.registry import VocabularyRegistry
from arche_export.workflow.models import ProcessContext

logger = logging.getLogger(__name__)


class ExportPlan(BaseModel):
    """Graphs in producer-before-consumer order.

    Agents come first, then TopCollection, anchor Publication, Publication,
    Collection, Metadata, and every Folder followed by its files. A graph
    never references a resource that appears later in the list.
    """

    process_title: str
    graphs: list[ResourceGraph] = Field(default_factory=list)

    def of_type(self, resource_type: ResourceType) -> list[ResourceGraph]:
        return [g for g in self.graphs if g.resource_type == resource_type]

    @property
    def identifiers(self) -> list[str]:
        return [g.identifier for g in self.graphs]


def _validate(context: ProcessContext, config: ExportConfig) -> None:
    for role in config.required_folders:
        if role not in context.folders:
            raise InputError(f"Mandatory folder {role!r} is missing for process {context.title}")
    if context.logical.anchor and not context.logical.children:
        raise InputError(f"Anchor of process {context.title} has no volume")
    for path in context.metadata_files:
        if not path.is_file():
            raise InputError(f"Metadata file {path} of process {context.title} cannot be read")


def plan_export(
    context: ProcessContext,
    builder: ResourceGraphBuilder,
    config: ExportConfig | None = None,
) -> ExportPlan:
    """Build every graph for ``context``. Raises InputError before anything is sent."""
    config = config or builder.config
    _validate(context, config)
    try:
        graphs = _build_graphs(context, builder, config)
    except ValueError as exc:
        raise InputError(f"Cannot build identifiers for process {context.title}: {exc}") from exc

    duplicates = [i for i, n in Counter(g.identifier for g in graphs).items() if n > 1]
    if duplicates:
        raise InputError(f"Identifiers collide within process {context.title}: {', '.join(duplicates)}")

    logger.info("Planned %d graphs for process %s", len(graphs), context.title)
    return ExportPlan(process_title=context.title, graphs=graphs)


def _build_graphs(
    context: ProcessContext, builder: ResourceGraphBuilder, config: ExportConfig
) -> list[ResourceGraph]:
    top = builder.build_top_collection(context.project)

    anchor_graph: ResourceGraph | None = None
    anchor_identifier: str | None = None
    if context.anchor is not None:
        anchor = builder.build_publication(context.anchor)
        anchor_graph = ResourceGraph(nodes=[anchor.node])
        anchor_identifier = anchor.node.identifier

    publication = builder.build_publication(context.volume, anchor_identifier=anchor_identifier)
    collection = builder.build_collection(context)
    collection_node = collection.node

    dependents: list[ResourceGraph] = []
    for path in context.metadata_files:
        node = builder.build_metadata(
            path, collection_node, context.title, publication.node.identifier
        )
        dependents.append(ResourceGraph(nodes=[node], binary=path))

    for role in config.folders:
        listing = context.folders.get(role)
        if listing is None:
            continue
        folder_node = builder.build_folder(listing, collection_node, context.title)
        dependents.append(ResourceGraph(nodes=[folder_node]))
        for path in listing.files:
            file_node = builder.build_file(
                path, folder_node, listing.name, collection_node, context.title
            )
            dependents.append(ResourceGraph(nodes=[file_node], binary=path))

    graphs = [ResourceGraph(nodes=[agent]) for agent in builder.minted_agents]
    graphs.append(ResourceGraph(nodes=[top.node]))
    if anchor_graph is not None:
        graphs.append(anchor_graph)
    graphs.append(ResourceGraph(nodes=[publication.node]))
    graphs.append(ResourceGraph(nodes=[collection_node]))
    graphs.extend(dependents)
    return graphs


def dump_plan(plan: ExportPlan, registry: VocabularyRegistry, folder: str | Path) -> list[Path]:
    """Write each graph as a Turtle file into ``folder/<process>/``."""
    target = Path(folder) / plan.process_title
    written: list[Path] = []
    try:
        target.mkdir(parents=True, exist_ok=True)
        for index, graph in enumerate(plan.graphs, start=1):
            path = target / f"{index:04d}_{graph.resource_type.value}.ttl"
            path.write_text(to_turtle(graph, registry), encoding="utf-8")
            written.append(path)
    except OSError as exc:
        raise InputError(f"Cannot write Turtle files to {target}: {exc}") from exc
    logger.info("Wrote %d Turtle files to %s", len(written), target)
    return written
