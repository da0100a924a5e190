"""Run one process through the repository: plan, upsert, upload, commit.

Input problems are found while planning, before the first network call.
Once a transaction is open, the first error rolls it back and ends the run
with a single failed result.
"""

from __future__ import annotations

import logging
from pathlib import Path

from arche_export.core.config import Settings
from arche_export.core.errors import ExportError, InputError
from arche_export.core.types import ExportStatus, TransactionState
from arche_export.export.models import ExportResult
from arche_export.graph.builder import ResourceGraphBuilder
from arche_export.graph.identifiers import IdentifierScheme
from arche_export.graph.plan import ExportPlan, dump_plan, plan_export
from arche_export.repository.client import RepositoryClient, Transaction
from arche_export.repository.models import UpsertResult
from arche_export.vocabulary.registry import VocabularyRegistry
from arche_export.workflow.models import ProcessContext

logger = logging.getLogger(__name__)


def build_plan(
    context: ProcessContext,
    settings: Settings,
    registry: VocabularyRegistry,
) -> ExportPlan:
    scheme = IdentifierScheme(registry.identifier_prefix, context.project.title)
    builder = ResourceGraphBuilder(registry, scheme, settings.export)
    return plan_export(context, builder, settings.export)


def _ingest(plan: ExportPlan, transaction: Transaction) -> list[UpsertResult]:
    stored: list[UpsertResult] = []
    for graph in plan.graphs:
        result = transaction.upsert(graph)
        stored.append(result)
        if graph.binary is not None:
            transaction.upload_binary(result.uri, graph.binary)
    transaction.commit()
    return stored


def export(
    context: ProcessContext,
    settings: Settings | None = None,
    *,
    client: RepositoryClient | None = None,
) -> ExportResult:
    """Export one process and return its terminal status.

    A ``client`` passed in is used as is and left open; otherwise one is
    created from ``settings.repository`` and closed afterwards.
    """
    settings = settings or Settings()
    registry = client.registry if client is not None else VocabularyRegistry(settings.vocabulary)

    try:
        plan = build_plan(context, settings, registry)
        dumped: list[Path] = []
        if settings.export.dump_folder:
            dumped = dump_plan(plan, registry, settings.export.dump_folder)
    except InputError as exc:
        logger.error("Process %s cannot be exported: %s", context.title, exc)
        return ExportResult(process_title=context.title, status=ExportStatus.FAILED, message=str(exc))

    if not settings.repository.enabled:
        logger.info("Ingest disabled, skipping upload of process %s", context.title)
        return ExportResult(process_title=context.title, status=ExportStatus.SKIPPED, dumped=dumped)

    owns_client = client is None
    if client is None:
        client = RepositoryClient(settings.repository, registry)

    transaction: Transaction | None = None
    try:
        transaction = client.begin()
        resources = _ingest(plan, transaction)
    except ExportError as exc:
        logger.error("Export of process %s failed: %s", context.title, exc)
        return _failed(context.title, transaction, exc, dumped)
    finally:
        if owns_client:
            client.close()

    logger.info(
        "Exported process %s: %d resources in transaction %s",
        context.title, len(resources), transaction.token,
    )
    return ExportResult(
        process_title=context.title,
        status=ExportStatus.COMMITTED,
        transaction_id=transaction.token,
        resources=resources,
        dumped=dumped,
    )


def _failed(
    title: str,
    transaction: Transaction | None,
    error: ExportError,
    dumped: list[Path],
) -> ExportResult:
    if transaction is None:
        return ExportResult(process_title=title, status=ExportStatus.FAILED, message=str(error), dumped=dumped)

    status = ExportStatus.FAILED
    message = str(error)
    if transaction.state == TransactionState.ACTIVE:
        try:
            transaction.rollback()
            status = ExportStatus.ROLLED_BACK
        except ExportError as rollback_exc:
            logger.error("Rollback of transaction %s failed: %s", transaction.token, rollback_exc)
            message = f"{message} (rollback failed: {rollback_exc})"
    return ExportResult(
        process_title=title,
        status=status,
        message=message,
        transaction_id=transaction.token,
        dumped=dumped,
    )
