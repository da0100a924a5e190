"""Resource graph data models."""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, Field

from arche_export.core.types import ResourceType, ValueKind


class Statement(BaseModel):
    """One ``(property, value, kind)`` statement about a resource."""

    property: str
    value: str
    kind: ValueKind = ValueKind.PLAIN
    lang: str | None = None
    datatype: str | None = None

    @property
    def is_reference(self) -> bool:
        return self.kind == ValueKind.REFERENCE


class ResourceNode(BaseModel):
    """A typed resource with an ordered multiset of statements.

    ``identifier`` is the deterministic, locally computed identifier and never
    changes. ``uri`` starts out equal to it and is rebased in place once the
    repository confirms a different canonical URI.
    """

    identifier: str
    uri: str = ""
    resource_type: ResourceType
    statements: list[Statement] = Field(default_factory=list)

    def model_post_init(self, __context) -> None:
        if not self.uri:
            self.uri = self.identifier

    # -- statement helpers ---------------------------------------------------

    def add(self, statement: Statement) -> None:
        self.statements.append(statement)

    def add_literal(self, prop: str, value: str) -> None:
        self.add(Statement(property=prop, value=value, kind=ValueKind.PLAIN))

    def add_lang(self, prop: str, value: str, lang: str) -> None:
        self.add(Statement(property=prop, value=value, kind=ValueKind.LANG, lang=lang))

    def add_typed(self, prop: str, value: str, datatype: str) -> None:
        self.add(Statement(property=prop, value=value, kind=ValueKind.TYPED, datatype=datatype))

    def add_reference(self, prop: str, uri: str) -> None:
        self.add(Statement(property=prop, value=uri, kind=ValueKind.REFERENCE))

    def statements_for(self, prop: str) -> list[Statement]:
        return [s for s in self.statements if s.property == prop]

    def values(self, prop: str) -> list[str]:
        return [s.value for s in self.statements if s.property == prop]

    def first_value(self, prop: str) -> str | None:
        for s in self.statements:
            if s.property == prop:
                return s.value
        return None

    # -- identity ------------------------------------------------------------

    @property
    def is_rebased(self) -> bool:
        return self.uri != self.identifier

    def rebase(self, uri: str) -> None:
        """Move this node onto its canonical URI, keeping the identifier."""
        self.uri = uri


class ResourceGraph(BaseModel):
    """An independent transfer unit: a primary node plus optional dependents.

    ``binary`` names the file whose bytes go to the primary resource's
    binary slot after its metadata has been stored.
    """

    nodes: list[ResourceNode] = Field(default_factory=list)
    binary: Path | None = None

    @property
    def primary(self) -> ResourceNode:
        if not self.nodes:
            raise ValueError("Resource graph has no nodes")
        return self.nodes[0]

    @property
    def identifier(self) -> str:
        return self.primary.identifier

    @property
    def resource_type(self) -> ResourceType:
        return self.primary.resource_type

    def rewrite_references(self, canonical: dict[str, str], skip: frozenset[str] = frozenset()) -> int:
        """Point resource references at known canonical URIs.

        Statements whose property is in ``skip`` keep their value. Returns the
        number of rewritten statements.
        """
        rewritten = 0
        for node in self.nodes:
            for statement in node.statements:
                if not statement.is_reference or statement.property in skip:
                    continue
                target = canonical.get(statement.value)
                if target is not None and target != statement.value:
                    statement.value = target
                    rewritten += 1
        return rewritten
