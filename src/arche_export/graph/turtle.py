"""Turtle serialization of resource graphs."""

from __future__ import annotations

from rdflib import RDF, Graph, Literal, Namespace, URIRef

from arche_export.core.types import ValueKind
from arche_export.graph.models import ResourceGraph, ResourceNode, Statement
from arche_export.vocabulary.registry import VocabularyRegistry

TURTLE_MEDIA_TYPE = "text/turtle"
XSD_NAMESPACE = "http://www.w3.org/2001/XMLSchema#"


def _object(statement: Statement):
    match statement.kind:
        case ValueKind.REFERENCE:
            return URIRef(statement.value)
        case ValueKind.LANG:
            return Literal(statement.value, lang=statement.lang)
        case ValueKind.TYPED:
            datatype = statement.datatype or ""
            if "://" not in datatype:
                datatype = XSD_NAMESPACE + datatype
            return Literal(statement.value, datatype=URIRef(datatype))
        case _:
            return Literal(statement.value)


def add_node(graph: Graph, node: ResourceNode, registry: VocabularyRegistry) -> URIRef:
    subject = URIRef(node.uri)
    graph.add((subject, RDF.type, URIRef(registry.type_uri(node.resource_type))))
    for statement in node.statements:
        graph.add((subject, URIRef(registry.term(statement.property)), _object(statement)))
    return subject


def to_rdf(resource_graph: ResourceGraph, registry: VocabularyRegistry) -> Graph:
    graph = Graph()
    graph.bind("acdh", Namespace(registry.namespace))
    graph.bind("api", Namespace(registry.config.api_namespace))
    for node in resource_graph.nodes:
        add_node(graph, node, registry)
    return graph


def to_turtle(resource_graph: ResourceGraph, registry: VocabularyRegistry) -> str:
    return to_rdf(resource_graph, registry).serialize(format="turtle")


def parse_turtle(text: str) -> Graph:
    graph = Graph()
    if text.strip():
        graph.parse(data=text, format="turtle")
    return graph
