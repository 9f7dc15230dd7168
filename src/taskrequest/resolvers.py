"""
Client-side entity lookups.

The platform's GET endpoints cannot filter yet, so every record is looked up
in the fetched collection: exact string equality, first match in list order.
A lookup that finds nothing raises ResolutionFailure with the requested value
and the number of candidates searched, which tells a misspelled key apart
from an empty collection.

The kind/type lookup assumes this shape below the module root:

    module root -> kind -> grouping level -> type

and checks it explicitly instead of indexing blindly.
"""

import logging
from collections.abc import Callable, Iterable, Mapping, Sequence
from typing import Any, TypeVar

from core.errors.exceptions import ResolutionFailure
from taskrequest.schemas.code_elements import CodeElement

logger = logging.getLogger(__name__)

T = TypeVar("T")


def find_first(collection: Iterable[T], predicate: Callable[[T], bool]) -> T | None:
    """Return the earliest item matching ``predicate``, or None."""
    for item in collection:
        if predicate(item):
            return item
    return None


def _require(
    collection: Sequence[T],
    predicate: Callable[[T], bool],
    entity: str,
    field: str,
    value: Any,
) -> T:
    match = find_first(collection, predicate)
    if match is None:
        raise ResolutionFailure(
            f"No {entity} with {field} == {value!r} among {len(collection)} candidates",
            entity=entity,
            field=field,
            value=value,
            candidates=len(collection),
        )
    logger.debug(
        f"Resolved {entity}",
        extra={"entity": entity, "field": field, "value": value},
    )
    return match


def resolve_employee(employees: Sequence[Mapping[str, Any]], user_name: str) -> Mapping[str, Any]:
    """Find the employee whose ``userName`` equals ``user_name``."""
    return _require(
        employees,
        lambda e: e.get("userName") == user_name,
        entity="employee",
        field="userName",
        value=user_name,
    )


def resolve_equipment(
    equipments: Sequence[Mapping[str, Any]], unique_number: str
) -> Mapping[str, Any]:
    """Find the equipment whose ``uniqueNumber`` equals ``unique_number``."""
    return _require(
        equipments,
        lambda e: e.get("uniqueNumber") == unique_number,
        entity="equipment",
        field="uniqueNumber",
        value=unique_number,
    )


def resolve_module_root(forest: Sequence[CodeElement], category_code: str) -> CodeElement:
    """Find the forest root whose ``code`` is the module's category code."""
    return _require(
        forest,
        lambda node: node.code == category_code,
        entity="module_root",
        field="code",
        value=category_code,
    )


def resolve_kind(module_root: CodeElement, kind_name: str) -> CodeElement:
    """Find the kind directly under the module root by exact ``name``."""
    return _require(
        module_root.children or [],
        lambda node: node.name == kind_name,
        entity="kind",
        field="name",
        value=kind_name,
    )


def resolve_type(kind: CodeElement, type_name: str) -> CodeElement:
    """
    Find the type under the kind's grouping level by exact ``name``.

    Types hang one level below the kind, under the kind's first child. A kind
    without that grouping level is a shape error, reported as
    ResolutionFailure.
    """
    if not kind.children:
        raise ResolutionFailure(
            f"Kind {kind.name!r} (id {kind.id!r}) has no grouping level below it",
            entity="type_grouping",
            field="kind",
            value=kind.name,
            candidates=0,
        )

    grouping = kind.children[0]
    if len(kind.children) > 1:
        logger.debug(
            f"Kind {kind.name!r} has {len(kind.children)} grouping nodes, searching the first"
        )

    return _require(
        grouping.children or [],
        lambda node: node.name == type_name,
        entity="type",
        field="name",
        value=type_name,
    )
