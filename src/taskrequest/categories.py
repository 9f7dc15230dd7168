"""Resolve which code element root holds a module's kind/type classification."""

import logging
from collections.abc import Mapping
from typing import Any

from pydantic import ValidationError

from core.errors.exceptions import ResolutionFailure
from taskrequest.schemas.code_elements import KIND_HIERARCHY_TYPES, ModuleMetadataEntry

logger = logging.getLogger(__name__)


def resolve_category(module_metadata: Mapping[str, Any]) -> str:
    """
    Return the code of the module's kind/type hierarchy.

    ``module_metadata`` is the mapping returned by
    ``getmetadatabymodules/{module}``: code -> entry with a ``hierarchyType``.
    The first entry (in mapping order) whose ``hierarchyType`` is one of
    ``SortKindAndType`` / ``KindAndType`` wins. Entries that are not objects,
    or whose ``hierarchyType`` is not a string, never match.

    Raises:
        ResolutionFailure: No entry carries a recognized hierarchy type
    """
    matches = []
    for code, raw_entry in module_metadata.items():
        if not isinstance(raw_entry, Mapping):
            continue
        try:
            entry = ModuleMetadataEntry.model_validate(raw_entry)
        except ValidationError:
            logger.debug(f"Skipping metadata entry {code!r} with unusable hierarchyType")
            continue
        if entry.hierarchy_type in KIND_HIERARCHY_TYPES:
            matches.append(code)

    if not matches:
        raise ResolutionFailure(
            "Module metadata has no entry with hierarchyType in "
            f"{sorted(KIND_HIERARCHY_TYPES)}",
            entity="module_category",
            field="hierarchyType",
            value=sorted(KIND_HIERARCHY_TYPES),
            candidates=len(module_metadata),
        )

    if len(matches) > 1:
        logger.warning(
            f"Module metadata has {len(matches)} kind/type entries, using the first",
            extra={"category_code": matches[0], "candidates": len(matches)},
        )

    return matches[0]
