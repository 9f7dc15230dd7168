"""
Code element schemas.

Code elements are the platform's generic classification settings, shared by
every module. They are self-referential through ``parentId`` and arrive as a
flat list; ``taskrequest.hierarchy`` turns them into a forest.
"""

from typing import Any

from pydantic import BaseModel, Field

# hierarchyType values that mark a module's kind/type classification
KIND_HIERARCHY_TYPES = frozenset({"SortKindAndType", "KindAndType"})


class CodeElement(BaseModel):
    """One classification node as returned by ``/api/masterdata/codeelements``.

    ``children`` is None on nodes taken straight from the API and is only
    filled in on the copies produced by ``build_forest``. Fields the pipeline
    does not use are kept as extras.

    Example:
        >>> node = CodeElement.model_validate({"id": 2, "parentId": 1, "name": "Maintenance"})
        >>> node.parent_id
        1
    """

    id: int | str
    parent_id: int | str | None = Field(default=None, alias="parentId")
    code: str | None = None
    name: str | None = None
    hierarchy_type: str | None = Field(default=None, alias="hierarchyType")
    children: list["CodeElement"] | None = None

    model_config = {
        "populate_by_name": True,
        "extra": "allow",
    }

    @property
    def is_root(self) -> bool:
        """Roots carry a code and no parent reference."""
        return not self.parent_id and bool(self.code)


class ModuleMetadataEntry(BaseModel):
    """One value of the ``getmetadatabymodules/{module}`` mapping."""

    hierarchy_type: str | None = Field(default=None, alias="hierarchyType")

    model_config = {
        "populate_by_name": True,
        "extra": "allow",
    }


def parse_code_elements(payload: list[dict[str, Any]]) -> list[CodeElement]:
    """Validate the raw code element list from the API."""
    return [CodeElement.model_validate(item) for item in payload]
