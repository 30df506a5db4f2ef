"""Pydantic models handed to the import pipeline."""

from __future__ import annotations

from typing import Any, Dict, List

from pydantic import BaseModel, ConfigDict, Field

ImportOptions = Dict[str, Any]
"""Option name (path without ``import.``) to bool, numeric string or string."""


class ImportFilter(BaseModel):
    """Resource filter derived from one non-option expression.

    Serialized with the pipeline's field names (``Type``, ``Operator``,
    ``Values``) when dumped ``by_alias``.
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    type: str = Field(alias="Type")
    """Path the filter applies to, e.g. ``metadata.namespace``."""

    operator: str = Field(alias="Operator")
    """``include``, ``exclude``, or the original operator if unmapped."""

    values: List[str] = Field(default_factory=list, alias="Values")


class ImportProjection(BaseModel):
    """Filters and options projected from an import where-filter."""

    filters: List[ImportFilter] = Field(default_factory=list)
    options: ImportOptions = Field(default_factory=dict)


__all__ = ["ImportFilter", "ImportOptions", "ImportProjection"]
