"""Pydantic models for parsed ER diagram text."""

from __future__ import annotations

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field


class Cardinality(str, Enum):
    ZERO_OR_ONE = "zero_or_one"
    EXACTLY_ONE = "exactly_one"
    ZERO_OR_MORE = "zero_or_more"
    ONE_OR_MORE = "one_or_more"


LEFT_CARDINALITIES = {
    "|o": Cardinality.ZERO_OR_ONE,
    "||": Cardinality.EXACTLY_ONE,
    "}o": Cardinality.ZERO_OR_MORE,
    "}|": Cardinality.ONE_OR_MORE,
}

RIGHT_CARDINALITIES = {
    "o|": Cardinality.ZERO_OR_ONE,
    "||": Cardinality.EXACTLY_ONE,
    "o{": Cardinality.ZERO_OR_MORE,
    "|{": Cardinality.ONE_OR_MORE,
}


class ERAttribute(BaseModel):
    type: str
    name: str
    keys: List[str] = Field(default_factory=list)
    comment: Optional[str] = None

    @property
    def is_primary_key(self) -> bool:
        return "PK" in self.keys


class EREntity(BaseModel):
    id: str
    attributes: List[ERAttribute] = Field(default_factory=list)


class ERRelationship(BaseModel):
    left: str
    right: str
    left_cardinality: Cardinality
    right_cardinality: Cardinality
    identifying: bool = True  # "--" is identifying, ".." is not
    label: str = ""


class ERDocument(BaseModel):
    entities: List[EREntity] = Field(default_factory=list)
    relationships: List[ERRelationship] = Field(default_factory=list)

    def entity_ids(self) -> List[str]:
        """Declared entities first, then entities only named by relationships."""
        ids = {e.id: None for e in self.entities}
        for rel in self.relationships:
            ids.setdefault(rel.left, None)
            ids.setdefault(rel.right, None)
        return list(ids)
