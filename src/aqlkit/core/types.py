"""Value objects for AQL query construction.

This module defines the pydantic models and enums consumed by the filter
compiler, the query builders and the database facade. All of them are
transient: they are built per call by the caller and read once by a builder.

Links to third-party documentation:
- Pydantic: https://docs.pydantic.dev/
- AQL bind parameters: https://docs.arangodb.com/stable/aql/fundamentals/bind-parameters/

Sample input:
    UniqueConstraint(
        collection="users",
        constraints=[
            UniqueValue(unique=NamedValue(name="username", value="lance")),
            CompositeKey(composite=[
                NamedValue(name="name", value="Lance"),
                NamedValue(name="surname", value="Armstrong"),
            ]),
        ],
    )

Expected output:
    A validated model whose constraints are tagged "unique" / "composite".
"""

from enum import Enum
from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing_extensions import Annotated


class InvalidInputError(ValueError):
    """Raised when a builder receives structurally empty input."""


class DocumentNotFoundError(LookupError):
    """Raised when a document required by an operation does not exist."""


class MatchType(str, Enum):
    """How multiple constraints or clauses are combined."""
    ANY = "ANY"
    ALL = "ALL"

    @property
    def operator(self) -> str:
        return MatchTypeOperator[self.name].value


class MatchTypeOperator(str, Enum):
    """AQL logical operator for each MatchType."""
    ANY = "||"
    ALL = "&&"


class DbClearanceStrategy(str, Enum):
    """How `clear_db` empties a database."""
    DELETE_DATA = "DELETE_DATA"
    RECREATE_DB = "RECREATE_DB"


class ArrayUpdateStrategy(str, Enum):
    """How `update_array_object` applies changes to a matching array element."""
    MERGE = "merge"
    REPLACE = "replace"


class IndexedValue(BaseModel):
    """One located occurrence of a marker substring."""
    index: int
    value: str


class NamedValue(BaseModel):
    """A property-equality constraint."""
    name: str = Field(..., min_length=1)
    value: Any = None
    case_sensitive: bool = True

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("name must be a non-empty property path")
        return v.strip()


class CompositeKey(BaseModel):
    """An AND-group of equalities identifying one candidate match."""
    kind: Literal["composite"] = "composite"
    composite: List[NamedValue] = Field(..., min_length=1)


class UniqueValue(BaseModel):
    """A single equality, used as one OR-branch of a uniqueness check."""
    kind: Literal["unique"] = "unique"
    unique: NamedValue


Constraint = Annotated[Union[CompositeKey, UniqueValue], Field(discriminator="kind")]


class AqlQuery(BaseModel):
    """Query text plus the bind variables it references."""
    query: str
    bind_vars: Dict[str, Any] = Field(default_factory=dict)


class SearchTerms(BaseModel):
    """Substring (LIKE) search over one or more properties."""
    properties: Union[str, List[str]]
    terms: Union[str, List[str]]
    match: MatchType = MatchType.ANY

    @staticmethod
    def _split(v: Union[str, List[str]]) -> List[str]:
        if isinstance(v, str):
            return [p.strip() for p in v.split(",")]
        return [p.strip() for p in v]

    def property_list(self) -> List[str]:
        return [p for p in self._split(self.properties) if p]

    def term_list(self) -> List[str]:
        return self._split(self.terms)


class ListOfFilters(BaseModel):
    """Pre-written boolean clauses combined with one MatchType."""
    filters: List[str]
    match: MatchType = MatchType.ANY
    auto_prefix_prop_names: bool = False


class Criteria(BaseModel):
    """A filter and/or search, combined with `match` when both are present."""
    filter: Optional[Union[str, ListOfFilters, AqlQuery]] = None
    search: Optional[SearchTerms] = None
    match: MatchType = MatchType.ANY


class UniqueConstraint(BaseModel):
    """OR of unique values and composite keys that must not already exist."""
    collection: str
    constraints: List[Constraint] = Field(default_factory=list)
    exclude_document_key: Optional[str] = None
    case_insensitive: bool = False
    search: Optional[SearchTerms] = None


class UniqueConstraintResult(BaseModel):
    violates_unique_constraint: bool
    documents: List[Any] = Field(default_factory=list)


class DocumentTrimOptions(BaseModel):
    """Fields to drop from (or keep in) returned documents."""
    strip_private_props: bool = False
    omit: Optional[Union[str, List[str]]] = None
    keep: Optional[Union[str, List[str]]] = None


class LogOptions(BaseModel):
    """Facade-wide query logging switches."""
    print_queries: bool = False
    debug_filters: bool = False


class FetchOptions(BaseModel):
    """Sorting, paging, result shape and trimming for fetch operations."""
    sort_by: Optional[str] = None
    sort_order: Optional[str] = None
    limit: Optional[int] = Field(None, ge=0)
    offset: Optional[int] = Field(None, ge=0)
    trim: Optional[DocumentTrimOptions] = None
    return_cursor: bool = False
    prefix_property_names: bool = True
    print_query: bool = False
    debug_filters: bool = False
    query: Dict[str, Any] = Field(default_factory=dict)


class QueryResult(BaseModel):
    """Materialised query result."""
    data: List[Any] = Field(default_factory=list)
    size: Optional[int] = None
    total: Optional[int] = None


class Identifier(BaseModel):
    """Selects documents by key, or by `property == value` when property is set."""
    value: Union[str, int]
    property: Optional[str] = None


class DocumentUpdate(BaseModel):
    key: Union[str, Identifier]
    data: Dict[str, Any]


class EdgeDefinition(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    collection: str
    from_: Union[str, List[str]] = Field(..., alias="from")
    to: Union[str, List[str]]

    def to_driver(self) -> Dict[str, Any]:
        """Edge definition in the shape python-arango expects."""
        return {
            "edge_collection": self.collection,
            "from_vertex_collections": [self.from_] if isinstance(self.from_, str) else list(self.from_),
            "to_vertex_collections": [self.to] if isinstance(self.to, str) else list(self.to),
        }


class EdgeRelation(BaseModel):
    """One edge to save: `from` and `to` are document ids, `data` the edge body."""
    model_config = ConfigDict(populate_by_name=True)

    from_: Optional[str] = Field(None, alias="from")
    to: Optional[str] = None
    data: Dict[str, Any] = Field(default_factory=dict)


class GraphDefinition(BaseModel):
    name: str
    edges: List[EdgeDefinition] = Field(default_factory=list)


class DbStructure(BaseModel):
    collections: List[str] = Field(default_factory=list)
    graphs: List[Union[GraphDefinition, str]] = Field(default_factory=list)

    def graph_names(self) -> List[str]:
        return [g if isinstance(g, str) else g.name for g in self.graphs]

    def graph_definition(self, name: str) -> Optional[GraphDefinition]:
        for g in self.graphs:
            if isinstance(g, GraphDefinition) and g.name == name:
                return g
        return None


class EntityExists(BaseModel):
    name: str
    exists: bool


class DbStructureValidation(BaseModel):
    database: Optional[EntityExists] = None
    collections: List[EntityExists] = Field(default_factory=list)
    graphs: List[EntityExists] = Field(default_factory=list)
    message: Optional[str] = None


class DbStructureResult(BaseModel):
    database: Optional[str] = None
    collections: List[str] = Field(default_factory=list)
    graphs: List[str] = Field(default_factory=list)
    error: Optional[str] = None


__all__ = [
    "InvalidInputError",
    "DocumentNotFoundError",
    "MatchType",
    "MatchTypeOperator",
    "DbClearanceStrategy",
    "ArrayUpdateStrategy",
    "IndexedValue",
    "NamedValue",
    "CompositeKey",
    "UniqueValue",
    "Constraint",
    "AqlQuery",
    "SearchTerms",
    "ListOfFilters",
    "Criteria",
    "UniqueConstraint",
    "UniqueConstraintResult",
    "DocumentTrimOptions",
    "LogOptions",
    "FetchOptions",
    "QueryResult",
    "Identifier",
    "DocumentUpdate",
    "EdgeDefinition",
    "EdgeRelation",
    "GraphDefinition",
    "DbStructure",
    "EntityExists",
    "DbStructureValidation",
    "DbStructureResult",
]
