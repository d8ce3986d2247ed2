"""
Model definitions (read-only inputs supplied by the Context).

Parsed from the JSON shape stored in model streams:

    {
        "name": "Post",
        "version": "2.0",
        "accountRelation": {"type": "set", "fields": ["foo", "bar"]},
        "schema": {...},
        "immutableFields": ["title"],
        "relations": {"author": {"type": "document", "model": "k2t6..."}},
        "implements": [],
        "interface": false
    }
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Union

from ..errors import EncodingError


class AccountRelationKind(str, Enum):
    NONE = "none"
    SINGLE = "single"
    LIST = "list"
    SET = "set"


class RelationKind(str, Enum):
    DOCUMENT = "document"
    ACCOUNT = "account"


@dataclass(frozen=True)
class AccountRelation:
    """
    Account relation of a model.

    Fields:
        type: Relation kind; unknown kinds are kept as raw strings and
              rejected when a document is created
        fields: Set-semantics fields (SET only), in declaration order
    """
    type: Union[AccountRelationKind, str]
    fields: List[str] = field(default_factory=list)

    @staticmethod
    def from_dict(data: Any) -> "AccountRelation":
        if not isinstance(data, dict):
            raise EncodingError("Model accountRelation must be a map")
        raw = data.get("type")
        try:
            kind: Union[AccountRelationKind, str] = AccountRelationKind(raw)
        except ValueError:
            kind = str(raw)
        return AccountRelation(type=kind, fields=list(data.get("fields") or []))


@dataclass(frozen=True)
class RelationDefinition:
    type: RelationKind
    model: Optional[str] = None

    @staticmethod
    def from_value(value: Any) -> "RelationDefinition":
        # A bare string is shorthand for a document relation to that model
        if isinstance(value, str):
            return RelationDefinition(type=RelationKind.DOCUMENT, model=value)
        if not isinstance(value, dict):
            raise EncodingError(f"Invalid relation definition {value!r}")
        try:
            kind = RelationKind(value.get("type"))
        except ValueError as e:
            raise EncodingError(f"Unsupported relation type {value.get('type')!r}") from e
        return RelationDefinition(type=kind, model=value.get("model"))


@dataclass(frozen=True)
class ModelDefinition:
    """
    Model definition.

    Fields:
        name: Model name (used in error messages)
        schema: JSON schema document for instance content
        account_relation: Account relation policy
        immutable_fields: Fields that can't change after the first content
        relations: field name -> relation definition
        implements: Interface model ids this model implements
        interface: Whether the model is an interface
        version: Definition format version
    """
    name: Optional[str]
    schema: Dict[str, Any]
    account_relation: AccountRelation
    immutable_fields: List[str] = field(default_factory=list)
    relations: Dict[str, RelationDefinition] = field(default_factory=dict)
    implements: List[str] = field(default_factory=list)
    interface: bool = False
    version: str = "2.0"

    @property
    def kind(self) -> Union[AccountRelationKind, str]:
        return self.account_relation.type

    @property
    def unique_fields(self) -> List[str]:
        return list(self.account_relation.fields)

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> "ModelDefinition":
        if not isinstance(data, dict):
            raise EncodingError("Model definition must be a map")
        relations = {
            name: RelationDefinition.from_value(value)
            for name, value in (data.get("relations") or {}).items()
        }
        return ModelDefinition(
            name=data.get("name"),
            schema=data.get("schema") or {},
            account_relation=AccountRelation.from_dict(data.get("accountRelation") or {}),
            immutable_fields=list(data.get("immutableFields") or []),
            relations=relations,
            implements=[str(i) for i in (data.get("implements") or [])],
            interface=bool(data.get("interface", False)),
            version=str(data.get("version", "2.0")),
        )

    @staticmethod
    def coerce(value: Union["ModelDefinition", Dict[str, Any]]) -> "ModelDefinition":
        if isinstance(value, ModelDefinition):
            return value
        return ModelDefinition.from_dict(value)
