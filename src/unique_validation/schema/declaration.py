"""
Schema declarations: which fields (and which compound indexes) are unique.

A schema has two parts:

  - `tree`: field name -> FieldSpec. A FieldSpec may declare `unique=True` or
    `unique="custom message"`, and may nest sub-document fields under `fields`.
  - `indexes`: explicit (possibly compound) index declarations, each with an
    ordered key mapping and the same `unique` option.

Plain dicts work through pydantic validation:

    Schema.model_validate({
        "tree": {"email": {"unique": "Email already registered"},
                 "address": {"fields": {"city": {}}}},
        "indexes": [{"keys": {"name": 1, "age": 1}, "unique": True}],
    })

or the tree can be read from a pydantic model, where uniqueness is declared with
`Field(json_schema_extra={"unique": ...})` (see `Schema.from_model`).
"""

from __future__ import annotations

from typing import Any, Iterator, Sequence

from pydantic import BaseModel, Field, PrivateAttr
from pymongo import ASCENDING, IndexModel

# True/False or a custom message (meaning True).
UniqueOption = bool | str


class FieldSpec(BaseModel):
    unique: UniqueOption = False
    fields: dict[str, FieldSpec] = Field(default_factory=dict)


class IndexSpec(BaseModel):
    # Insertion order is the index key order.
    keys: dict[str, int | str]
    unique: UniqueOption = False
    name: str | None = None

    def to_index_model(self) -> IndexModel:
        options: dict[str, Any] = {"unique": bool(self.unique)}
        if self.name:
            options["name"] = self.name
        return IndexModel(list(self.keys.items()), **options)


class Schema(BaseModel):
    tree: dict[str, FieldSpec] = Field(default_factory=dict)
    indexes: list[IndexSpec] = Field(default_factory=list)

    # Custom messages already taken out of the options by collect_field_messages().
    _unique_messages: dict[str, str] = PrivateAttr(default_factory=dict)

    def iter_fields(self) -> Iterator[tuple[str, FieldSpec]]:
        """Yield (dotted path, spec) for every declared field, depth first."""
        yield from _walk(self.tree, prefix="")

    def index(self, keys: dict[str, int | str], *, unique: UniqueOption = False, name: str | None = None) -> IndexSpec:
        """Declare an additional index and return it."""
        spec = IndexSpec(keys=keys, unique=unique, name=name)
        self.indexes.append(spec)
        return spec

    def index_models(self) -> list[IndexModel]:
        """
        The unique indexes this schema needs: one single-field index per unique
        tree field, plus every declared index.
        """
        models = [
            IndexModel([(path, ASCENDING)], unique=True)
            for path, spec in self.iter_fields()
            if spec.unique
        ]
        models.extend(index.to_index_model() for index in self.indexes)
        return models

    @classmethod
    def from_model(cls, model: type[BaseModel], indexes: Sequence[IndexSpec | dict] = ()) -> Schema:
        """
        Build a schema from a pydantic model class.

        Field paths use the field alias when one is set (that is the stored key).
        Fields annotated with another BaseModel subclass become nested sub-documents.
        """
        return cls(
            tree=_tree_from_model(model),
            indexes=[IndexSpec.model_validate(index) if isinstance(index, dict) else index for index in indexes],
        )


def _walk(tree: dict[str, FieldSpec], prefix: str) -> Iterator[tuple[str, FieldSpec]]:
    for name, spec in tree.items():
        path = f"{prefix}{name}"
        yield path, spec
        if spec.fields:
            yield from _walk(spec.fields, prefix=f"{path}.")


def _tree_from_model(model: type[BaseModel]) -> dict[str, FieldSpec]:
    tree: dict[str, FieldSpec] = {}
    for name, info in model.model_fields.items():
        extra = info.json_schema_extra if isinstance(info.json_schema_extra, dict) else {}
        annotation = info.annotation
        nested = (
            _tree_from_model(annotation)
            if isinstance(annotation, type) and issubclass(annotation, BaseModel)
            else {}
        )
        tree[info.alias or name] = FieldSpec(unique=extra.get("unique", False), fields=nested)
    return tree
