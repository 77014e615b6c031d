# -*- coding: utf-8 -*-
#
# Per-type deserializer descriptors.
#
# A descriptor turns a single (normalized) jsonapi resource object into a flat
# attribute dict and declares the cardinality of its relationships, which is
# consulted by the DeepDeserializer to nest the included resources.
#
# Descriptors can be declared as subclasses:
#
#   class ArticleDeserializer(Deserializer):
#       type_ = "articles"
#       to_one = {"author"}
#       to_many = {"comments"}
#
# or derived from a SQLAlchemy model with Deserializer.from_model(Article)
#
from dataclasses import dataclass
from typing import Any, Dict, FrozenSet, Iterable, Optional, Type
import sqlalchemy
from sqlalchemy.orm.interfaces import MANYTOONE, MANYTOMANY, ONETOMANY
from .naming import singularize

TO_ONE = "to_one"
TO_MANY = "to_many"


@dataclass(frozen=True)
class RelationshipCardinality:
    """
    Relationship names of a resource type, grouped by cardinality
    """

    to_one: FrozenSet[str] = frozenset()
    to_many: FrozenSet[str] = frozenset()

    def of(self, rel_name: str) -> Optional[str]:
        """
        :param rel_name: relationship name (python naming convention)
        :return: TO_ONE, TO_MANY or None if the relationship isn't declared
        """
        if rel_name in self.to_one:
            return TO_ONE
        if rel_name in self.to_many:
            return TO_MANY
        return None

    @classmethod
    def of_descriptor(cls, descriptor: Any) -> "RelationshipCardinality":
        cardinality = getattr(descriptor, "cardinality", None)
        if isinstance(cardinality, cls):
            return cardinality
        return cls(frozenset(getattr(descriptor, "to_one", ())), frozenset(getattr(descriptor, "to_many", ())))


class Deserializer:
    """
    Default deserializer descriptor:
    - the resource "id" is kept as "id"
    - attributes are copied (only the declared `attributes` if these are set)
    - to-one relationship linkage becomes "<name>_id" and "<name>_type"
    - to-many relationship linkage becomes "<singular name>_ids" and "<singular name>_types"

    Relationships that aren't declared in `to_one` or `to_many` are ignored.
    """

    type_: Optional[str] = None
    attributes: Optional[Iterable[str]] = None
    to_one: Iterable[str] = frozenset()
    to_many: Iterable[str] = frozenset()

    def __init__(
        self,
        type_: Optional[str] = None,
        attributes: Optional[Iterable[str]] = None,
        to_one: Optional[Iterable[str]] = None,
        to_many: Optional[Iterable[str]] = None,
        name: Optional[str] = None,
    ) -> None:
        if type_ is not None:
            self.type_ = type_
        if attributes is not None:
            self.attributes = attributes
        if self.attributes is not None:
            self.attributes = frozenset(self.attributes)
        self.cardinality = RelationshipCardinality(
            frozenset(self.to_one if to_one is None else to_one), frozenset(self.to_many if to_many is None else to_many)
        )
        self.to_one = self.cardinality.to_one
        self.to_many = self.cardinality.to_many
        self._name = name

    @property
    def name(self) -> str:
        """
        :return: descriptor name, used by the naming convention lookup of the registry
        """
        return self._name or self.__class__.__name__

    def __repr__(self) -> str:
        return f"<{self.name} type={self.type_!r}>"

    def __call__(self, resource: Dict[str, Any]) -> Dict[str, Any]:
        """
        :param resource: normalized jsonapi resource object
        :return: flat attribute dict
        """
        result: Dict[str, Any] = {}
        if resource.get("id") is not None:
            result["id"] = resource["id"]

        for attr_name, attr_val in (resource.get("attributes") or {}).items():
            if self.attributes is None or attr_name in self.attributes:
                result[attr_name] = attr_val

        for rel_name, relationship in (resource.get("relationships") or {}).items():
            if self.cardinality.of(rel_name) is None:
                continue
            if not isinstance(relationship, dict) or "data" not in relationship:
                continue
            linkage = relationship["data"]
            if isinstance(linkage, list):
                result[f"{singularize(rel_name)}_ids"] = [item.get("id") for item in linkage]
                result[f"{singularize(rel_name)}_types"] = [item.get("type") for item in linkage]
            elif linkage is None:
                result[f"{rel_name}_id"] = None
                result[f"{rel_name}_type"] = None
            else:
                result[f"{rel_name}_id"] = linkage.get("id")
                result[f"{rel_name}_type"] = linkage.get("type")

        return result

    @classmethod
    def from_model(cls, Model: Type[Any], type_: Optional[str] = None, name: Optional[str] = None, **kwargs: Any) -> "Deserializer":
        """
        Create a descriptor for a SQLAlchemy model:
        MANYTOONE (and uselist=False) relationships are to-one, ONETOMANY and MANYTOMANY are to-many

        :param Model: SQLAlchemy declarative class
        :param type_: jsonapi type, defaults to the tablename
        :param name: descriptor name, defaults to "<ModelName>Deserializer"
        """
        mapper = sqlalchemy.inspect(Model)
        to_one = set()
        to_many = set()
        for rel in mapper.relationships:
            if rel.direction == MANYTOONE or not rel.uselist:
                to_one.add(rel.key)
            elif rel.direction in (ONETOMANY, MANYTOMANY):
                to_many.add(rel.key)

        return cls(
            type_=type_ or getattr(Model, "__tablename__", Model.__name__),
            to_one=to_one,
            to_many=to_many,
            name=name or f"{Model.__name__}Deserializer",
            **kwargs,
        )
