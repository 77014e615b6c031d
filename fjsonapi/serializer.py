# -*- coding: utf-8 -*-
#
# Per-type serializer descriptors.
#
# The error serializer only needs the attribute and relationship names of a serializer
# to derive the error "source.pointer", the rendering adapter uses `serialize` to
# encode the primary data of a response.
#
from typing import Any, Iterable, List, Mapping, Optional, Type, Union
import sqlalchemy
from .jsonapi_types import JSONAPIResourceIdentifier, JSONAPIResourceObject
from .naming import pluralize, underscore


class Serializer:
    """
    Default serializer descriptor:

        class PersonSerializer(Serializer):
            type_ = "people"
            attributes = ("name", "email")
            relationships = {"articles": "articles"}

    `relationships` maps the relationship name to the jsonapi type of the related
    resources, if only names are given the type is derived from the related instance class
    """

    type_: Optional[str] = None
    attributes: Iterable[str] = ()
    relationships: Union[Mapping[str, Optional[str]], Iterable[str]] = ()
    id_attribute: str = "id"

    def __init__(
        self,
        type_: Optional[str] = None,
        attributes: Optional[Iterable[str]] = None,
        relationships: Optional[Union[Mapping[str, Optional[str]], Iterable[str]]] = None,
        id_attribute: Optional[str] = None,
        name: Optional[str] = None,
    ) -> None:
        if type_ is not None:
            self.type_ = type_
        if id_attribute is not None:
            self.id_attribute = id_attribute
        self._attributes = tuple(self.attributes if attributes is None else attributes)
        relationships = self.relationships if relationships is None else relationships
        if isinstance(relationships, Mapping):
            self._relationships = dict(relationships)
        else:
            self._relationships = {rel_name: None for rel_name in relationships}
        self._name = name

    @property
    def name(self) -> str:
        return self._name or self.__class__.__name__

    @property
    def attribute_names(self) -> frozenset:
        return frozenset(self._attributes)

    @property
    def relationship_names(self) -> frozenset:
        return frozenset(self._relationships)

    def __repr__(self) -> str:
        return f"<{self.name} type={self.type_!r}>"

    def identifier(self, instance: Any, type_: Optional[str] = None) -> JSONAPIResourceIdentifier:
        """
        :param instance: related instance
        :param type_: jsonapi type, derived from the instance class if not set
        :return: jsonapi resource identifier
        """
        if type_ is None:
            type_ = pluralize(underscore(type(instance).__name__))
        return {"id": str(getattr(instance, self.id_attribute)), "type": type_}

    def serialize(self, instance: Any, fields: Optional[Mapping[str, List[str]]] = None, **options: Any) -> JSONAPIResourceObject:
        """
        :param instance: object to serialize
        :param fields: sparse fieldsets, jsonapi type => list of field names
        :return: jsonapi resource object
        """
        wanted = None
        if fields and self.type_ in fields:
            wanted = set(fields[self.type_])

        attributes = {}
        for attr_name in self._attributes:
            if wanted is None or attr_name in wanted:
                attributes[attr_name] = getattr(instance, attr_name, None)

        relationships = {}
        for rel_name, rel_type in self._relationships.items():
            if wanted is not None and rel_name not in wanted:
                continue
            related = getattr(instance, rel_name, None)
            if related is None:
                data = None
            elif isinstance(related, (list, tuple, set)) or hasattr(related, "all"):
                items = related.all() if hasattr(related, "all") else related
                data = [self.identifier(item, rel_type) for item in items]
            else:
                data = self.identifier(related, rel_type)
            relationships[rel_name] = {"data": data}

        jsonapi_id = getattr(instance, self.id_attribute, None)
        result: JSONAPIResourceObject = {"id": None if jsonapi_id is None else str(jsonapi_id), "type": self.type_}
        if attributes:
            result["attributes"] = attributes
        if relationships:
            result["relationships"] = relationships
        return result

    @classmethod
    def from_model(cls, Model: Type[Any], type_: Optional[str] = None, name: Optional[str] = None, **kwargs: Any) -> "Serializer":
        """
        Create a serializer for a SQLAlchemy model:
        the columns (except the primary keys and the foreign keys) are the attributes

        :param Model: SQLAlchemy declarative class
        :param type_: jsonapi type, defaults to the tablename
        :param name: descriptor name, defaults to "<ModelName>Serializer"
        """
        mapper = sqlalchemy.inspect(Model)
        attributes = []
        for column_attr in mapper.column_attrs:
            columns = column_attr.columns
            if any(column.primary_key or column.foreign_keys for column in columns):
                continue
            attributes.append(column_attr.key)

        relationships = {}
        for rel in mapper.relationships:
            target = rel.mapper.class_
            relationships[rel.key] = getattr(target, "__tablename__", None)

        return cls(
            type_=type_ or getattr(Model, "__tablename__", Model.__name__),
            attributes=attributes,
            relationships=relationships,
            name=name or f"{Model.__name__}Serializer",
            **kwargs,
        )
