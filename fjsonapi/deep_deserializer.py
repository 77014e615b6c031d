# -*- coding: utf-8 -*-
#
# DeepDeserializer: converts a jsonapi request document into a nested attribute dict
#
# {
#     "data": {
#         "type": "articles",
#         "attributes": {"title": "Hi"},
#         "relationships": {"author": {"data": {"type": "people", "id": "1"}}}
#     },
#     "included": [{"type": "people", "id": "1", "attributes": {"name": "Jo"}}]
# }
#
# =>
#
# {"title": "Hi", "author_id": "1", "author_type": "people", "author_attributes": {"id": "1", "name": "Jo"}}
#
# The "<relationship>_attributes" keys follow the nested attributes convention, so the
# result can be used to construct an object together with its related objects.
#
import re
from typing import Any, Dict, List, Mapping, Optional, Sequence
from .config import JSONAPIConfig
from .deserializer import TO_MANY, TO_ONE, RelationshipCardinality
from .errors import FormatError
from .jsonapi_types import JSONAPIDocument, JSONAPIResourceObject, ResourceObject, validate_resource
from .matcher import RelationshipMatcher, identity_of
from .naming import singularize, underscore
from .registry import ResourceTypeRegistry

NESTED_SUFFIX = "_attributes"


class DeepDeserializer:
    """
    Deserialize jsonapi documents with the descriptors resolved from `registry`
    """

    def __init__(self, registry: ResourceTypeRegistry, config: Optional[JSONAPIConfig] = None) -> None:
        self.registry = registry
        self.config = config or JSONAPIConfig()
        self._local_id_regex = re.compile(self.config.local_id_pattern) if self.config.local_id_pattern else None

    def deserialize(self, document: JSONAPIDocument, lid_key: Optional[str] = None) -> Dict[str, Any]:
        """
        :param document: jsonapi document, or a bare resource object
        :param lid_key: attribute name under which the resource "lid" is preserved, defaults to the configured lid_key
        :return: nested attribute dict
        :raises FormatError: malformed document
        :raises UnknownTypeError: a resource type has no registered deserializer
        """
        if not isinstance(document, Mapping):
            raise FormatError(f"document must be an object, got {type(document).__name__}", pointer="")
        if lid_key is None:
            lid_key = self.config.lid_key

        enveloped = "data" in document
        data = document["data"] if enveloped else document
        pointer = "/data" if enveloped else ""
        if isinstance(data, list):
            raise FormatError("primary data must be a single resource object", pointer=pointer)

        included = document.get("included") or []
        if not isinstance(included, list):
            raise FormatError("included must be an array", pointer="/included")
        # every included resource must have a type, even if it's never deserialized
        included_resources = [validate_resource(item, f"/included/{index}") for index, item in enumerate(included)]

        return self._deserialize(data, pointer, lid_key, list(zip(included, included_resources)))

    def normalize(self, data: JSONAPIResourceObject, lid_key: Optional[str] = None) -> JSONAPIResourceObject:
        """
        Transform the *attributes* and *relationships* keys to the python naming convention
        and copy the local id *lid* into the attributes. The input is not modified.

        normalize(normalize(data)) == normalize(data)

        :param data: jsonapi resource object
        :param lid_key: attribute name for the local id
        :return: normalized copy of `data`
        """
        transform = self.config.key_transform
        result = dict(data)
        if data.get("attributes"):
            result["attributes"] = {transform(key): value for key, value in data["attributes"].items()}
        if data.get("relationships"):
            result["relationships"] = {transform(key): value for key, value in data["relationships"].items()}
        if lid_key and data.get(lid_key) is not None:
            result["attributes"] = dict(result.get("attributes") or {})
            result["attributes"][lid_key] = data[lid_key]
        return result

    def _deserialize(self, data: Any, pointer: str, lid_key: Optional[str], included: Sequence[tuple]) -> Dict[str, Any]:
        """
        :param data: jsonapi resource object
        :param pointer: JSON pointer to `data`, used in the error messages
        :param included: (raw, validated) pairs of the included resources
        """
        resource = validate_resource(data, pointer)
        normalized = self.normalize(data, lid_key)
        descriptor = self.registry.deserializer_for(resource.type)
        cardinality = RelationshipCardinality.of_descriptor(descriptor)
        if self.config.strict:
            self._check_relationships(normalized, resource.type, pointer, cardinality)

        deserialized = descriptor(normalized)
        self._keep_local_id(deserialized, normalized, lid_key)
        self._drop_local_id(deserialized)

        if included:
            if self.config.strict:
                self._nest_included(deserialized, resource, cardinality, lid_key, included)
            else:
                self._nest_included_by_type(deserialized, cardinality, lid_key, included)

        return deserialized

    @staticmethod
    def _check_relationships(normalized: Dict[str, Any], type_name: str, pointer: str, cardinality: RelationshipCardinality) -> None:
        for rel_name in normalized.get("relationships") or {}:
            if cardinality.of(rel_name) is None:
                raise FormatError(f"undeclared relationship {rel_name!r} for type {type_name}", pointer=f"{pointer}/relationships/{rel_name}")

    @staticmethod
    def _keep_local_id(deserialized: Dict[str, Any], normalized: Dict[str, Any], lid_key: Optional[str]) -> None:
        # descriptors with an attribute whitelist would drop the local id
        attributes = normalized.get("attributes") or {}
        if lid_key and attributes.get(lid_key) is not None:
            deserialized[lid_key] = attributes[lid_key]

    def _drop_local_id(self, deserialized: Dict[str, Any]) -> None:
        # client placeholder ids shouldn't be used as database ids
        jsonapi_id = deserialized.get("id")
        if self._local_id_regex is not None and jsonapi_id is not None and self._local_id_regex.search(str(jsonapi_id)):
            del deserialized["id"]

    def _nest_included(
        self, deserialized: Dict[str, Any], resource: ResourceObject, cardinality: RelationshipCardinality, lid_key: Optional[str], included: Sequence[tuple]
    ) -> None:
        """
        Group the included resources by the relationship of `resource` that references them (type+id)
        and nest them under "<relationship>_attributes"
        """
        transform = self.config.key_transform
        relationships = {transform(rel_name): rel for rel_name, rel in (resource.relationships or {}).items()}
        matcher = RelationshipMatcher(relationships)

        grouped: Dict[str, List[tuple]] = {}
        for index, (raw, validated) in enumerate(included):
            rel_names = matcher.match(validated)
            if not rel_names:
                identity = identity_of(validated)
                raise FormatError(
                    f"unreferenced included resource {identity.type}/{identity.id or identity.lid}", pointer=f"/included/{index}"
                )
            for rel_name in rel_names:
                grouped.setdefault(rel_name, []).append((index, raw))

        for rel_name, group in grouped.items():
            kind = matcher.cardinality_of(rel_name, cardinality)
            # the included resources are deserialized as bare resources, they're never matched against `included` again
            if kind == TO_ONE:
                index, raw = group[0]
                deserialized[f"{rel_name}{NESTED_SUFFIX}"] = self._deserialize(raw, f"/included/{index}", lid_key, ())
            elif kind == TO_MANY:
                deserialized[f"{rel_name}{NESTED_SUFFIX}"] = [self._deserialize(raw, f"/included/{index}", lid_key, ()) for index, raw in group]

    def _nest_included_by_type(self, deserialized: Dict[str, Any], cardinality: RelationshipCardinality, lid_key: Optional[str], included: Sequence[tuple]) -> None:
        """
        Legacy behavior: group the included resources by their type and nest them
        when the relationship named after the type is declared, ignore them otherwise
        """
        grouped: Dict[str, List[tuple]] = {}
        for index, (raw, validated) in enumerate(included):
            grouped.setdefault(underscore(validated.type), []).append((index, raw))

        for type_name, group in grouped.items():
            singular = singularize(type_name)
            if cardinality.of(singular) == TO_ONE:
                index, raw = group[0]
                deserialized[f"{singular}{NESTED_SUFFIX}"] = self._deserialize(raw, f"/included/{index}", lid_key, ())
            elif cardinality.of(type_name) == TO_MANY:
                deserialized[f"{type_name}{NESTED_SUFFIX}"] = [self._deserialize(raw, f"/included/{index}", lid_key, ()) for index, raw in group]
