# -*- coding: utf-8 -*-
#
# Match included resources with the relationships that reference them
#
from typing import Any, Dict, List, Mapping, NamedTuple, Optional
from .deserializer import RelationshipCardinality
from .jsonapi_types import RelationshipObject, ResourceIdentifier, ResourceObject


class Identity(NamedTuple):
    type: str
    id: Optional[str]
    lid: Optional[str]

    def identifies(self, other: "Identity") -> bool:
        """
        Resources are identified by type+id, or by type+lid if they don't have an id yet
        """
        if self.type != other.type:
            return False
        if self.id is not None or other.id is not None:
            return self.id == other.id
        return self.lid is not None and self.lid == other.lid


def identity_of(resource: Any) -> Identity:
    """
    :param resource: ResourceObject, ResourceIdentifier or dict
    :return: Identity
    """
    if isinstance(resource, (ResourceObject, ResourceIdentifier)):
        type_, id_, lid = resource.type, resource.id, resource.lid
    else:
        type_, id_, lid = resource.get("type"), resource.get("id"), resource.get("lid")
    return Identity(type_, None if id_ is None else str(id_), lid)


class RelationshipMatcher:
    """
    Decides which relationships of a resource reference a candidate (included) resource
    """

    def __init__(self, relationships: Optional[Mapping[str, RelationshipObject]]) -> None:
        """
        :param relationships: relationship name => relationship object of the referencing resource
        """
        self._linkage: Dict[str, List[Identity]] = {}
        for rel_name, relationship in (relationships or {}).items():
            data = relationship.data
            if data is None:
                identifiers = []
            elif isinstance(data, list):
                identifiers = data
            else:
                identifiers = [data]
            self._linkage[rel_name] = [identity_of(identifier) for identifier in identifiers]

    def match(self, resource: Any) -> List[str]:
        """
        :param resource: candidate resource
        :return: names of the relationships referencing `resource`, in declaration order
        """
        identity = identity_of(resource)
        return [rel_name for rel_name, identities in self._linkage.items() if any(ref.identifies(identity) for ref in identities)]

    @staticmethod
    def cardinality_of(rel_name: str, cardinality: RelationshipCardinality) -> Optional[str]:
        """
        :return: TO_ONE, TO_MANY or None when `rel_name` isn't declared
        """
        return cardinality.of(rel_name)
