# -*- coding: utf-8 -*-
#
# jsonapi document shapes:
# - TypedDicts used to annotate the plain dicts that flow through the (de)serializers
# - pydantic models used to validate incoming resources and to build error objects
#
from typing import Any, Dict, List, Optional, TypedDict, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .errors import FormatError


class JSONAPIResourceIdentifier(TypedDict, total=False):
    id: str
    lid: str
    type: str


class JSONAPIResourceObject(JSONAPIResourceIdentifier, total=False):
    attributes: Dict[str, Any]
    relationships: Dict[str, Any]
    meta: Dict[str, Any]
    links: Dict[str, Any]


JSONAPIData = Union[JSONAPIResourceObject, List[JSONAPIResourceObject], None]


class JSONAPIDocument(TypedDict, total=False):
    data: JSONAPIData
    meta: Dict[str, Any]
    errors: List[Dict[str, Any]]
    included: List[JSONAPIResourceObject]
    links: Dict[str, Any]


class PermissiveModel(BaseModel):
    model_config = ConfigDict(extra="allow")


class ResourceIdentifier(PermissiveModel):
    type: str = Field(min_length=1)
    id: Optional[Union[str, int]] = None
    lid: Optional[str] = None


class RelationshipObject(PermissiveModel):
    data: Union[List[ResourceIdentifier], ResourceIdentifier, None] = None
    links: Optional[Dict[str, Any]] = None
    meta: Optional[Dict[str, Any]] = None


class ResourceObject(PermissiveModel):
    type: str = Field(min_length=1)
    id: Optional[Union[str, int]] = None
    lid: Optional[str] = None
    attributes: Optional[Dict[str, Any]] = None
    relationships: Optional[Dict[str, RelationshipObject]] = None
    links: Optional[Dict[str, Any]] = None
    meta: Optional[Dict[str, Any]] = None


class JsonApiErrorSource(PermissiveModel):
    pointer: Optional[str] = None
    parameter: Optional[str] = None


class JsonApiErrorObject(PermissiveModel):
    id: Optional[str] = None
    links: Optional[Dict[str, Any]] = None
    status: Optional[str] = None
    code: Optional[str] = None
    title: Optional[str] = None
    detail: Optional[str] = None
    source: Optional[JsonApiErrorSource] = None
    meta: Optional[Dict[str, Any]] = None


def _pointer_from_loc(prefix: str, loc: tuple) -> str:
    segments = [str(segment).replace("~", "~0").replace("/", "~1") for segment in loc]
    return "/".join([prefix] + segments)


def validate_resource(resource: Any, pointer: str = "/data") -> ResourceObject:
    """
    :param resource: jsonapi resource object (dict)
    :param pointer: JSON pointer to the resource in the request document
    :return: validated ResourceObject
    :raises FormatError: when the resource is malformed, eg. when it has no type
    """
    if not isinstance(resource, dict):
        raise FormatError(f"resource object must be an object, got {type(resource).__name__}", pointer=pointer)
    try:
        return ResourceObject.model_validate(resource)
    except ValidationError as exc:
        first = exc.errors()[0]
        loc = tuple(first.get("loc", ()))
        if loc and loc[0] == "type":
            raise FormatError(f"missing or empty type in {pointer}", pointer=f"{pointer}/type") from exc
        raise FormatError(f"invalid resource object: {first.get('msg')}", pointer=_pointer_from_loc(pointer, loc)) from exc
