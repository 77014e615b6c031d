# -*- coding: utf-8 -*-
#
# ErrorSerializer: renders error collections as a jsonapi error document
#
# Two kinds of input are supported:
# - "flat" errors: a list of dicts or objects exposing (some of) the jsonapi error members,
#   these are copied as they are
# - validation errors: a ValidationErrors instance (or a list of ErrorEntry), each
#   (attribute, code, message) is rendered as
#   {
#       "status": "422",
#       "title": "Unprocessable Entity",
#       "code": "blank",
#       "detail": "Email can't be blank",
#       "source": {"pointer": "/data/attributes/email"}
#   }
#
import re
from http import HTTPStatus
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence
from .config import JSONAPIConfig
from .jsonapi_types import JsonApiErrorObject, JsonApiErrorSource
from .naming import parameterize
from .util import is_blank, is_collection
from .validation import DEFAULT_CODE, ErrorEntry, ValidationErrors, full_message, is_validation_errors

ERROR_MEMBERS = ("id", "links", "status", "code", "title", "detail", "source", "meta")

# "items[2]" => ("items", "2")
INDEXED_SEGMENT = re.compile(r"^(?P<name>[^\[\]]+)\[(?P<index>\d+)\]$")


class ErrorSource:
    """
    Uniform access to the members of a "flat" error, whatever its representation
    """

    def __init__(self, error: Any) -> None:
        self.error = error

    def get(self, name: str) -> Any:
        raise NotImplementedError


class MappingErrorSource(ErrorSource):
    def get(self, name: str) -> Any:
        return self.error.get(name)


class ObjectErrorSource(ErrorSource):
    def get(self, name: str) -> Any:
        return getattr(self.error, name, None)


def as_error_source(error: Any) -> ErrorSource:
    if isinstance(error, Mapping):
        return MappingErrorSource(error)
    return ObjectErrorSource(error)


def resolve_nested_record(root: Any, path: Sequence[str]) -> Optional[Any]:
    """
    Walk the object graph from `root` along `path`, eg. ["recognitions[2]", "user"]:
    root.recognitions[2].user

    :param root: the validated record
    :param path: list of accessor segments, "name" or "name[index]"
    :return: the record at the end of the path, None if the path can't be walked
    """
    current = root
    for segment in path:
        if current is None:
            return None
        index = None
        if "[" in segment or "]" in segment:
            match = INDEXED_SEGMENT.match(segment)
            if match is None:
                return None
            segment, index = match.group("name"), int(match.group("index"))
        if isinstance(current, Mapping):
            current = current.get(segment)
        else:
            current = getattr(current, segment, None)
        if index is not None and current is not None:
            try:
                current = current[index]
            except (IndexError, KeyError, TypeError):
                return None
    return current


class ErrorSerializer:
    """
    Render errors as a jsonapi error document: {"errors": [...]}
    """

    def __init__(self, config: Optional[JSONAPIConfig] = None) -> None:
        self.config = config or JSONAPIConfig()

    def serialize(
        self,
        errors: Any,
        record: Any = None,
        serializer: Any = None,
        attribute_names: Optional[Iterable[str]] = None,
        relationship_names: Optional[Iterable[str]] = None,
        status: Optional[int] = None,
    ) -> Dict[str, List[Dict[str, Any]]]:
        """
        :param errors: ValidationErrors, list of ErrorEntry, or "flat" errors (list of dicts/objects or a single one)
        :param record: the validated record, used to resolve nested error paths
        :param serializer: serializer descriptor of the record, provides the attribute and relationship names
        :param attribute_names: known attribute names, overrides the serializer names
        :param relationship_names: known relationship names, overrides the serializer names
        :param status: http status of the validation errors, defaults to the configured status (422)
        :return: jsonapi error document
        """
        if isinstance(errors, ValidationErrors):
            record = errors.record if record is None else record
            entries = list(errors)
            errors_model = errors
        elif is_validation_errors(errors):
            entries = list(errors)
            errors_model = getattr(record, "errors", None)
            if not isinstance(errors_model, ValidationErrors):
                errors_model = None
        else:
            if not is_collection(errors):
                errors = [errors]
            return {"errors": self.serialize_flat(errors)}

        if attribute_names is None:
            attribute_names = getattr(serializer, "attribute_names", ())
        if relationship_names is None:
            relationship_names = getattr(serializer, "relationship_names", ())

        return {
            "errors": [
                self.serialize_entry(
                    entry,
                    record=record,
                    errors_model=errors_model,
                    attribute_names=frozenset(attribute_names),
                    relationship_names=frozenset(relationship_names),
                    status=status,
                )
                for entry in entries
            ]
        }

    def serialize_flat(self, errors: Iterable[Any]) -> List[Dict[str, Any]]:
        """
        :param errors: dicts or objects exposing the jsonapi error members
        :return: list of jsonapi error objects, blank members and empty errors are dropped
        """
        result = []
        for error in errors:
            source = as_error_source(error)
            error_object = {}
            for member in ERROR_MEMBERS:
                value = source.get(member)
                if is_blank(value):
                    continue
                if member == "status":
                    value = str(value)
                error_object[member] = value
            if error_object:
                result.append(error_object)
        return result

    def serialize_entry(
        self,
        entry: ErrorEntry,
        record: Any = None,
        errors_model: Optional[ValidationErrors] = None,
        attribute_names: frozenset = frozenset(),
        relationship_names: frozenset = frozenset(),
        status: Optional[int] = None,
    ) -> Dict[str, Any]:
        status = status or self.config.default_error_status
        try:
            title = HTTPStatus(status).phrase
        except ValueError:
            title = None
        error_object = JsonApiErrorObject(
            status=str(status),
            title=title,
            code=parameterize(entry.code or DEFAULT_CODE),
            detail=self.detail(entry.field_path, entry.message, record, errors_model),
            source=JsonApiErrorSource(pointer=self.pointer(entry.field_path, attribute_names, relationship_names)),
        )
        return error_object.model_dump(exclude_none=True)

    def detail(self, attribute: str, message: str, record: Any = None, errors_model: Optional[ValidationErrors] = None) -> str:
        """
        :param attribute: error key, possibly a nested path, eg. "recognitions[2].email"
        :param message: error message
        :param record: the validated record
        :param errors_model: errors of `record`, provides the full messages
        :return: human readable error message

        Errors on nested records are prefixed with the nested record name and id:
        "(Recognition 12) Email can't be blank"
        When the nested record can't be found, the message is attributed to the top-level record
        """
        if "." in attribute and record is not None:
            *path, leaf = attribute.split(".")
            nested = resolve_nested_record(record, path)
            if nested is not None:
                nested_errors = getattr(nested, "errors", None)
                if isinstance(nested_errors, ValidationErrors):
                    message = nested_errors.full_message(leaf, message)
                else:
                    message = full_message(leaf, message)
                return f"({self.config.model_name(nested)} {self.record_id(nested)}) {message}"

        if errors_model is not None:
            return errors_model.full_message(attribute, message)
        return message

    def record_id(self, record: Any) -> Any:
        """
        :return: the record id, or its local id if it hasn't been saved yet
        """
        for attr_name in ("id", "lid_id", self.config.lid_key):
            if not attr_name:
                continue
            if isinstance(record, Mapping):
                value = record.get(attr_name)
            else:
                value = getattr(record, attr_name, None)
            if value is not None:
                return value
        return None

    @staticmethod
    def pointer(attribute: str, attribute_names: frozenset, relationship_names: frozenset) -> str:
        """
        :return: JSON pointer to the attribute or relationship, "" if it isn't a known member
        """
        if attribute in attribute_names:
            return f"/data/attributes/{attribute}"
        if attribute in relationship_names:
            return f"/data/relationships/{attribute}"
        return ""
