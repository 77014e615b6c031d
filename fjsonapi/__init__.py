# flake8: noqa: F401
#
# fjsonapi: JSON:API document (de)serialization for Flask
# - DeepDeserializer: request document => nested attribute dict
# - ErrorSerializer: validation errors => jsonapi error document
# - FJSONAPI: Flask extension with the rendering helpers and error handlers
#
from .fjsonapi_init import FJSONAPI, log
from .config import JSONAPIConfig
from .errors import JsonapiError, FormatError, UnknownTypeError, MediaTypeError
from .deserializer import Deserializer, RelationshipCardinality
from .serializer import Serializer
from .registry import ResourceTypeRegistry
from .matcher import RelationshipMatcher
from .deep_deserializer import DeepDeserializer
from .validation import ErrorDetail, ErrorEntry, ValidationErrors
from .error_serializer import ErrorSerializer, resolve_nested_record
from .rendering import render_jsonapi, render_jsonapi_errors, jsonapi_deserialize
from .request import JSONAPIRequest, JSONAPI_MEDIA_TYPE
from .__about__ import __version__, __description__

__all__ = (
    "__version__",
    "__description__",
    # flask:
    "FJSONAPI",
    "JSONAPIRequest",
    "JSONAPI_MEDIA_TYPE",
    "render_jsonapi",
    "render_jsonapi_errors",
    "jsonapi_deserialize",
    # configuration:
    "JSONAPIConfig",
    "ResourceTypeRegistry",
    # descriptors:
    "Deserializer",
    "Serializer",
    "RelationshipCardinality",
    # core:
    "DeepDeserializer",
    "RelationshipMatcher",
    "ErrorSerializer",
    "resolve_nested_record",
    "ErrorDetail",
    "ErrorEntry",
    "ValidationErrors",
    # Errors:
    "JsonapiError",
    "FormatError",
    "UnknownTypeError",
    "MediaTypeError",
    "log",
)
