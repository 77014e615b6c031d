"""Configuration of the jsonapi (de)serializers.

A single immutable configuration object is constructed when the app starts
(usually from ``app.config`` by :class:`~fjsonapi.FJSONAPI`) and passed to the
deserializer and error serializer instances.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from http import HTTPStatus
from typing import Any, Callable, Mapping, Optional

import fjsonapi
from .naming import KEY_TRANSFORMS, humanize, singularize, underscore


def default_model_name(record: Any) -> str:
    """
    :param record: model instance, or a resource dict
    :return: human readable name of the record class, eg. "Blog post" for a BlogPost instance,
        or of the resource "type" for a dict, eg. "Blog post" for {"type": "blog-posts"}
    """
    if isinstance(record, Mapping) and record.get("type"):
        return humanize(singularize(underscore(str(record["type"]))))
    return humanize(underscore(type(record).__name__))


@dataclass(frozen=True)
class JSONAPIConfig:
    """Configuration shared by the deserializer, the error serializer and the Flask adapter.

    All fields are immutable so a config can be shared between requests.
    """

    # attribute under which a client-supplied local id ("lid") is preserved
    lid_key: Optional[str] = "lid"
    # regex matching client placeholder ids that should be dropped from the attributes
    local_id_pattern: Optional[str] = None
    default_error_status: int = HTTPStatus.UNPROCESSABLE_ENTITY.value
    # wire => python key transform for attributes and relationships
    key_transform: Callable[[str], str] = underscore
    # strict included resource matching (type+id), legacy type grouping otherwise
    strict: bool = True
    model_name: Callable[[Any], str] = default_model_name
    media_type_filter: bool = False
    force_content_type: bool = True

    def with_overrides(self, overrides: Mapping[str, Any]) -> "JSONAPIConfig":
        """Return a new config where known fields are replaced by ``overrides``."""
        valid = {k: v for k, v in overrides.items() if k in self.__dataclass_fields__}
        if "key_transform" in valid and isinstance(valid["key_transform"], str):
            valid["key_transform"] = KEY_TRANSFORMS[valid["key_transform"]]
        if not valid:
            return self
        return replace(self, **valid)

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, Any], prefix: str = "JSONAPI_") -> "JSONAPIConfig":
        """
        :param mapping: app.config or a similar mapping
        :param prefix: configuration key prefix
        :return: config built from the prefixed keys, eg. JSONAPI_LID_KEY => lid_key
        """
        overrides = {}
        for key, value in mapping.items():
            if not key.startswith(prefix):
                continue
            option = key[len(prefix) :].lower()
            if option == "error_status":
                option = "default_error_status"
            overrides[option] = value
        return cls().with_overrides(overrides)


def is_debug() -> bool:
    """
    We use the loglevel to check whether we're running in debug mode
    :return: whether the app is in debug mode
    """
    return fjsonapi.log.getEffectiveLevel() < logging.INFO
