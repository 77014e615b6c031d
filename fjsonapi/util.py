#
from collections.abc import Mapping, Sized
from typing import Any, Optional


def is_collection(resource: Any, force_is_collection: Optional[bool] = None) -> bool:
    """
    :param resource: object to check
    :param force_is_collection: flag to overwrite the check
    :return: True if `resource` is a collection (sized and not a mapping)
    """
    if force_is_collection is not None:
        return force_is_collection
    if isinstance(resource, (str, bytes)):
        return False
    return isinstance(resource, Sized) and not isinstance(resource, Mapping)


def is_blank(value: Any) -> bool:
    """
    :return: True for None, empty strings and empty containers
    """
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, Sized):
        return len(value) == 0
    return False
