# -*- coding: utf-8 -*-
#
# Validation error model: attribute => [ErrorDetail(code, message)]
#
# Models that validate themselves expose their errors as a ValidationErrors instance
# (`record.errors`), this is what the ErrorSerializer renders in "validation mode".
# Errors on nested records are keyed by a path, eg. "recognitions[2].email"
#
from dataclasses import dataclass
from typing import Any, Dict, Iterator, List, Optional, Sequence
from pydantic import ValidationError
from .naming import humanize
from .util import is_collection

BASE = "base"
DEFAULT_CODE = "invalid"
DEFAULT_MESSAGE = "is invalid"


@dataclass(frozen=True)
class ErrorDetail:
    code: str = DEFAULT_CODE
    message: str = DEFAULT_MESSAGE


@dataclass(frozen=True)
class ErrorEntry:
    """
    A single validation failure, `field_path` may address a nested record, eg. "items[2].email"
    """

    field_path: str
    code: str = DEFAULT_CODE
    message: str = DEFAULT_MESSAGE


def full_message(attribute: str, message: str) -> str:
    """
    :return: message prefixed with the human readable attribute name, eg. "Email can't be blank"
    """
    if attribute == BASE:
        return message
    return f"{humanize(attribute)} {message}"


def path_from_location(loc: Sequence[Any]) -> str:
    """
    :param loc: pydantic error location, eg. ("items", 2, "email")
    :return: error path, eg. "items[2].email"
    """
    path = ""
    for segment in loc:
        if isinstance(segment, int):
            path += f"[{segment}]"
        elif path:
            path += f".{segment}"
        else:
            path = str(segment)
    return path or BASE


class ValidationErrors:
    """
    Ordered collection of validation errors of a record
    """

    def __init__(self, record: Any = None) -> None:
        """
        :param record: the record that was validated
        """
        self.record = record
        self._details: Dict[str, List[ErrorDetail]] = {}

    def add(self, attribute: str, code: Optional[str] = None, message: Optional[str] = None) -> ErrorDetail:
        detail = ErrorDetail(code or DEFAULT_CODE, message or DEFAULT_MESSAGE)
        self._details.setdefault(str(attribute), []).append(detail)
        return detail

    @property
    def details(self) -> Dict[str, List[ErrorDetail]]:
        return {attribute: list(details) for attribute, details in self._details.items()}

    @property
    def messages(self) -> Dict[str, List[str]]:
        return {attribute: [detail.message for detail in details] for attribute, details in self._details.items()}

    def full_message(self, attribute: str, message: str) -> str:
        return full_message(attribute, message)

    def full_messages(self) -> List[str]:
        return [self.full_message(entry.field_path, entry.message) for entry in self]

    def __iter__(self) -> Iterator[ErrorEntry]:
        for attribute, details in self._details.items():
            for detail in details:
                yield ErrorEntry(attribute, detail.code, detail.message)

    def __len__(self) -> int:
        return sum(len(details) for details in self._details.values())

    def __bool__(self) -> bool:
        return len(self) > 0

    def __contains__(self, attribute: str) -> bool:
        return attribute in self._details

    def __repr__(self) -> str:
        return f"<ValidationErrors {self.messages}>"

    @classmethod
    def from_entries(cls, entries: Sequence[ErrorEntry], record: Any = None) -> "ValidationErrors":
        result = cls(record)
        for entry in entries:
            result.add(entry.field_path, entry.code, entry.message)
        return result

    @classmethod
    def from_pydantic(cls, exc: ValidationError, record: Any = None) -> "ValidationErrors":
        """
        :param exc: pydantic ValidationError
        :param record: the validated record
        :return: errors keyed by the error location path, the pydantic error type is used as code
        """
        result = cls(record)
        for error in exc.errors():
            result.add(path_from_location(error.get("loc", ())), error.get("type"), error.get("msg"))
        return result


def is_validation_errors(errors: Any) -> bool:
    """
    :return: True for a ValidationErrors instance or a non-empty list of ErrorEntry
    """
    if isinstance(errors, ValidationErrors):
        return True
    return is_collection(errors) and len(errors) > 0 and all(isinstance(error, ErrorEntry) for error in errors)
