from types import SimpleNamespace
from typing import List

import pytest
from pydantic import BaseModel, ValidationError

from fjsonapi import ErrorEntry, ErrorSerializer, JSONAPIConfig, Serializer, ValidationErrors, resolve_nested_record


class Item:
    def __init__(self, id: int) -> None:
        self.id = id
        self.errors = ValidationErrors(self)


class LineItem:
    def __init__(self, lid_id: str) -> None:
        self.id = None
        self.lid_id = lid_id


class Customer:
    def __init__(self, id: int) -> None:
        self.id = id


class Order:
    def __init__(self, items: list, customer=None) -> None:
        self.id = 1
        self.items = items
        self.customer = customer
        self.errors = ValidationErrors(self)


person_serializer = Serializer(type_="people", attributes=("name", "email"), relationships={"employer": "companies"})


def test_validation_error_with_verbatim_message(error_serializer: ErrorSerializer) -> None:
    entries = [ErrorEntry("email", "blank", "can't be blank")]

    document = error_serializer.serialize(entries, serializer=person_serializer)

    assert document == {
        "errors": [
            {
                "status": "422",
                "title": "Unprocessable Entity",
                "code": "blank",
                "detail": "can't be blank",
                "source": {"pointer": "/data/attributes/email"},
            }
        ]
    }


@pytest.mark.parametrize(
    "attribute, pointer",
    [
        ("email", "/data/attributes/email"),
        ("employer", "/data/relationships/employer"),
        ("password", ""),
        ("base", ""),
    ],
)
def test_error_pointer(error_serializer: ErrorSerializer, attribute: str, pointer: str) -> None:
    document = error_serializer.serialize([ErrorEntry(attribute)], serializer=person_serializer)

    assert document["errors"][0]["source"] == {"pointer": pointer}


def test_attribute_names_override_serializer(error_serializer: ErrorSerializer) -> None:
    document = error_serializer.serialize([ErrorEntry("password")], serializer=person_serializer, attribute_names=["password"])

    assert document["errors"][0]["source"]["pointer"] == "/data/attributes/password"


def test_full_messages_from_validation_errors(error_serializer: ErrorSerializer) -> None:
    errors = ValidationErrors()
    errors.add("email", "blank", "can't be blank")
    errors.add("author_id", "taken", "has already been taken")
    errors.add("base", "locked", "Order is locked")

    details = [error["detail"] for error in error_serializer.serialize(errors)["errors"]]

    assert details == ["Email can't be blank", "Author has already been taken", "Order is locked"]


def test_default_code_and_parameterized_code(error_serializer: ErrorSerializer) -> None:
    errors = ValidationErrors()
    errors.add("name")
    errors.add("email", "can't be blank")

    result = error_serializer.serialize(errors)["errors"]

    assert result[0]["code"] == "invalid"
    assert result[0]["detail"] == "Name is invalid"
    assert result[1]["code"] == "cant_be_blank"


def test_status_override(error_serializer: ErrorSerializer) -> None:
    document = error_serializer.serialize([ErrorEntry("email")], status=400)

    assert document["errors"][0]["status"] == "400"
    assert document["errors"][0]["title"] == "Bad Request"


def test_configured_default_status() -> None:
    serializer = ErrorSerializer(JSONAPIConfig(default_error_status=409))

    document = serializer.serialize([ErrorEntry("email")])

    assert document["errors"][0]["status"] == "409"


def test_nested_record_errors(error_serializer: ErrorSerializer) -> None:
    order = Order([Item(10), Item(11)])
    order.errors.add("items[1].email", "blank", "can't be blank")

    error = error_serializer.serialize(order.errors)["errors"][0]

    assert error["detail"] == "(Item 11) Email can't be blank"
    assert error["source"] == {"pointer": ""}


def test_nested_record_entries_use_record_errors(error_serializer: ErrorSerializer) -> None:
    order = Order([Item(10)])

    error = error_serializer.serialize([ErrorEntry("items[0].email", "blank", "can't be blank")], record=order)["errors"][0]

    assert error["detail"] == "(Item 10) Email can't be blank"


def test_nested_record_with_local_id(error_serializer: ErrorSerializer) -> None:
    order = Order([LineItem("tmp-1")])
    order.errors.add("items[0].quantity", "greater_than", "must be greater than 0")

    error = error_serializer.serialize(order.errors)["errors"][0]

    assert error["detail"] == "(Line item tmp-1) Quantity must be greater than 0"


def test_nested_plain_segment(error_serializer: ErrorSerializer) -> None:
    order = Order([], customer=Customer(3))
    order.errors.add("customer.email", "blank", "can't be blank")

    error = error_serializer.serialize(order.errors)["errors"][0]

    assert error["detail"] == "(Customer 3) Email can't be blank"


def test_nested_mapping_record(error_serializer: ErrorSerializer) -> None:
    payload = {"line_items": [{"type": "line-items", "id": 4, "quantity": 0}, {"lid": "tmp-2", "quantity": 0}]}
    errors = ValidationErrors(payload)
    errors.add("line_items[0].quantity", "greater_than", "must be greater than 0")
    errors.add("line_items[1].quantity", "greater_than", "must be greater than 0")

    details = [error["detail"] for error in error_serializer.serialize(errors)["errors"]]

    assert details == ["(Line item 4) Quantity must be greater than 0", "(Dict tmp-2) Quantity must be greater than 0"]


@pytest.mark.parametrize("path", ["items[5].email", "items[x].email", "missing[0].email"])
def test_unresolvable_nested_path_falls_back_to_the_record(error_serializer: ErrorSerializer, path: str) -> None:
    order = Order([Item(10)])
    order.errors.add(path, "blank", "can't be blank")

    error = error_serializer.serialize(order.errors)["errors"][0]

    assert error["detail"] == order.errors.full_message(path, "can't be blank")
    assert not error["detail"].startswith("(")


def test_resolve_nested_record() -> None:
    item = Item(12)
    order = Order([Item(10), Item(11), item])

    assert resolve_nested_record(order, ["items[2]"]) is item
    assert resolve_nested_record(order, ["items"]) == order.items
    assert resolve_nested_record({"order": order}, ["order", "items[0]"]) is order.items[0]
    assert resolve_nested_record(order, ["items[3]"]) is None
    assert resolve_nested_record(order, ["items[1"]) is None
    assert resolve_nested_record(order, ["customer", "name"]) is None


def test_resolve_multi_digit_index() -> None:
    order = Order([Item(index) for index in range(12)])

    assert resolve_nested_record(order, ["items[11]"]).id == 11


def test_flat_errors(error_serializer: ErrorSerializer) -> None:
    errors = [
        {"status": 404, "title": "Not Found", "detail": "", "meta": None, "ignored": "x"},
        {},
        SimpleNamespace(status="409", code="conflict", source={"pointer": "/data/id"}),
        {"detail": None},
    ]

    document = error_serializer.serialize(errors)

    assert document == {
        "errors": [
            {"status": "404", "title": "Not Found"},
            {"status": "409", "code": "conflict", "source": {"pointer": "/data/id"}},
        ]
    }


def test_single_flat_error_is_wrapped(error_serializer: ErrorSerializer) -> None:
    document = error_serializer.serialize({"title": "Invalid token", "status": 401})

    assert document == {"errors": [{"status": "401", "title": "Invalid token"}]}


def test_empty_errors(error_serializer: ErrorSerializer) -> None:
    assert error_serializer.serialize([]) == {"errors": []}
    assert error_serializer.serialize(ValidationErrors()) == {"errors": []}


class Line(BaseModel):
    email: str


class Signup(BaseModel):
    email: str
    age: int
    lines: List[Line] = []


def test_errors_from_pydantic(error_serializer: ErrorSerializer) -> None:
    with pytest.raises(ValidationError) as exc_info:
        Signup.model_validate({"age": "x", "lines": [{"email": "a@b.c"}, {}]})

    errors = ValidationErrors.from_pydantic(exc_info.value)

    assert list(errors.messages) == ["email", "age", "lines[1].email"]
    assert [entry.code for entry in errors] == ["missing", "int_parsing", "missing"]
    document = error_serializer.serialize(errors, serializer=Serializer(type_="signups", attributes=("email", "age")))
    assert document["errors"][0]["source"] == {"pointer": "/data/attributes/email"}
    assert document["errors"][0]["detail"] == "Email Field required"
