import pytest

from fjsonapi import DeepDeserializer, Deserializer, ErrorSerializer, JSONAPIConfig, ResourceTypeRegistry


class ArticleDeserializer(Deserializer):
    type_ = "articles"
    to_one = {"author"}
    to_many = {"comments", "tags"}


class PersonDeserializer(Deserializer):
    # no type_: "people" is resolved by naming convention
    to_one = {"employer"}


class CommentDeserializer(Deserializer):
    type_ = "comments"
    attributes = ("body",)


@pytest.fixture
def registry() -> ResourceTypeRegistry:
    result = ResourceTypeRegistry()
    result.register_deserializer(ArticleDeserializer)
    result.register_deserializer(PersonDeserializer)
    result.register_deserializer(CommentDeserializer)
    return result


@pytest.fixture
def deserializer(registry: ResourceTypeRegistry) -> DeepDeserializer:
    return DeepDeserializer(registry, JSONAPIConfig())


@pytest.fixture
def error_serializer() -> ErrorSerializer:
    return ErrorSerializer(JSONAPIConfig())
