from sqlalchemy import Column, ForeignKey, Integer, String, Table
from sqlalchemy.orm import declarative_base, relationship

from fjsonapi import DeepDeserializer, Deserializer, ResourceTypeRegistry, Serializer

Base = declarative_base()

book_tags = Table(
    "book_tags",
    Base.metadata,
    Column("book_id", ForeignKey("books.id"), primary_key=True),
    Column("tag_id", ForeignKey("tags.id"), primary_key=True),
)


class Author(Base):
    __tablename__ = "authors"
    id = Column(Integer, primary_key=True)
    name = Column(String)
    books = relationship("Book", back_populates="author")
    profile = relationship("Profile", back_populates="author", uselist=False)


class Profile(Base):
    __tablename__ = "profiles"
    id = Column(Integer, primary_key=True)
    bio = Column(String)
    author_id = Column(Integer, ForeignKey("authors.id"))
    author = relationship("Author", back_populates="profile")


class Book(Base):
    __tablename__ = "books"
    id = Column(Integer, primary_key=True)
    title = Column(String)
    author_id = Column(Integer, ForeignKey("authors.id"))
    author = relationship("Author", back_populates="books")
    tags = relationship("Tag", secondary=book_tags)


class Tag(Base):
    __tablename__ = "tags"
    id = Column(Integer, primary_key=True)
    label = Column(String)


def test_deserializer_cardinality_from_model() -> None:
    author = Deserializer.from_model(Author)
    book = Deserializer.from_model(Book)

    assert author.name == "AuthorDeserializer"
    assert author.type_ == "authors"
    assert author.to_one == frozenset({"profile"})
    assert author.to_many == frozenset({"books"})
    assert book.to_one == frozenset({"author"})
    assert book.to_many == frozenset({"tags"})


def test_serializer_names_from_model() -> None:
    serializer = Serializer.from_model(Book)

    assert serializer.name == "BookSerializer"
    assert serializer.attribute_names == frozenset({"title"})
    assert serializer.relationship_names == frozenset({"author", "tags"})


def test_serialize_model_instance() -> None:
    author = Author(id=3, name="Ann")
    book = Book(id=7, title="Tales", author=author, tags=[Tag(id=1, label="x"), Tag(id=2, label="y")])

    result = Serializer.from_model(Book).serialize(book)

    assert result == {
        "id": "7",
        "type": "books",
        "attributes": {"title": "Tales"},
        "relationships": {
            "author": {"data": {"id": "3", "type": "authors"}},
            "tags": {"data": [{"id": "1", "type": "tags"}, {"id": "2", "type": "tags"}]},
        },
    }


def test_sparse_fieldsets() -> None:
    book = Book(id=7, title="Tales")

    result = Serializer.from_model(Book).serialize(book, fields={"books": ["title"]})

    assert result == {"id": "7", "type": "books", "attributes": {"title": "Tales"}}


def test_register_model_and_deserialize() -> None:
    registry = ResourceTypeRegistry()
    for model in (Author, Profile, Book, Tag):
        registry.register_model(model)
    document = {
        "data": {
            "type": "authors",
            "attributes": {"name": "Ann"},
            "relationships": {
                "profile": {"data": {"type": "profiles", "lid": "p1"}},
                "books": {"data": [{"type": "books", "lid": "b1"}]},
            },
        },
        "included": [
            {"type": "books", "lid": "b1", "attributes": {"title": "Tales"}},
            {"type": "profiles", "lid": "p1", "attributes": {"bio": "Writer"}},
        ],
    }

    result = DeepDeserializer(registry).deserialize(document)

    assert result["name"] == "Ann"
    assert result["profile_attributes"] == {"bio": "Writer", "lid": "p1"}
    assert result["books_attributes"] == [{"title": "Tales", "lid": "b1"}]
    assert registry.serializer_for(Book(id=1)).type_ == "books"
