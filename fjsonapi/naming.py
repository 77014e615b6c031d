# Naming conventions used to translate between the JSON:API wire format
# (dasherized or camelCased member names, plural types) and python names
# (snake_case keys, singular PascalCase descriptor names)
#
import re
from functools import lru_cache
from typing import Callable, Dict
import inflect

_inflect = inflect.engine()

_ACRONYM_BOUNDARY = re.compile(r"([A-Z]+)([A-Z][a-z])")
_CAMEL_BOUNDARY = re.compile(r"([a-z\d])([A-Z])")
_NON_SLUG = re.compile(r"[^a-z0-9]+")


@lru_cache(maxsize=1024)
def underscore(word: str) -> str:
    """
    :param word: camelCased, PascalCased or dasherized word
    :return: snake_cased word, eg. "firstName" => "first_name", "blog-posts" => "blog_posts"

    underscore(underscore(word)) == underscore(word)
    """
    word = _ACRONYM_BOUNDARY.sub(r"\1_\2", word)
    word = _CAMEL_BOUNDARY.sub(r"\1_\2", word)
    return word.replace("-", "_").lower()


def dasherize(word: str) -> str:
    return underscore(word).replace("_", "-")


def camelize(word: str, uppercase_first: bool = True) -> str:
    """
    :param word: snake_cased word
    :param uppercase_first: PascalCase when True, camelCase otherwise
    :return: camelized word
    """
    parts = underscore(word).split("_")
    result = "".join(part[:1].upper() + part[1:] for part in parts)
    if not uppercase_first:
        result = result[:1].lower() + result[1:]
    return result


@lru_cache(maxsize=1024)
def singularize(word: str) -> str:
    """
    Singularize the last part of a snake_cased word, eg. "blog_posts" => "blog_post"
    """
    if not word:
        return word
    head, _, last = word.rpartition("_")
    if not last:
        return word
    singular = _inflect.singular_noun(last) or last
    return f"{head}_{singular}" if head else singular


@lru_cache(maxsize=1024)
def pluralize(word: str) -> str:
    if not word:
        return word
    head, _, last = word.rpartition("_")
    if not last:
        return word
    if _inflect.singular_noun(last):
        # already plural
        plural = last
    else:
        plural = _inflect.plural_noun(last) or last
    return f"{head}_{plural}" if head else plural


def classify(type_name: str) -> str:
    """
    :param type_name: jsonapi type, eg. "blog-posts"
    :return: singular PascalCased class name, eg. "BlogPost"
    """
    return camelize(singularize(underscore(type_name)))


def humanize(word: str) -> str:
    """
    Human readable attribute name, eg. "author_id" => "Author", "recognitions[2].email" => "Recognitions[2] email"
    """
    result = word.replace(".", "_")
    if result.endswith("_id"):
        result = result[:-3]
    result = result.replace("_", " ").strip()
    return result[:1].upper() + result[1:]


def parameterize(value: str) -> str:
    """
    Slug used for error codes, eg. "can't be blank" => "cant_be_blank"
    """
    value = str(value).replace("'", "").lower()
    return _NON_SLUG.sub("_", value).strip("_")


def identity(word: str) -> str:
    return word


# Key transforms that can be selected by name in the app configuration
KEY_TRANSFORMS: Dict[str, Callable[[str], str]] = {
    "underscore": underscore,
    "dasherize": dasherize,
    "camelize": lambda word: camelize(word, uppercase_first=False),
    "none": identity,
}
