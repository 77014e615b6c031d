#  Flask rendering adapter:
#  - render_jsonapi: render objects with their serializer descriptor, and the related objects named by "include"
#  - render_jsonapi_errors: render validation errors or "flat" errors
#  - jsonapi_deserialize: deserialize the jsonapi request document before calling a view
#
#  The FJSONAPI extension must have been initialized on the current app, e.g.
#
#   @app.route("/articles", methods=["POST"])
#   @jsonapi_deserialize("article")
#   def create_article():
#       article = Article(**g.jsonapi_params["article"])
#       errors = article.validate()
#       if errors:
#           return render_jsonapi_errors(errors)
#       return render_jsonapi(article, status=HTTPStatus.CREATED)
#
from functools import wraps
from http import HTTPStatus
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Union
from flask import current_app, g, has_request_context, request
from .errors import FormatError
from .jsonapi_types import JSONAPIDocument
from .naming import underscore
from .response import JSONAPIResponse
from .util import is_collection
from .validation import ValidationErrors, is_validation_errors

DEFAULT_DESERIALIZE_METHODS = ("POST", "PATCH", "PUT")


def get_extension():
    """
    :return: the FJSONAPI extension of the current app
    """
    return current_app.extensions["fjsonapi"]


def jsonapi_response(document: JSONAPIDocument, status: Union[int, HTTPStatus] = HTTPStatus.OK) -> JSONAPIResponse:
    """
    :param document: jsonapi document
    :param status: http status code
    :return: response with the "application/vnd.api+json" content type
    """
    response = JSONAPIResponse(current_app.json.dumps(document), status=int(status))
    if not get_extension().config.force_content_type and has_request_context() and not request.is_jsonapi:
        # Only use "application/vnd.api+json" if the client sent this with the request
        response.headers["Content-Type"] = "application/json"
    return response


def related_objects(instance: Any, rel_name: str) -> List[Any]:
    """
    :return: the objects related to `instance` by `rel_name`, as a list
    """
    related = getattr(instance, rel_name, None)
    if related is None:
        return []
    if hasattr(related, "all"):
        # lazy="dynamic" relationships
        return list(related.all())
    if isinstance(related, (list, tuple, set)):
        return list(related)
    return [related]


def build_included(
    resources: Iterable[Any], data: Iterable[Mapping[str, Any]], include: Iterable[str], registry: Any, fields: Optional[Mapping[str, List[str]]] = None
) -> List[Dict[str, Any]]:
    """
    Serialize the related objects named by the include paths (https://jsonapi.org/format/#fetching-includes)

    :param resources: the primary objects
    :param data: the serialized primary data, these resources aren't repeated in `included`
    :param include: relationship paths, eg. ["author", "comments.author"]
    :param registry: ResourceTypeRegistry used to serialize the related objects
    :param fields: sparse fieldsets
    :return: list of unique resource objects
    :raises FormatError: when a path segment isn't a relationship of the serializer
    """
    seen = {(item.get("type"), item.get("id")) for item in data}
    included = []
    for path in include:
        current = list(resources)
        for segment in path.split("."):
            rel_name = underscore(segment)
            next_objects = []
            for instance in current:
                if rel_name not in registry.serializer_for(instance).relationship_names:
                    raise FormatError(f"invalid include path {path!r}")
                next_objects.extend(related_objects(instance, rel_name))
            for related in next_objects:
                resource_object = registry.serializer_for(related).serialize(related, fields=fields)
                key = (resource_object.get("type"), resource_object.get("id"))
                if key not in seen:
                    seen.add(key)
                    included.append(resource_object)
            current = next_objects
    return included


def render_jsonapi(
    resource: Any,
    serializer: Any = None,
    many: Optional[bool] = None,
    meta: Optional[Mapping[str, Any]] = None,
    links: Optional[Mapping[str, Any]] = None,
    status: Union[int, HTTPStatus] = HTTPStatus.OK,
    include: Optional[Iterable[str]] = None,
    **options: Any,
) -> JSONAPIResponse:
    """
    :param resource: object or collection of objects to render
    :param serializer: serializer descriptor, resolved from the registry if not set
    :param many: force the collection check
    :param meta: top-level meta
    :param links: top-level links
    :param status: http status code
    :param include: relationship paths of the related objects to render in "included",
        defaults to the "include" query argument
    :param options: passed to the serializer `serialize` method
    :return: jsonapi response
    """
    ext = get_extension()
    many = is_collection(resource, many)
    if many:
        resource = list(resource)

    if many and not resource:
        # empty collections are rendered without a serializer
        document = {"data": []}
    else:
        if serializer is None:
            serializer = ext.registry.serializer_for(resource[0] if many else resource)
        if "fields" not in options and has_request_context():
            options["fields"] = getattr(request, "fields", None)
        if include is None and has_request_context():
            include = getattr(request, "includes", None)
        if many:
            data = [serializer.serialize(item, **options) for item in resource]
        else:
            data = serializer.serialize(resource, **options)
        document = {"jsonapi": {"version": "1.0"}, "data": data}
        if include:
            resources = resource if many else [resource]
            document["included"] = build_included(resources, data if many else [data], include, ext.registry, options.get("fields"))

    if meta:
        document["meta"] = meta
    if links:
        document["links"] = links

    return jsonapi_response(document, status)


def render_jsonapi_errors(
    errors: Any,
    status: Optional[Union[int, HTTPStatus]] = None,
    record: Any = None,
    serializer: Any = None,
    many: Optional[bool] = None,
) -> JSONAPIResponse:
    """
    :param errors: ValidationErrors or a list of ErrorEntry, or "flat" errors (a dict/object or a list of them)
    :param status: http status code, derived from the errors if not set
    :param record: the validated record, defaults to `errors.record`
    :param serializer: serializer descriptor of the record, resolved from the registry if not set
    :param many: force the collection check for "flat" errors
    :return: jsonapi error response
    """
    ext = get_extension()
    if not isinstance(errors, ValidationErrors) and not is_collection(errors, many):
        errors = [errors]

    if is_validation_errors(errors):
        if isinstance(errors, ValidationErrors) and record is None:
            record = errors.record
        if serializer is None and record is not None:
            serializer = ext.registry.serializer_for(record)
        status = status or ext.config.default_error_status
        document = ext.error_serializer.serialize(errors, record=record, serializer=serializer, status=status)
    else:
        document = ext.error_serializer.serialize(list(errors))
        if status is None:
            statuses = [error.get("status") for error in document["errors"]]
            status = int(statuses[0]) if statuses and str(statuses[0]).isdigit() else HTTPStatus.BAD_REQUEST

    return jsonapi_response(document, status)


def jsonapi_deserialize(
    key: Union[str, Callable[[Mapping[str, Any]], str]],
    lid_key: Optional[str] = None,
    methods: tuple = DEFAULT_DESERIALIZE_METHODS,
) -> Callable:
    """
    View decorator, deserializes the request document into g.jsonapi_params[key]

    :param key: parameter name, or a function returning the name for the raw jsonapi document
    :param lid_key: attribute name for the local ids, defaults to the configured lid_key
    :param methods: http methods for which the request document is deserialized
    """
    if not isinstance(key, str) and not callable(key):
        raise TypeError(f"key must be a str or a callable, got {type(key).__name__}")

    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            if request.method in methods:
                raw_jsonapi = request.raw_jsonapi
                param_name = key(raw_jsonapi) if callable(key) else key
                params = getattr(g, "jsonapi_params", None)
                if params is None:
                    params = g.jsonapi_params = {}
                params[param_name] = get_extension().deserialize(raw_jsonapi, lid_key)
            return func(*args, **kwargs)

        return wrapper

    return decorator
