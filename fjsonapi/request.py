"""
http://jsonapi.org/format/#content-negotiation-servers

Server Responsibilities
Servers MUST respond with a 415 Unsupported Media Type status code if a request specifies the header
"Content-Type: application/vnd.api+json" with any media type parameters.
Servers MUST respond with a 406 Not Acceptable status code if a request's Accept header contains
the JSON:API media type and all instances of that media type are modified with media type parameters.

The media type checks are enabled with the JSONAPI_MEDIA_TYPE_FILTER app config option
"""

import re
from http import HTTPStatus
from flask import Request, request
from werkzeug.http import parse_options_header
import fjsonapi
from .errors import FormatError, MediaTypeError

JSONAPI_MEDIA_TYPE = "application/vnd.api+json"


# pylint: disable=too-many-ancestors
class JSONAPIRequest(Request):
    """
    Parse the jsonapi-related request arguments:
    - header: Content-Type should be "application/vnd.api+json"
    - query args: fields[type], include
    - body: the jsonapi document
    """

    jsonapi_content_types = ["application/json", JSONAPI_MEDIA_TYPE]
    is_jsonapi = False  # indicates whether this is a jsonapi request

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.parse_content_type()
        self.parse_jsonapi_args()

    def parse_content_type(self):
        """
        Check if the request content type is jsonapi
        """
        if not isinstance(self.content_type, str):  # pragma: no cover
            return

        content_type = self.content_type.split(";")[0].strip()
        if content_type in self.jsonapi_content_types:
            self.is_jsonapi = True

    def parse_jsonapi_args(self):
        """
        parse the jsonapi request arguments:
        - fields[type]=attr1,attr2 (https://jsonapi.org/format/#fetching-sparse-fieldsets)
        - include=rel1,rel2
        """
        self.fields = {}
        self.includes = []

        for arg, val in self.args.items():
            fields_attr = re.search(r"fields\[([\w-]+)\]", arg)
            if fields_attr:
                field_type = fields_attr.group(1)
                self.fields[field_type] = [field for field in val.split(",") if field]

            if arg == "include":
                self.includes = [include for include in val.split(",") if include]

    def get_jsonapi_payload(self):
        """
        :return: jsonapi request payload
        """
        if not self.is_jsonapi:
            fjsonapi.log.warning(f'Invalid Media Type! "{self.content_type}"')
        if self.method in ("GET", "HEAD", "OPTIONS", "DELETE") and not self.content_length:
            return None
        result = self.get_json(force=True, silent=True)
        if not isinstance(result, dict):
            raise FormatError(f"Invalid JSON Payload : {result}", pointer="")
        return result

    @property
    def raw_jsonapi(self):
        """
        :return: the "data" and "included" members of the payload, absent members are dropped
        """
        payload = self.get_jsonapi_payload() or {}
        return {key: payload[key] for key in ("data", "included") if payload.get(key) is not None}


def check_media_type():
    """
    before_request handler that rejects jsonapi media types with parameters
    """
    content_type = request.headers.get("Content-Type")
    if content_type:
        mimetype, params = parse_options_header(content_type)
        if mimetype == JSONAPI_MEDIA_TYPE and params:
            raise MediaTypeError(f"media type parameters are not allowed: {content_type}", HTTPStatus.UNSUPPORTED_MEDIA_TYPE.value)

    accept = request.headers.get("Accept")
    if accept:
        jsonapi_media_types = [parse_options_header(media_type.strip()) for media_type in accept.split(",")]
        jsonapi_media_types = [params for mimetype, params in jsonapi_media_types if mimetype == JSONAPI_MEDIA_TYPE]
        if jsonapi_media_types and all(jsonapi_media_types):
            raise MediaTypeError(f"media type parameters are not acceptable: {accept}", HTTPStatus.NOT_ACCEPTABLE.value)
