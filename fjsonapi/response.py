# Response class
from flask import Response
from .request import JSONAPI_MEDIA_TYPE


class JSONAPIResponse(Response):
    """
    Response class for jsonapi documents
    """

    default_mimetype = JSONAPI_MEDIA_TYPE
