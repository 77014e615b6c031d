# Exceptions raised by the (de)serialization core
#
# The core never logs and never recovers from these errors, they're caught by
# the Flask error handlers registered in FJSONAPI.init_app and formatted, for example:
# {
#     "errors": [
#         {
#             "status": "400",
#             "title": "Bad Request",
#             "detail": "Format Error: unreferenced included resource people/9",
#             "source": {"pointer": "/included/0"}
#         }
#     ]
# }
#
from http import HTTPStatus
from typing import Optional
from sqlalchemy.exc import DontWrapMixin


class JsonapiError(Exception, DontWrapMixin):
    """
    Base class for the errors that will be rendered as a jsonapi error document
    """

    status_code = HTTPStatus.INTERNAL_SERVER_ERROR.value
    message = ""

    def __init__(self, message: str = "", status_code: Optional[int] = None, api_code: Optional[str] = None, pointer: Optional[str] = None) -> None:
        """
        :param message: Message to be returned in the (json) body
        :param status_code: HTTP Status code
        :param api_code: API code, rendered as the error "code" member
        :param pointer: JSON pointer to the offending document member
        """
        Exception.__init__(self, message)
        if status_code is not None:
            self.status_code = status_code
        self.api_code = api_code
        self.pointer = pointer
        self.message = self.message + str(message)

    @property
    def title(self) -> str:
        try:
            return HTTPStatus(self.status_code).phrase
        except ValueError:
            return self.__class__.__name__


class FormatError(JsonapiError):
    """
    This exception is raised when a malformed jsonapi document has been received:
    - a resource without a (non-empty) type
    - an included resource that isn't referenced by any relationship of the primary resource
    - a relationship that isn't declared by the target deserializer
    """

    status_code = HTTPStatus.BAD_REQUEST.value
    message = "Format Error: "


class UnknownTypeError(JsonapiError, LookupError):
    """
    This exception is raised when a jsonapi type or a class can't be resolved to a (de)serializer.
    It indicates a configuration error, not a client error
    """

    status_code = HTTPStatus.INTERNAL_SERVER_ERROR.value
    message = "Unknown Type: "


class MediaTypeError(JsonapiError):
    """
    This exception is raised when the request Content-Type or Accept headers
    contain the jsonapi media type with media type parameters (415 resp. 406)
    """

    status_code = HTTPStatus.UNSUPPORTED_MEDIA_TYPE.value
    message = "Media Type Error: "
