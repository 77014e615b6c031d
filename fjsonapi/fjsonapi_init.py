import logging
import os
import sys
from http import HTTPStatus
from flask import Flask, g
from werkzeug.exceptions import BadRequestKeyError, HTTPException, NotFound
import fjsonapi
from .config import JSONAPIConfig, is_debug
from .deep_deserializer import DeepDeserializer
from .error_serializer import ErrorSerializer
from .errors import JsonapiError
from .json_encoder import JSONAPIJSONProvider
from .registry import ResourceTypeRegistry
from .request import JSONAPIRequest, check_media_type
from .rendering import render_jsonapi_errors
from typing import Any, Mapping, Optional

HIDDEN_LOG = "(debug logging disabled)"


class FJSONAPI:
    """This class configures the Flask application to (de)serialize jsonapi documents
    :param app: a Flask application.
    :param registry: ResourceTypeRegistry with the (de)serializer descriptors
    :param config: JSONAPIConfig, built from the app.config JSONAPI_* options if not set
    """

    def __init__(self, app: Optional[Flask] = None, registry: Optional[ResourceTypeRegistry] = None, config: Optional[JSONAPIConfig] = None, **kwargs: Any) -> None:
        """
        Constructor
        """
        self.app = app
        self.registry = registry if registry is not None else ResourceTypeRegistry()
        self.config = config
        if app is not None:
            self.init_app(app, **kwargs)

    def init_app(self, app: Flask, registry: Optional[ResourceTypeRegistry] = None, config: Optional[JSONAPIConfig] = None, **kwargs: Any) -> None:
        """
        :param app: Flask application
        :param registry: overrides the registry passed to the constructor
        :param config: overrides the config passed to the constructor
        :param kwargs: config overrides, eg. strict=False
        """
        if not isinstance(app, Flask):  # pragma: no cover
            raise TypeError("'app' should be Flask.")

        if registry is not None:
            self.registry = registry
        config = config or self.config or JSONAPIConfig.from_mapping(app.config)
        self.config = config.with_overrides(kwargs)

        self.deep_deserializer = DeepDeserializer(self.registry, self.config)
        self.error_serializer = ErrorSerializer(self.config)

        app.request_class = JSONAPIRequest
        app.json = JSONAPIJSONProvider(app)

        if app.config.get("DEBUG", False):
            log.setLevel(logging.DEBUG)

        if self.config.media_type_filter:
            app.before_request(check_media_type)

        @app.before_request
        def init_jsonapi_params():
            # holds the deserialized request documents, cfr. jsonapi_deserialize
            g.jsonapi_params = {}

        app.register_error_handler(JsonapiError, self.handle_jsonapi_error)
        app.register_error_handler(NotFound, self.handle_not_found)
        app.register_error_handler(BadRequestKeyError, self.handle_missing_param)
        if not app.testing:
            app.register_error_handler(Exception, self.handle_internal_error)

        app.extensions["fjsonapi"] = self

    def deserialize(self, document: Mapping[str, Any], lid_key: Optional[str] = None) -> dict:
        """
        :param document: jsonapi request document
        :param lid_key: attribute name for the local ids
        :return: nested attribute dict
        """
        return self.deep_deserializer.deserialize(document, lid_key)

    @staticmethod
    def handle_jsonapi_error(exc: JsonapiError):
        """
        Render a JsonapiError, the message is only shown for server errors in debug mode
        """
        status_code = exc.status_code
        if status_code >= HTTPStatus.INTERNAL_SERVER_ERROR:
            log.error("%s: %s", exc.__class__.__name__, exc.message)
            detail = exc.message if is_debug() else HIDDEN_LOG
        else:
            log.warning("%s: %s", exc.__class__.__name__, exc.message)
            detail = exc.message

        error = {"status": str(status_code), "title": exc.title, "code": exc.api_code, "detail": detail}
        if exc.pointer is not None:
            error["source"] = {"pointer": exc.pointer}
        return render_jsonapi_errors([error], status=status_code)

    @staticmethod
    def handle_not_found(exc: NotFound):
        error = {"status": str(HTTPStatus.NOT_FOUND.value), "title": HTTPStatus.NOT_FOUND.phrase}
        return render_jsonapi_errors([error], status=HTTPStatus.NOT_FOUND)

    @staticmethod
    def handle_missing_param(exc: BadRequestKeyError):
        """
        A missing request parameter is attributed to the matching attribute
        """
        param = exc.args[0] if exc.args else ""
        log.warning("Missing parameter: %s", param)
        source = {"pointer": ""}
        if param and str(param) not in ("data", "attributes", "relationships"):
            source["pointer"] = f"/data/attributes/{param}"

        error = {"status": str(HTTPStatus.UNPROCESSABLE_ENTITY.value), "title": HTTPStatus.UNPROCESSABLE_ENTITY.phrase, "source": source}
        return render_jsonapi_errors([error], status=HTTPStatus.UNPROCESSABLE_ENTITY)

    @staticmethod
    def handle_internal_error(exc: Exception):
        if isinstance(exc, HTTPException):
            # other http errors (405, ...) keep their status code
            error = {"status": str(exc.code), "title": exc.name}
            return render_jsonapi_errors([error], status=exc.code)
        log.exception("Internal Server Error: %s", exc)
        error = {"status": str(HTTPStatus.INTERNAL_SERVER_ERROR.value), "title": HTTPStatus.INTERNAL_SERVER_ERROR.phrase}
        if is_debug():
            error["detail"] = str(exc)
        return render_jsonapi_errors([error], status=HTTPStatus.INTERNAL_SERVER_ERROR)

    @staticmethod
    def init_logging(loglevel: int = logging.WARNING) -> logging.Logger:
        """
        Specify the log format used in the webserver logs
        The webserver will catch stdout so we redirect eveything to sys.stdout
        """
        log = logging.getLogger(fjsonapi.__name__)
        if log.level == logging.NOTSET:
            handler = logging.StreamHandler(sys.stderr)
            formatter = logging.Formatter("[%(asctime)s] %(levelname)s: %(message)s")
            handler.setFormatter(formatter)
            log.setLevel(loglevel)
            log.addHandler(handler)
        return log


#
# logging initialization
#
try:
    DEBUG = os.getenv("DEBUG", logging.WARNING)
    LOGLEVEL = int(DEBUG)
except ValueError:  # pragma: no cover
    print(f'Invalid LogLevel in DEBUG Environment Variable! "{DEBUG}"')
    LOGLEVEL = logging.INFO

log = FJSONAPI.init_logging(LOGLEVEL)
