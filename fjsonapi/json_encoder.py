# JSON encoding of the attribute values in jsonapi documents

import datetime
import decimal
from uuid import UUID
from flask.json.provider import DefaultJSONProvider
import fjsonapi
from .config import is_debug
from .request import JSONAPI_MEDIA_TYPE

# (type, encoder) pairs, the first match is used so datetime must precede date
ATTRIBUTE_ENCODERS = (
    (datetime.timedelta, str),
    (datetime.datetime, lambda value: value.isoformat()),
    ((datetime.date, datetime.time), lambda value: value.isoformat()),
    ((set, frozenset), list),
    (UUID, str),
    (decimal.Decimal, float),
    (bytes, lambda value: value.hex()),
)


class _JSONAPIEncoder:
    """
    Encode the attribute values of serialized objects that the json module can't handle
    """

    def default(self, obj, **kwargs):
        """
        :param obj: attribute value to be encoded
        :return: json compatible value
        """
        for value_type, encode in ATTRIBUTE_ENCODERS:
            if isinstance(obj, value_type):
                return encode(obj)

        # attributes are expected to be columns of the supported types
        fjsonapi.log.warning(f'JSON Encoding Error: Unknown object type "{type(obj)}" for {obj}')
        if not is_debug():
            return {"error": "JSONAPIEncoder invalid object"}
        return str(obj)


class JSONAPIJSONProvider(_JSONAPIEncoder, DefaultJSONProvider):
    """
    Flask JSON provider for jsonapi responses
    """

    mimetype = JSONAPI_MEDIA_TYPE
    sort_keys = False
