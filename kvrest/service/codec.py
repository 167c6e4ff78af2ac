"""
Payload Codec

Turns raw request payloads into plain data for Model.load() and models
back into text. The service only depends on the decode/encode pair, so a
different wire format can be swapped in by passing another codec.
"""

import json
from typing import Any, Dict, Sequence, Union

from ..errors import DecodeError
from .model import Model


class JSONCodec:
    """JSON payload codec producing compact, single-line output."""

    def decode(self, payload: Union[bytes, str]) -> Dict[str, Any]:
        """
        Decode a payload into a dict.

        Raises:
            DecodeError: If the payload is not valid JSON, nests too deeply
                or is not an object
        """
        try:
            data = json.loads(payload)
        except (RecursionError, UnicodeDecodeError, ValueError) as exc:
            raise DecodeError(exc) from exc

        if not isinstance(data, dict):
            exc = TypeError(f"expected a JSON object, got {type(data).__name__}")
            raise DecodeError(exc) from exc
        return data

    def encode(self, value: Union[Model, Sequence[Model]]) -> str:
        """Encode a model or a list of models."""
        if isinstance(value, Model):
            data = value.dump()
        else:
            data = [model.dump() for model in value]
        return json.dumps(data, separators=(",", ":"))
