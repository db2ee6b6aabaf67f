import json
from dataclasses import asdict, is_dataclass
from enum import Enum


class HexEnabledJsonEncoder(json.JSONEncoder):
    """JSON Encoder that converts bytes to hex, and enums to their values"""

    def default(self, o):
        if isinstance(o, bytes):
            return "0x" + o.hex()
        if isinstance(o, Enum):
            return o.value
        return json.JSONEncoder.default(self, o)


def dataclass_to_json(obj) -> str:
    """Converts a dataclass (or a plain dict) to json.  Fields set to None are dropped"""

    def _drop_none(value):
        if isinstance(value, dict):
            return {k: _drop_none(v) for k, v in value.items() if v is not None}
        if isinstance(value, list):
            return [_drop_none(v) for v in value]
        return value

    data = asdict(obj) if is_dataclass(obj) else obj
    return json.dumps(_drop_none(data), cls=HexEnabledJsonEncoder, indent=4)
