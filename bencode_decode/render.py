from typing import Any, Dict

from .decoder import Value

HEX_KEY_PREFIX = "hex:"


def _render_key(key: bytes) -> str:
    # text keys never start with the prefix, so rendered keys stay unique
    try:
        text = key.decode("utf-8")
    except UnicodeDecodeError:
        return HEX_KEY_PREFIX + key.hex()
    if text.startswith(HEX_KEY_PREFIX):
        return HEX_KEY_PREFIX + key.hex()
    return text


def to_jsonable(value: Value) -> Any:
    """
    converts a decoded value into something json.dumps accepts

    byte strings become text when they are valid utf-8, otherwise
    {"hex": ...}. dictionary keys that are not utf-8, or that start with
    "hex:", become "hex:" followed by their hex string

    Raises:
        TypeError: if value is not a decoded bencode value
    """
    if isinstance(value, bytes):
        try:
            return value.decode("utf-8")
        except UnicodeDecodeError:
            return {"hex": value.hex()}
    if isinstance(value, int):
        return value
    if isinstance(value, list):
        return [to_jsonable(item) for item in value]
    if isinstance(value, dict):
        rendered: Dict[str, Any] = {}
        for key, item in value.items():
            rendered[_render_key(key)] = to_jsonable(item)
        return rendered
    raise TypeError(f"not a bencode value: {type(value).__name__}")
