from typing import Any, Callable, Dict, Optional


class CallableProcessor:
    """Wraps a validate function (and optionally a decode function) as a Processor."""

    def __init__(self, validate_fn: Callable[[Dict[str, Any]], Any],
                 decode_fn: Optional[Callable[[Dict[str, Any]], Any]] = None):
        self.validate_fn = validate_fn
        self.decode_fn = decode_fn

    def validate(self, payload: Dict[str, Any]) -> None:
        self.validate_fn(payload)

    def decode(self, payload: Dict[str, Any]) -> Any:
        if self.decode_fn is None:
            return payload
        return self.decode_fn(payload)
