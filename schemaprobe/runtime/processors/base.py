from typing import Protocol, Any, Dict


class Processor(Protocol):
    """
    Validator/decoder under test.

    validate() returns None for an accepted payload and raises for a rejected
    one; the exception text is the diagnostic the oracles match against.
    decode() returns the domain result and raises when decoding fails.
    """

    def validate(self, payload: Dict[str, Any]) -> None:
        ...

    def decode(self, payload: Dict[str, Any]) -> Any:
        ...
