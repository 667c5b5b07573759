from .base import Processor
from .callable_processor import CallableProcessor
from .json_schema import JSONSchemaProcessor, PayloadValidationError

def get_processor(name: str = "jsonschema", **kwargs) -> Processor:
    if name == "jsonschema":
        return JSONSchemaProcessor(**kwargs)
    elif name == "callable":
        return CallableProcessor(**kwargs)
    else:
        raise ValueError(f"Unknown processor: {name}")
