"""
schemaprobe Fixture Loader

Reads example payloads (JSON) and storage templates (YAML) from a fixture
directory. Any failure here is a harness setup failure: it is raised as
FixtureLoadError and the calling test stops.
"""

import json
import logging
import yaml
from pathlib import Path
from typing import Any, List, Optional, Union

from pydantic import ValidationError

from ..policy import get_policy_loader
from .schemas import FieldDescriptor

logger = logging.getLogger(__name__)


class FixtureLoadError(Exception):
    """Raised when a fixture or template cannot be read or parsed."""
    pass


class FixtureLoader:
    def __init__(self, base_dir: Union[str, Path], valid_dir: Optional[str] = None):
        self.base_dir = Path(base_dir)
        if valid_dir is None:
            valid_dir = get_policy_loader().valid_fixture_dir()
        self.valid_dir = self.base_dir / valid_dir

    def resolve(self, path: Union[str, Path]) -> Path:
        """Relative paths are resolved against the base dir."""
        p = Path(path)
        if not p.is_absolute():
            p = self.base_dir / p
        return p

    def load_data(self, path: Union[str, Path]) -> Any:
        """Load one JSON payload. Each call returns a freshly decoded tree."""
        full_path = self.resolve(path)
        if not full_path.exists():
            raise FixtureLoadError(f"Fixture not found: {full_path}")

        try:
            with open(full_path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise FixtureLoadError(f"Invalid JSON in fixture {full_path}: {e}")
        except (OSError, UnicodeDecodeError) as e:
            raise FixtureLoadError(f"Cannot read fixture {full_path}: {e}")

        logger.debug("loaded payload %s", full_path)
        return data

    def load_valid_data(self, name: str) -> Any:
        """Load the canonical valid payload registered under name."""
        return self.load_data(self.valid_dir / f"{name}.json")

    def load_fields(self, path: Union[str, Path]) -> List[FieldDescriptor]:
        """Load a storage template (fields.yml) into FieldDescriptors."""
        full_path = self.resolve(path)
        if not full_path.exists():
            raise FixtureLoadError(f"Template not found: {full_path}")

        try:
            raw = yaml.safe_load(full_path.read_text(encoding="utf-8"))
        except yaml.YAMLError as e:
            raise FixtureLoadError(f"Invalid YAML in template {full_path}: {e}")
        except (OSError, UnicodeDecodeError) as e:
            raise FixtureLoadError(f"Cannot read template {full_path}: {e}")

        if raw is None:
            return []
        if not isinstance(raw, list):
            raise FixtureLoadError(f"Template {full_path} must contain a list of fields")

        try:
            fields = [FieldDescriptor.model_validate(entry) for entry in raw]
        except ValidationError as e:
            raise FixtureLoadError(f"Invalid field definition in {full_path}: {e}")

        logger.debug("loaded %d template entries from %s", len(fields), full_path)
        return fields
