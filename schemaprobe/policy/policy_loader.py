"""
schemaprobe Policy Loader

Responsibilities:
- Load and validate harness_policy.yaml
- Compute policy_digest so oracle reports can name the settings they ran with
- Provide the required-field baseline for the presence oracle
- Provide keyword length limits and boundary alphabets
- Provide validator diagnostic fragments
- Fail fast on invalid/missing policy
"""

import yaml
import hashlib
import json
from pathlib import Path
from typing import Dict, Any, List, Optional


class PolicyValidationError(Exception):
    """Raised when policy file is invalid or missing required keys."""
    pass


class PolicyLoader:
    """Loads, validates, and provides access to the harness policy."""

    REQUIRED_KEYS = ["version", "required_baseline", "keyword", "diagnostics", "fixtures"]
    REQUIRED_KEYWORD_KEYS = ["max_length", "alphabet", "wide_alphabet"]
    REQUIRED_DIAGNOSTIC_KEYS = ["null_value", "missing_property", "max_length"]

    def __init__(self, policy_path: Optional[Path] = None):
        if policy_path is None:
            policy_path = Path(__file__).parent / "harness_policy.yaml"

        self.policy_path = Path(policy_path)
        self._policy: Optional[Dict[str, Any]] = None
        self._digest: Optional[str] = None

    def load(self) -> Dict[str, Any]:
        """Load and validate the policy file. Raises PolicyValidationError on failure."""
        if not self.policy_path.exists():
            raise PolicyValidationError(f"Policy file not found: {self.policy_path}")

        try:
            self._policy = yaml.safe_load(self.policy_path.read_text(encoding="utf-8"))
        except yaml.YAMLError as e:
            raise PolicyValidationError(f"Invalid YAML in policy file: {e}")

        if self._policy is None:
            raise PolicyValidationError("Policy file is empty")
        if not isinstance(self._policy, dict):
            raise PolicyValidationError("Policy file must contain a mapping at top level")

        self._validate()
        self._compute_digest()

        return self._policy

    def _validate(self):
        """Validate required keys and structure."""
        for key in self.REQUIRED_KEYS:
            if key not in self._policy:
                raise PolicyValidationError(f"Missing required key: {key}")

        baseline = self._policy.get("required_baseline")
        if not isinstance(baseline, list) or not all(isinstance(k, str) for k in baseline):
            raise PolicyValidationError("required_baseline must be a list of dotted paths")

        keyword = self._policy.get("keyword") or {}
        for key in self.REQUIRED_KEYWORD_KEYS:
            if key not in keyword:
                raise PolicyValidationError(f"Missing required keyword key: keyword.{key}")

        max_length = keyword.get("max_length")
        if isinstance(max_length, bool) or not isinstance(max_length, int) or max_length <= 0:
            raise PolicyValidationError(
                f"keyword.max_length must be a positive integer, got {max_length!r}"
            )

        for key in ("alphabet", "wide_alphabet"):
            if not isinstance(keyword.get(key), str) or not keyword.get(key):
                raise PolicyValidationError(f"keyword.{key} must be a non-empty string")

        diagnostics = self._policy.get("diagnostics") or {}
        for key in self.REQUIRED_DIAGNOSTIC_KEYS:
            if key not in diagnostics:
                raise PolicyValidationError(f"Missing required diagnostic: diagnostics.{key}")

        # The presence oracle names the missing leaf key in its expectation
        if "{key}" not in str(diagnostics.get("missing_property")):
            raise PolicyValidationError(
                "diagnostics.missing_property must contain a '{key}' placeholder"
            )

        fixtures = self._policy.get("fixtures") or {}
        if "valid_dir" not in fixtures:
            raise PolicyValidationError("Missing required fixtures key: fixtures.valid_dir")

    def _compute_digest(self):
        """Compute SHA256 digest of normalized policy."""
        normalized = json.dumps(self._policy, sort_keys=True, separators=(',', ':'))
        self._digest = hashlib.sha256(normalized.encode()).hexdigest()

    @property
    def policy(self) -> Dict[str, Any]:
        """Get the loaded policy. Raises if not loaded."""
        if self._policy is None:
            raise RuntimeError("Policy not loaded. Call load() first.")
        return self._policy

    @property
    def digest(self) -> str:
        """Get the policy digest. Raises if not loaded."""
        if self._digest is None:
            raise RuntimeError("Policy not loaded. Call load() first.")
        return self._digest

    @property
    def version(self) -> str:
        """Get the policy version."""
        return self.policy.get("version", "unknown")

    def required_baseline(self) -> List[str]:
        """Fields that are always required, regardless of caller input."""
        return list(self.policy.get("required_baseline", []))

    def keyword_max_length(self) -> int:
        return self.policy["keyword"]["max_length"]

    def keyword_alphabet(self) -> str:
        return self.policy["keyword"]["alphabet"]

    def keyword_wide_alphabet(self) -> str:
        return self.policy["keyword"]["wide_alphabet"]

    def diagnostic(self, name: str, **fmt: Any) -> str:
        """Get a diagnostic fragment, formatted with fmt when given."""
        diagnostics = self.policy.get("diagnostics", {})
        if name not in diagnostics:
            raise PolicyValidationError(f"Unknown diagnostic: {name}")
        fragment = str(diagnostics[name])
        return fragment.format(**fmt) if fmt else fragment

    def valid_fixture_dir(self) -> str:
        return self.policy.get("fixtures", {}).get("valid_dir", "valid")

    def to_dict(self) -> Dict[str, Any]:
        """Return policy info suitable for oracle reports."""
        return {
            "version": self.version,
            "digest": self.digest,
            "keyword_max_length": self.keyword_max_length(),
            "required_baseline": self.required_baseline(),
        }


# Singleton instance for convenience
_default_loader: Optional[PolicyLoader] = None


def get_policy_loader(policy_path: Optional[Path] = None) -> PolicyLoader:
    """Get the policy loader singleton, creating and loading if needed."""
    global _default_loader

    if _default_loader is None or policy_path is not None:
        loader = PolicyLoader(policy_path)
        loader.load()
        if policy_path is None:
            _default_loader = loader
        return loader

    return _default_loader


def reset_policy_loader():
    """Reset the singleton (for testing)."""
    global _default_loader
    _default_loader = None
