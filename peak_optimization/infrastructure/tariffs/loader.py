"""
Provider tariff definitions loaded from YAML.

Each provider definition names a billing rule, the redistribution method
used to optimize against it, and the guidance text shown to the user.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Union
import logging

import yaml

from .billing_rules import BillingRule, billing_rule_from_dict

logger = logging.getLogger(__name__)


@dataclass
class ProviderDefinition:
    """Declarative description of a grid operator's demand-fee model."""

    name: str
    billing_rule: BillingRule
    display_name: str = ""
    method: str = "top_n"
    parameters: Dict[str, Any] = field(default_factory=dict)
    guidance_text: List[str] = field(default_factory=list)
    additional_information: Optional[str] = None

    def __post_init__(self):
        if not self.name:
            raise ValueError("Provider name cannot be empty")
        if not self.display_name:
            self.display_name = self.name


class TariffLoader:
    """Loader for provider definitions from YAML files."""

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> List[ProviderDefinition]:
        """
        Parse provider definitions from a dictionary.

        Args:
            data: Dictionary with a 'providers' list

        Returns:
            List of ProviderDefinition in file order

        Raises:
            ValueError: If structure is invalid
        """
        if not data or "providers" not in data:
            raise ValueError("Provider data must contain 'providers' root key")

        providers = data["providers"]
        if not isinstance(providers, list):
            raise ValueError("'providers' must be a list")

        definitions = []
        for entry in providers:
            if "name" not in entry:
                raise ValueError(f"Provider entry missing 'name': {entry}")
            if "billing_rule" not in entry:
                raise ValueError(f"Provider '{entry['name']}' missing 'billing_rule'")

            definitions.append(ProviderDefinition(
                name=entry["name"],
                display_name=entry.get("display_name", ""),
                billing_rule=billing_rule_from_dict(entry["billing_rule"]),
                method=entry.get("method", "top_n"),
                parameters=dict(entry.get("parameters") or {}),
                guidance_text=list(entry.get("guidance_text") or []),
                additional_information=entry.get("additional_information"),
            ))

        return definitions

    @classmethod
    def from_yaml(cls, yaml_path: Union[str, Path]) -> List[ProviderDefinition]:
        """
        Load provider definitions from YAML file.

        Args:
            yaml_path: Path to provider YAML file

        Returns:
            List of ProviderDefinition

        Raises:
            FileNotFoundError: If YAML file doesn't exist
            ValueError: If YAML structure is invalid
        """
        yaml_path = Path(yaml_path)

        if not yaml_path.exists():
            raise FileNotFoundError(f"Provider file not found: {yaml_path}")

        with open(yaml_path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)

        definitions = cls.from_dict(data)
        logger.info(f"Loaded {len(definitions)} provider definitions from {yaml_path}")
        return definitions
