import os
import typing
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from trustsync_deployment.constants import (
    CONTRACT_LABEL,
    CONTRACT_NAME,
    DEFAULT_CONFIRMATION_TIMEOUT,
    DEPLOYER_PASSPHRASE_ENVVAR,
    EXPECTED_INITIAL_STATE,
)
from trustsync_deployment.exceptions import ConfigurationError


def _load_yaml(filepath: Path) -> dict:
    """Loads a YAML file."""
    try:
        with open(filepath, "r") as file:
            return yaml.safe_load(file) or dict()
    except FileNotFoundError as e:
        raise ConfigurationError(f"Deployment parameters file not found: {filepath}") from e
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Malformed deployment parameters YAML {filepath}: {e}") from e


def _section(config: Dict, name: str) -> Dict:
    section = config.get(name) or dict()
    if not isinstance(section, dict):
        raise ConfigurationError(f"'{name}' must be a mapping in params file.")
    return section


def _optional_int(value: Any, field: str, minimum: int) -> Optional[int]:
    if value is None:
        return None
    try:
        ivalue = int(value)
    except (TypeError, ValueError):
        raise ConfigurationError(f"{field} is not a valid integer: {value!r}")
    if ivalue < minimum:
        raise ConfigurationError(f"{field} is less than the minimum allowed value of {minimum}")
    return ivalue


def _expected_state(config: Dict) -> Dict[str, int]:
    overrides = _section(config, "expected_state")
    unknown = set(overrides) - set(EXPECTED_INITIAL_STATE)
    if unknown:
        raise ConfigurationError(f"Unknown expected_state entries: {', '.join(sorted(unknown))}")

    expected = dict(EXPECTED_INITIAL_STATE)
    for name, value in overrides.items():
        expected[name] = _optional_int(value, f"expected_state.{name}", minimum=0)
    return expected


class DeploymentParameters(typing.NamedTuple):
    """Validated contents of a deployment parameters file."""

    contract_name: str = CONTRACT_NAME
    contract_label: str = CONTRACT_LABEL
    expected_state: typing.Mapping[str, int] = EXPECTED_INITIAL_STATE
    chain_id: Optional[int] = None
    account_alias: Optional[str] = None
    required_confirmations: Optional[int] = None
    confirmation_timeout: int = DEFAULT_CONFIRMATION_TIMEOUT

    @classmethod
    def from_config(cls, config: Dict) -> "DeploymentParameters":
        print("Validating parameters YAML...")
        if not isinstance(config, dict):
            raise ConfigurationError("Malformed deployment parameters YAML.")

        deployment = _section(config, "deployment")
        contract = _section(config, "contract")
        confirmations = _section(config, "confirmations")

        contract_name = contract.get("name", CONTRACT_NAME)
        if not contract_name:
            raise ConfigurationError("contract.name is not set in params file.")

        timeout = _optional_int(confirmations.get("timeout"), "confirmations.timeout", minimum=1)
        return cls(
            contract_name=contract_name,
            contract_label=contract.get("label") or CONTRACT_LABEL,
            expected_state=_expected_state(config),
            chain_id=_optional_int(deployment.get("chain_id"), "deployment.chain_id", minimum=1),
            account_alias=deployment.get("account"),
            required_confirmations=_optional_int(
                confirmations.get("required"), "confirmations.required", minimum=0
            ),
            confirmation_timeout=timeout or DEFAULT_CONFIRMATION_TIMEOUT,
        )

    @classmethod
    def from_yaml(cls, filepath: Path) -> "DeploymentParameters":
        config = _load_yaml(filepath)
        return cls.from_config(config)


def get_deployer_passphrase() -> Optional[str]:
    return os.environ.get(DEPLOYER_PASSPHRASE_ENVVAR)
