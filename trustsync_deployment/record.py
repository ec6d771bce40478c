import json
import os
import tempfile
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, NamedTuple, Optional

from eth_typing import ChecksumAddress
from eth_utils import to_checksum_address

from trustsync_deployment.exceptions import PersistenceError
from trustsync_deployment.signer import Signer
from trustsync_deployment.submitter import DeployedContract

STANDARD_RECORD_JSON_FORMAT = {"indent": 2}

# python field -> json field
RECORD_FIELDS = {
    "contract_address": "contractAddress",
    "transaction_hash": "transactionHash",
    "block_number": "blockNumber",
    "deployer": "deployer",
    "network": "network",
    "timestamp": "timestamp",
    "contract_name": "contractName",
}


def _utc_timestamp(now: Optional[datetime] = None) -> str:
    """ISO-8601 in UTC with millisecond precision, e.g. 2023-10-01T12:00:00.000Z"""
    now = now or datetime.now(tz=timezone.utc)
    return now.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


class DeploymentRecord(NamedTuple):
    """The persisted outcome of a successful deployment."""

    contract_address: ChecksumAddress
    transaction_hash: str
    block_number: int
    deployer: ChecksumAddress
    network: str
    timestamp: str
    contract_name: str

    @classmethod
    def from_deployment(
        cls,
        deployed: DeployedContract,
        signer: Signer,
        network_name: str,
        contract_label: str,
        now: Optional[datetime] = None,
    ) -> "DeploymentRecord":
        return cls(
            contract_address=to_checksum_address(deployed.address),
            transaction_hash=deployed.txn_hash,
            block_number=int(deployed.block_number),
            deployer=to_checksum_address(signer.address),
            network=network_name,
            timestamp=_utc_timestamp(now),
            contract_name=contract_label,
        )

    def to_json_dict(self) -> Dict:
        return {RECORD_FIELDS[field]: value for field, value in self._asdict().items()}

    @classmethod
    def from_json_dict(cls, data: Dict) -> "DeploymentRecord":
        try:
            values = {field: data[key] for field, key in RECORD_FIELDS.items()}
        except KeyError as e:
            raise ValueError(f"Deployment record is missing field {e}") from e
        values["block_number"] = int(values["block_number"])
        return cls(**values)


def _default_file_mode() -> int:
    """The mode a plain open() would create a file with under the current umask."""
    umask = os.umask(0)
    os.umask(umask)
    return 0o666 & ~umask


def write_deployment_record(record: DeploymentRecord, filepath: Path) -> Path:
    """
    Writes the deployment record, replacing any previous one.
    The file is written to a temporary sibling first and then renamed into place
    so an interrupted write never leaves a truncated record behind.
    """
    filepath = Path(filepath)
    temp_filepath = None
    try:
        filepath.parent.mkdir(parents=True, exist_ok=True)
        fd, temp_name = tempfile.mkstemp(
            prefix=f".{filepath.name}.", suffix=".tmp", dir=filepath.parent
        )
        temp_filepath = Path(temp_name)
        with os.fdopen(fd, "w") as file:
            json.dump(record.to_json_dict(), file, **STANDARD_RECORD_JSON_FORMAT)
            file.write("\n")
            file.flush()
            os.fsync(file.fileno())
        # mkstemp creates owner-only files
        os.chmod(temp_filepath, _default_file_mode())
        os.replace(temp_filepath, filepath)
    except OSError as e:
        if temp_filepath is not None and temp_filepath.exists():
            temp_filepath.unlink()
        raise PersistenceError(
            f"Unable to write deployment record to {filepath}: {e}", record=record
        ) from e

    return filepath


def read_deployment_record(filepath: Path) -> DeploymentRecord:
    with open(filepath, "r") as file:
        data = json.load(file)
    if not isinstance(data, dict):
        raise ValueError(f"Malformed deployment record at {filepath}")
    return DeploymentRecord.from_json_dict(data)
