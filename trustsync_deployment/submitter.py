from typing import NamedTuple, Optional, Union

from ape.api import ProviderAPI
from ape.contracts import ContractInstance
from ape.exceptions import ApeException, TransactionNotFoundError
from eth_typing import ChecksumAddress
from eth_utils import to_checksum_address, to_hex
from web3.exceptions import TimeExhausted, Web3Exception

from trustsync_deployment.constants import DEFAULT_CONFIRMATION_TIMEOUT
from trustsync_deployment.context import DeploymentContext
from trustsync_deployment.exceptions import ConfirmationTimeoutError, DeploymentError
from trustsync_deployment.factory import Deployable

SUBMISSION_ERRORS = (ApeException, Web3Exception, ValueError, OSError)


class ConfirmationPolicy(NamedTuple):
    """How long, and how deep, to wait for the deployment receipt."""

    required_confirmations: int = 0
    timeout: int = DEFAULT_CONFIRMATION_TIMEOUT  # seconds

    @classmethod
    def for_network(
        cls,
        provider: ProviderAPI,
        required_confirmations: Optional[int] = None,
        timeout: Optional[int] = None,
    ) -> "ConfirmationPolicy":
        if required_confirmations is None:
            required_confirmations = provider.network.required_confirmations
        return cls(
            required_confirmations=int(required_confirmations),
            timeout=int(timeout or DEFAULT_CONFIRMATION_TIMEOUT),
        )


class DeployedContract(NamedTuple):
    """A confirmed deployment; immutable once created."""

    address: ChecksumAddress
    txn_hash: str
    block_number: int
    gas_limit: int
    gas_used: int
    instance: ContractInstance


def _hex(value: Union[bytes, str]) -> str:
    return value if isinstance(value, str) else to_hex(value)


def send_deployment(context: DeploymentContext, deployable: Deployable) -> str:
    """
    Signs and broadcasts the constructor transaction (no arguments).
    Returns the transaction hash without waiting for it to be mined.
    """
    account = deployable.signer.account
    try:
        txn = deployable.container.constructor.serialize_transaction(sender=account.address)
        txn = account.prepare_transaction(txn)
        signed_txn = account.sign_transaction(txn)
        if signed_txn is None:
            raise DeploymentError(f"Signing of {deployable.contract_name} deployment was refused.")
        txn_hash = context.provider.web3.eth.send_raw_transaction(
            signed_txn.serialize_transaction()
        )
    except SUBMISSION_ERRORS as e:
        raise DeploymentError(f"Failed to submit {deployable.contract_name} deployment: {e}") from e

    return _hex(txn_hash)


def await_confirmation(
    context: DeploymentContext,
    deployable: Deployable,
    txn_hash: str,
    policy: ConfirmationPolicy,
) -> DeployedContract:
    """Blocks until the deployment is mined or the policy timeout expires."""
    try:
        receipt = context.provider.get_receipt(
            txn_hash,
            required_confirmations=policy.required_confirmations,
            timeout=policy.timeout,
        )
    except (TransactionNotFoundError, TimeExhausted) as e:
        raise ConfirmationTimeoutError(
            f"Deployment transaction {txn_hash} was not confirmed within {policy.timeout}s.",
            txn_hash=txn_hash,
        ) from e
    except SUBMISSION_ERRORS as e:
        raise DeploymentError(f"Failed to confirm deployment transaction {txn_hash}: {e}") from e

    if receipt.failed:
        raise DeploymentError(f"Deployment transaction {txn_hash} reverted.")
    if receipt.block_number is None:
        raise DeploymentError(f"Deployment transaction {txn_hash} has no block number.")
    if not receipt.contract_address:
        raise DeploymentError(f"Deployment transaction {txn_hash} created no contract.")

    address = to_checksum_address(receipt.contract_address)
    try:
        instance = deployable.container.at(address, txn_hash=txn_hash)
    except SUBMISSION_ERRORS as e:
        raise DeploymentError(f"No contract found at {address} after deployment: {e}") from e

    return DeployedContract(
        address=address,
        txn_hash=_hex(receipt.txn_hash),
        block_number=int(receipt.block_number),
        gas_limit=int(receipt.gas_limit),
        gas_used=int(receipt.gas_used),
        instance=instance,
    )


def submit_deployment(
    context: DeploymentContext, deployable: Deployable, policy: ConfirmationPolicy
) -> DeployedContract:
    txn_hash = send_deployment(context, deployable)
    return await_confirmation(context, deployable, txn_hash, policy)
