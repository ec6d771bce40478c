from typing import NamedTuple, Optional

from ape.api import AccountAPI
from ape.exceptions import ApeException
from ape.logging import logger
from eth_typing import ChecksumAddress
from eth_utils import to_checksum_address
from web3.exceptions import Web3Exception

from trustsync_deployment.context import DeploymentContext
from trustsync_deployment.exceptions import ConfigurationError


class Signer(NamedTuple):
    """The deploying account, resolved once per run."""

    address: ChecksumAddress
    balance: Optional[int]  # wei; None when the balance could not be read
    account: AccountAPI


def _check_chain_id(context: DeploymentContext) -> None:
    if context.expected_chain_id is None or context.is_local:
        return
    if int(context.expected_chain_id) != context.chain_id:
        raise ConfigurationError(
            f"chain_id in params file ({context.expected_chain_id}) does not match "
            f"chain_id of current network ({context.chain_id})."
        )


def _select_account(context: DeploymentContext) -> AccountAPI:
    if context.account_alias:
        try:
            return context.accounts.load(context.account_alias)
        except (KeyError, IndexError, ApeException) as e:
            raise ConfigurationError(f"No account with alias '{context.account_alias}'.") from e

    if context.is_local:
        candidates = list(context.accounts.test_accounts)[:1]
    else:
        candidates = list(context.accounts)

    if len(candidates) != 1:
        raise ConfigurationError(
            f"Signer is ambiguous on {context.network_name} - "
            f"expected exactly one account, got {len(candidates)}. "
            "Select one with --account."
        )
    return candidates[0]


def _unlock(account: AccountAPI, passphrase: Optional[str]) -> None:
    if not getattr(account, "locked", False):
        return
    if not passphrase:
        raise ConfigurationError(
            f"Account {account.address} is locked and no passphrase was provided."
        )
    try:
        account.set_autosign(True, passphrase=passphrase)
    except ApeException as e:
        raise ConfigurationError(f"Unable to unlock account {account.address}: {e}") from e


def _read_balance(account: AccountAPI) -> Optional[int]:
    try:
        return int(account.balance)
    except (ApeException, Web3Exception, ValueError, OSError) as e:
        logger.warning(f"Unable to read balance of {account.address}: {e}")
        return None


def resolve_signer(context: DeploymentContext) -> Signer:
    """Returns the single signing identity for this deployment."""
    _check_chain_id(context)
    account = _select_account(context)
    _unlock(account, context.passphrase)
    balance = _read_balance(account)
    return Signer(
        address=to_checksum_address(account.address),
        balance=balance,
        account=account,
    )
