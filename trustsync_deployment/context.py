from typing import Any, NamedTuple, Optional

from ape.api import ProviderAPI

from trustsync_deployment.constants import LOCAL_NETWORKS
from trustsync_deployment.exceptions import ConfigurationError


def is_local_network(network_name: str) -> bool:
    """Returns True if the network is a local development network."""
    return network_name in LOCAL_NETWORKS


class DeploymentContext(NamedTuple):
    """
    Everything a deployment stage may touch: the connected provider,
    the target network and the sources of signers and contract artifacts.
    """

    provider: ProviderAPI
    network_name: str
    chain_id: int
    accounts: Any  # ape AccountManager
    project: Any  # ape ProjectManager
    account_alias: Optional[str] = None
    passphrase: Optional[str] = None
    expected_chain_id: Optional[int] = None

    @property
    def is_local(self) -> bool:
        return is_local_network(self.network_name)

    @classmethod
    def from_connected_provider(
        cls,
        account_alias: Optional[str] = None,
        passphrase: Optional[str] = None,
        expected_chain_id: Optional[int] = None,
    ) -> "DeploymentContext":
        """Captures the provider ape is currently connected to."""
        from ape import accounts, networks, project

        provider = networks.active_provider
        if provider is None:
            raise ConfigurationError("Not connected to a network; use --network.")

        return cls(
            provider=provider,
            network_name=provider.network.name,
            chain_id=provider.chain_id,
            accounts=accounts,
            project=project,
            account_alias=account_alias,
            passphrase=passphrase,
            expected_chain_id=expected_chain_id,
        )
