from typing import NamedTuple

from ape.contracts import ContractContainer
from ape.exceptions import ApeException

from trustsync_deployment.context import DeploymentContext
from trustsync_deployment.exceptions import ArtifactNotFoundError
from trustsync_deployment.signer import Signer


class Deployable(NamedTuple):
    """A compiled contract bound to the account that will deploy it."""

    container: ContractContainer
    signer: Signer

    @property
    def contract_name(self) -> str:
        return self.container.contract_type.name


def _get_dependency_contract_container(project, contract: str) -> ContractContainer:
    for dependency_name, dependency_versions in project.dependencies.items():
        if len(dependency_versions) > 1:
            raise ArtifactNotFoundError(f"Ambiguous {dependency_name} dependency for {contract}")
        try:
            dependency_api = list(dependency_versions.values())[0]
            return getattr(dependency_api, contract)
        except AttributeError:
            continue
    raise ArtifactNotFoundError(
        f"No compiled artifact found for '{contract}'. Was the contract compiled?"
    )


def get_contract_container(project, contract: str) -> ContractContainer:
    try:
        return getattr(project, contract)
    except AttributeError:
        # not in root project; check dependencies
        pass
    except ApeException as e:
        raise ArtifactNotFoundError(f"Unable to load artifact for '{contract}': {e}") from e

    return _get_dependency_contract_container(project, contract)


def _has_deployment_bytecode(container: ContractContainer) -> bool:
    deployment_bytecode = container.contract_type.deployment_bytecode
    if deployment_bytecode is None:
        return False
    return deployment_bytecode.bytecode not in (None, "", "0x")


def bind_artifact(context: DeploymentContext, signer: Signer, contract_name: str) -> Deployable:
    """
    Locates the compiled artifact for `contract_name` and binds it to the signer.
    Makes no network calls.
    """
    container = get_contract_container(context.project, contract_name)
    if not _has_deployment_bytecode(container):
        raise ArtifactNotFoundError(
            f"Artifact for '{contract_name}' has no deployment bytecode "
            "(abstract contract or interface?)."
        )
    return Deployable(container=container, signer=signer)
