import pytest

from trustsync_deployment.context import is_local_network
from trustsync_deployment.exceptions import (
    ArtifactNotFoundError,
    ConfigurationError,
    ConfirmationTimeoutError,
    DeploymentError,
    PersistenceError,
    TrustSyncDeploymentError,
    VerificationError,
)


@pytest.mark.parametrize(
    "error_class",
    [
        ConfigurationError,
        ArtifactNotFoundError,
        DeploymentError,
        ConfirmationTimeoutError,
        VerificationError,
        PersistenceError,
    ],
)
def test_taxonomy_shares_base(error_class):
    assert issubclass(error_class, TrustSyncDeploymentError)
    assert error_class.remediation


def test_timeout_is_a_deployment_error():
    error = ConfirmationTimeoutError("stalled", txn_hash="0x01")
    assert isinstance(error, DeploymentError)
    assert error.txn_hash == "0x01"


def test_only_persistence_reports_a_committed_deployment():
    assert "IS deployed" in PersistenceError.remediation
    assert "Nothing was committed" in DeploymentError.remediation
    assert "Nothing was committed" in ConfigurationError.remediation


def test_local_networks():
    assert is_local_network("local")
    assert not is_local_network("goerli")
    assert not is_local_network("mainnet")
