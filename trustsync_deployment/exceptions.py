"""Failure taxonomy for the TrustSync deployment pipeline."""

from typing import Optional


class TrustSyncDeploymentError(Exception):
    """Base exception for deployment pipeline failures."""

    remediation = "Nothing was committed on-chain; the deployment can be retried."


class ConfigurationError(TrustSyncDeploymentError):
    """Raised when no usable signer or network is available."""


class ArtifactNotFoundError(TrustSyncDeploymentError):
    """Raised when the compiled contract artifact cannot be located."""

    remediation = "Compile the contract (ape compile) and retry the deployment."


class DeploymentError(TrustSyncDeploymentError):
    """Raised when the deployment transaction fails to submit or confirm."""


class ConfirmationTimeoutError(DeploymentError):
    """Raised when a submitted deployment is not confirmed in time."""

    remediation = (
        "The transaction was broadcast but not confirmed; it may still be mined. "
        "Query the transaction hash on-chain before retrying."
    )

    def __init__(self, message: str, txn_hash: Optional[str] = None):
        super().__init__(message)
        self.txn_hash = txn_hash


class VerificationError(TrustSyncDeploymentError):
    """Raised when the deployed instance fails its initial state probes."""

    remediation = (
        "The contract exists on-chain but does not match the expected interface "
        "or initial state; check the compiled artifact before deploying again."
    )


class PersistenceError(TrustSyncDeploymentError):
    """Raised when the deployment record cannot be written."""

    remediation = (
        "The contract IS deployed on-chain but the record was not saved. "
        "Do not redeploy; write the record by hand from the values above."
    )

    def __init__(self, message: str, record=None):
        super().__init__(message)
        self.record = record
