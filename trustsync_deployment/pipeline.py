from enum import Enum
from pathlib import Path
from typing import Callable, Dict, List, NamedTuple, Optional

from trustsync_deployment import display
from trustsync_deployment.constants import (
    CONTRACT_LABEL,
    CONTRACT_NAME,
    DEPLOYMENT_RECORD_FILENAME,
    EXPECTED_INITIAL_STATE,
)
from trustsync_deployment.context import DeploymentContext
from trustsync_deployment.exceptions import TrustSyncDeploymentError
from trustsync_deployment.factory import bind_artifact
from trustsync_deployment.params import DeploymentParameters
from trustsync_deployment.record import DeploymentRecord, write_deployment_record
from trustsync_deployment.signer import resolve_signer
from trustsync_deployment.submitter import ConfirmationPolicy, await_confirmation, send_deployment
from trustsync_deployment.verifier import verify_initial_state


class PipelineState(Enum):
    INIT = "init"
    SIGNER_RESOLVED = "signer_resolved"
    FACTORY_READY = "factory_ready"
    SUBMITTED = "submitted"
    CONFIRMED = "confirmed"
    VERIFIED = "verified"
    RECORDED = "recorded"
    FAILED = "failed"


class StageFailure(NamedTuple):
    """The state a stage was trying to reach, and why it could not."""

    stage: PipelineState
    error: TrustSyncDeploymentError


class PipelineResult(NamedTuple):
    state: PipelineState
    history: List[PipelineState]
    record: Optional[DeploymentRecord] = None
    failure: Optional[StageFailure] = None

    @property
    def succeeded(self) -> bool:
        return self.state is PipelineState.RECORDED

    @property
    def exit_code(self) -> int:
        return 0 if self.succeeded else 1


class _StageFailed(Exception):
    def __init__(self, failure: StageFailure):
        super().__init__(str(failure.error))
        self.failure = failure


class DeploymentPipeline:
    """
    Deploys exactly one contract instance:

    INIT -> SIGNER_RESOLVED -> FACTORY_READY -> SUBMITTED -> CONFIRMED -> VERIFIED -> RECORDED

    Any stage failure ends the run in FAILED; nothing is retried.
    """

    def __init__(
        self,
        context: DeploymentContext,
        contract_name: str = CONTRACT_NAME,
        contract_label: str = CONTRACT_LABEL,
        expected_state: Dict[str, int] = None,
        policy: Optional[ConfirmationPolicy] = None,
        record_filepath: Optional[Path] = None,
    ):
        self.context = context
        self.contract_name = contract_name
        self.contract_label = contract_label
        self.expected_state = expected_state or dict(EXPECTED_INITIAL_STATE)
        self.policy = policy or ConfirmationPolicy.for_network(context.provider)
        self.record_filepath = Path(record_filepath or Path.cwd() / DEPLOYMENT_RECORD_FILENAME)
        self.state = PipelineState.INIT
        self.history = [PipelineState.INIT]

    @classmethod
    def from_parameters(
        cls,
        context: DeploymentContext,
        parameters: DeploymentParameters,
        record_filepath: Optional[Path] = None,
    ) -> "DeploymentPipeline":
        policy = ConfirmationPolicy.for_network(
            context.provider,
            required_confirmations=parameters.required_confirmations,
            timeout=parameters.confirmation_timeout,
        )
        return cls(
            context=context,
            contract_name=parameters.contract_name,
            contract_label=parameters.contract_label,
            expected_state=parameters.expected_state,
            policy=policy,
            record_filepath=record_filepath,
        )

    def _advance(self, target: PipelineState, stage: Callable, *args):
        try:
            result = stage(*args)
        except TrustSyncDeploymentError as e:
            raise _StageFailed(StageFailure(stage=target, error=e)) from e
        self.state = target
        self.history.append(target)
        return result

    def _run_stages(self) -> DeploymentRecord:
        context = self.context
        display.print_deployment_start(self.contract_label, context.network_name)

        signer = self._advance(PipelineState.SIGNER_RESOLVED, resolve_signer, context)
        display.print_signer(signer)

        deployable = self._advance(
            PipelineState.FACTORY_READY, bind_artifact, context, signer, self.contract_name
        )

        print(f"Deploying {self.contract_label}...")
        txn_hash = self._advance(PipelineState.SUBMITTED, send_deployment, context, deployable)
        print(
            f"(i) Submitted {txn_hash}; waiting for {self.policy.required_confirmations} "
            f"confirmation(s), timeout {self.policy.timeout}s"
        )

        deployed = self._advance(
            PipelineState.CONFIRMED,
            await_confirmation,
            context,
            deployable,
            txn_hash,
            self.policy,
        )
        display.print_deployed(deployed)

        state = self._advance(
            PipelineState.VERIFIED, verify_initial_state, context, deployed, self.expected_state
        )
        display.print_initial_state(state)

        record = DeploymentRecord.from_deployment(
            deployed=deployed,
            signer=signer,
            network_name=context.network_name,
            contract_label=self.contract_label,
        )
        filepath = self._advance(
            PipelineState.RECORDED, write_deployment_record, record, self.record_filepath
        )
        display.print_next_steps(deployed.address, context.network_name)
        print(f"(i) Deployment info saved to {filepath}")
        display.print_banner("Deployment Complete!")
        return record

    def run(self) -> PipelineResult:
        if self.state is not PipelineState.INIT:
            raise RuntimeError("A deployment pipeline can only be run once.")
        try:
            record = self._run_stages()
        except _StageFailed as e:
            self.state = PipelineState.FAILED
            self.history.append(PipelineState.FAILED)
            return PipelineResult(
                state=self.state, history=list(self.history), failure=e.failure
            )
        return PipelineResult(state=self.state, history=list(self.history), record=record)
