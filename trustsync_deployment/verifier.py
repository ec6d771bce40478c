from typing import Dict, List, NamedTuple

from ape.contracts import ContractInstance
from ethpm_types import ContractType, MethodABI

from trustsync_deployment.constants import (
    AGREEMENT_COUNTER,
    EXPECTED_INITIAL_STATE,
    REGISTER_USER,
    REPUTATION_PENALTY,
    REPUTATION_REWARD,
)
from trustsync_deployment.context import DeploymentContext
from trustsync_deployment.exceptions import VerificationError
from trustsync_deployment.submitter import SUBMISSION_ERRORS, DeployedContract


class InitialContractState(NamedTuple):
    agreement_counter: int
    reputation_reward: int
    reputation_penalty: int

    def as_dict(self) -> Dict[str, int]:
        return {
            AGREEMENT_COUNTER: self.agreement_counter,
            REPUTATION_REWARD: self.reputation_reward,
            REPUTATION_PENALTY: self.reputation_penalty,
        }


class AgreementLedger:
    """
    The part of the agreement contract interface that deployment depends on.
    Anything deployed under this name must expose these methods.
    """

    ACCESSORS = (AGREEMENT_COUNTER, REPUTATION_REWARD, REPUTATION_PENALTY)
    ENTRY_POINTS = (REGISTER_USER,)

    def __init__(self, instance: ContractInstance):
        self.probe_interface(instance.contract_type)
        self._instance = instance

    @staticmethod
    def _is_uint_accessor(abi: MethodABI) -> bool:
        if abi.inputs or len(abi.outputs) != 1:
            return False
        return str(abi.outputs[0].type).startswith("uint")

    @classmethod
    def missing_methods(cls, contract_type: ContractType) -> List[str]:
        view_methods = {abi.name: abi for abi in contract_type.view_methods}
        mutable_methods = {abi.name for abi in contract_type.mutable_methods}
        missing = []
        for name in cls.ACCESSORS:
            abi = view_methods.get(name)
            if abi is None:
                missing.append(name)
            elif not cls._is_uint_accessor(abi):
                missing.append(f"{name} (expected {name}() returns (uint))")
        missing.extend(name for name in cls.ENTRY_POINTS if name not in mutable_methods)
        return missing

    @classmethod
    def probe_interface(cls, contract_type: ContractType) -> None:
        missing = cls.missing_methods(contract_type)
        if missing:
            raise VerificationError(
                f"{contract_type.name} does not implement the agreement ledger interface; "
                f"missing: {', '.join(missing)}"
            )

    def _call(self, accessor: str) -> int:
        try:
            value = getattr(self._instance, accessor)()
        except SUBMISSION_ERRORS as e:
            raise VerificationError(f"Probe {accessor}() failed: {e}") from e
        if isinstance(value, bool) or not isinstance(value, int):
            raise VerificationError(
                f"Probe {accessor}() returned {value!r}; expected a single unsigned integer"
            )
        return value

    def agreement_counter(self) -> int:
        return self._call(AGREEMENT_COUNTER)

    def reputation_reward(self) -> int:
        return self._call(REPUTATION_REWARD)

    def reputation_penalty(self) -> int:
        return self._call(REPUTATION_PENALTY)

    def read_state(self) -> InitialContractState:
        return InitialContractState(
            agreement_counter=self.agreement_counter(),
            reputation_reward=self.reputation_reward(),
            reputation_penalty=self.reputation_penalty(),
        )


def _check_code(context: DeploymentContext, address: str) -> None:
    try:
        code = context.provider.get_code(address)
    except SUBMISSION_ERRORS as e:
        raise VerificationError(f"Unable to read code at {address}: {e}") from e
    if not code:
        raise VerificationError(f"No code deployed at {address}.")


def verify_initial_state(
    context: DeploymentContext,
    deployed: DeployedContract,
    expected: Dict[str, int] = None,
) -> InitialContractState:
    """
    Probes the freshly deployed instance and checks its initial state.
    Raises VerificationError on any probe failure or unexpected value.
    """
    expected = expected or EXPECTED_INITIAL_STATE
    _check_code(context, deployed.address)

    ledger = AgreementLedger(deployed.instance)
    state = ledger.read_state()

    mismatches = [
        f"{name}={actual} (expected {expected[name]})"
        for name, actual in state.as_dict().items()
        if name in expected and actual != expected[name]
    ]
    if mismatches:
        raise VerificationError(
            f"Unexpected initial state at {deployed.address}: {', '.join(mismatches)}"
        )
    return state
