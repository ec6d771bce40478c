from types import SimpleNamespace

import pytest
from ape.exceptions import ProviderError
from eth_utils import to_checksum_address
from ethpm_types import MethodABI
from hexbytes import HexBytes
from web3.exceptions import TimeExhausted

from trustsync_deployment.context import DeploymentContext
from trustsync_deployment.submitter import ConfirmationPolicy

# Common constants
DEPLOYER_ADDRESS = to_checksum_address("0x" + "aa" * 20)
CONTRACT_ADDRESSES = [to_checksum_address("0x" + byte * 20) for byte in ("bb", "cc", "dd")]
FIRST_TXN_HASH = "0xdeadbeef" + "00" * 28
FIRST_BLOCK = 1000
GAS_LIMIT = 3_000_000
ONE_ETHER = 10**18

INITIAL_STATE = {"agreementCounter": 0, "REPUTATION_REWARD": 10, "REPUTATION_PENALTY": 5}


def view_abi(name, output="uint256"):
    return MethodABI(
        name=name, stateMutability="view", inputs=[], outputs=[{"name": "", "type": output}]
    )


def mutable_abi(name):
    return MethodABI(name=name, stateMutability="nonpayable", inputs=[], outputs=[])


LEDGER_VIEW_METHODS = [view_abi(name) for name in INITIAL_STATE]
LEDGER_MUTABLE_METHODS = [mutable_abi("registerUser"), mutable_abi("createAgreement")]


#
# In-process stand-ins for the ape network surface
#


class FakeChain:
    """Balances, broadcast transactions, mined deployments and their state."""

    def __init__(self):
        self.block_number = FIRST_BLOCK
        self.balances = {}
        self.sent = []  # raw transactions accepted by the node
        self.pending = {}  # raw -> unsigned txn
        self.receipts = {}
        self.code = {}
        self.state = dict(INITIAL_STATE)
        self.revert = False
        self.stall = False

    def _next_txn_hash(self):
        if not self.sent:
            return FIRST_TXN_HASH
        return "0x" + f"{len(self.sent):064x}"

    def send_raw_transaction(self, raw):
        txn = self.pending[raw]
        if self.balances.get(txn.sender, 0) == 0:
            raise ProviderError("insufficient funds for gas * price + value")

        txn_hash = self._next_txn_hash()
        self.sent.append(raw)
        address = None if self.revert else CONTRACT_ADDRESSES[len(self.sent) - 1]
        if address:
            self.code[address] = b"\x60\x80"
        self.receipts[txn_hash] = SimpleNamespace(
            txn_hash=txn_hash,
            block_number=self.block_number,
            contract_address=address,
            failed=self.revert,
            gas_limit=GAS_LIMIT,
            gas_used=GAS_LIMIT // 2,
        )
        self.block_number += 1
        return HexBytes(txn_hash)


class FakeProvider:
    def __init__(self, chain, network_name="goerli", chain_id=5):
        self.chain = chain
        self.network = SimpleNamespace(name=network_name, required_confirmations=0)
        self.chain_id = chain_id
        self.web3 = SimpleNamespace(
            eth=SimpleNamespace(send_raw_transaction=chain.send_raw_transaction)
        )
        self.receipt_requests = []

    def get_receipt(self, txn_hash, required_confirmations=0, timeout=None):
        self.receipt_requests.append((txn_hash, required_confirmations, timeout))
        if self.chain.stall:
            raise TimeExhausted(f"Transaction {txn_hash} is not in the chain after {timeout}")
        return self.chain.receipts[txn_hash]

    def get_code(self, address):
        return self.chain.code.get(address, b"")


class FakeSignedTxn:
    def __init__(self, raw):
        self._raw = raw

    def serialize_transaction(self):
        return self._raw


class FakeAccount:
    def __init__(self, chain, address=DEPLOYER_ADDRESS, locked=False, broken_balance=False):
        self.chain = chain
        self.address = address
        self.locked = locked
        self.broken_balance = broken_balance
        self.nonce = 0
        self.autosign_passphrase = None

    @property
    def balance(self):
        if self.broken_balance:
            raise ProviderError("eth_getBalance unavailable")
        return self.chain.balances.get(self.address, 0)

    def set_autosign(self, enabled, passphrase=None):
        self.autosign_passphrase = passphrase
        self.locked = not enabled

    def prepare_transaction(self, txn):
        txn.nonce = self.nonce
        return txn

    def sign_transaction(self, txn):
        raw = f"{self.address}:{txn.nonce}:{txn.contract_name}".encode()
        self.chain.pending[raw] = txn
        self.nonce += 1
        return FakeSignedTxn(raw)


class FakeAccounts:
    def __init__(self, test_accounts=(), local_accounts=(), aliases=None):
        self.test_accounts = list(test_accounts)
        self._local_accounts = list(local_accounts)
        self._aliases = aliases or {}

    def __iter__(self):
        return iter(self._local_accounts)

    def load(self, alias):
        try:
            return self._aliases[alias]
        except KeyError:
            raise KeyError(f"No account with alias '{alias}'.")


class FakeInstance:
    def __init__(self, container, address, chain):
        self.contract_type = container.contract_type
        self.address = address
        self._chain = chain

    def __getattr__(self, name):
        if name.startswith("_") or name not in self._chain.state:
            raise AttributeError(name)

        def call():
            value = self._chain.state[name]
            if isinstance(value, Exception):
                raise value
            return value

        return call


class FakeConstructor:
    def __init__(self, container):
        self.container = container

    def serialize_transaction(self, sender):
        return SimpleNamespace(sender=sender, contract_name=self.container.contract_type.name)


class FakeContainer:
    def __init__(
        self, chain, name="Project", view_methods=None, mutable_methods=None, bytecode="0x6080"
    ):
        self.chain = chain
        if view_methods is None:
            view_methods = LEDGER_VIEW_METHODS
        if mutable_methods is None:
            mutable_methods = LEDGER_MUTABLE_METHODS
        self.contract_type = SimpleNamespace(
            name=name,
            view_methods=view_methods,
            mutable_methods=mutable_methods,
            deployment_bytecode=SimpleNamespace(bytecode=bytecode),
        )
        self.constructor = FakeConstructor(self)

    def at(self, address, txn_hash=None):
        return FakeInstance(self, address, self.chain)


class FakeProject:
    def __init__(self, containers=None, dependencies=None):
        self._containers = containers or {}
        self.dependencies = dependencies or {}

    def __getattr__(self, name):
        try:
            return self.__dict__["_containers"][name]
        except KeyError:
            raise AttributeError(f"{name} is not a contract in this project")


#
# Fixtures
#


@pytest.fixture
def ledger_chain():
    return FakeChain()


@pytest.fixture
def deployer_account(ledger_chain):
    ledger_chain.balances[DEPLOYER_ADDRESS] = ONE_ETHER
    return FakeAccount(ledger_chain)


@pytest.fixture
def ledger_project(ledger_chain):
    return FakeProject(containers={"Project": FakeContainer(ledger_chain)})


@pytest.fixture
def fake_provider(ledger_chain):
    return FakeProvider(ledger_chain)


@pytest.fixture
def deployment_context(fake_provider, deployer_account, ledger_project):
    return DeploymentContext(
        provider=fake_provider,
        network_name="goerli",
        chain_id=5,
        accounts=FakeAccounts(local_accounts=[deployer_account]),
        project=ledger_project,
    )


@pytest.fixture
def policy():
    return ConfirmationPolicy(required_confirmations=1, timeout=30)
