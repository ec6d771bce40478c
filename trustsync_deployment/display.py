from web3 import Web3

BANNER = "=" * 42


def print_banner(title: str) -> None:
    print(f"\n{BANNER}", title, f"{BANNER}\n", sep="\n")


def print_deployment_start(contract_label: str, network_name: str) -> None:
    print(f"Starting {contract_label} deployment on {network_name}...")


def print_signer(signer) -> None:
    print(f"Deploying contracts with account: {signer.address}")
    if signer.balance is None:
        print("Account balance: unknown\n")
    else:
        print(f"Account balance: {Web3.from_wei(signer.balance, 'ether')} ETH\n")


def print_deployed(deployed) -> None:
    print_banner("Contract deployed successfully!")
    print(
        f"Contract Address: {deployed.address}",
        f"Transaction Hash: {deployed.txn_hash}",
        f"Block Number: {deployed.block_number}",
        f"Gas Limit: {deployed.gas_limit}",
        f"Gas Used: {deployed.gas_used}",
        sep="\n",
    )


def print_initial_state(state) -> None:
    print_banner("Contract Details")
    print(
        f"Initial Agreement Counter: {state.agreement_counter}",
        f"Reputation Reward: {state.reputation_reward} points",
        f"Reputation Penalty: {state.reputation_penalty} points",
        sep="\n",
    )


def print_next_steps(address: str, network_name: str) -> None:
    print_banner("Next Steps")
    print(
        "1. Verify your contract on a block explorer (if on mainnet/testnet):",
        f"   {address} on {network_name}\n",
        "2. Save the contract address for frontend integration",
        "3. Register users by calling registerUser()",
        "4. Start creating agreements!\n",
        sep="\n",
    )
