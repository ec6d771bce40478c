#!/usr/bin/python3
"""
Deploys the TrustSync agreement contract (Project.sol) and writes
deployment-info.json to the current directory.

    ape run deploy_trustsync --network ethereum:sepolia:infura
"""

from trustsync_deployment.cli import cli

if __name__ == "__main__":
    cli()
