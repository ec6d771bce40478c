import sys
from pathlib import Path

import click
from ape.cli import ConnectedProviderCommand, network_option

from trustsync_deployment.constants import DEFAULT_PARAMS_FILEPATH
from trustsync_deployment.context import DeploymentContext
from trustsync_deployment.exceptions import (
    ConfirmationTimeoutError,
    PersistenceError,
    TrustSyncDeploymentError,
)
from trustsync_deployment.params import DeploymentParameters, get_deployer_passphrase
from trustsync_deployment.pipeline import DeploymentPipeline, PipelineResult


def report_failure(result: PipelineResult) -> None:
    """Writes the failure cause and remediation to stderr."""
    stage, error = result.failure
    click.secho("\nDeployment failed!", fg="red", err=True)
    click.secho(f"Stage: {stage.name}", err=True)
    click.secho(f"{type(error).__name__}: {error}", err=True)
    if error.__cause__ is not None:
        click.secho(f"Caused by: {error.__cause__!r}", err=True)
    if isinstance(error, ConfirmationTimeoutError) and error.txn_hash:
        click.secho(f"Transaction hash: {error.txn_hash}", err=True)
    if isinstance(error, PersistenceError) and error.record is not None:
        for name, value in error.record.to_json_dict().items():
            click.secho(f"\t{name}={value}", err=True)
    click.secho(error.remediation, fg="yellow", err=True)


def report_setup_error(error: TrustSyncDeploymentError) -> None:
    """Writes a failure that happened before any stage ran to stderr."""
    click.secho(f"{type(error).__name__}: {error}", fg="red", err=True)
    click.secho(error.remediation, fg="yellow", err=True)


def deploy(params_filepath: Path, account_alias: str = None) -> PipelineResult:
    """
    Loads the deployment parameters, captures the connected network and runs the pipeline.
    Raises TrustSyncDeploymentError if the deployment cannot be set up.
    """
    parameters = DeploymentParameters.from_yaml(params_filepath)
    context = DeploymentContext.from_connected_provider(
        account_alias=account_alias or parameters.account_alias,
        passphrase=get_deployer_passphrase(),
        expected_chain_id=parameters.chain_id,
    )
    pipeline = DeploymentPipeline.from_parameters(context=context, parameters=parameters)
    return pipeline.run()


def main(params_filepath: Path, account_alias: str = None) -> int:
    try:
        result = deploy(params_filepath=params_filepath, account_alias=account_alias)
    except TrustSyncDeploymentError as e:
        report_setup_error(e)
        return 1

    if not result.succeeded:
        report_failure(result)
    return result.exit_code


@click.command(cls=ConnectedProviderCommand)
@network_option(required=True)
@click.option(
    "--params-filepath",
    "-p",
    help="Deployment parameters YAML",
    type=click.Path(dir_okay=False, exists=True, path_type=Path),
    default=DEFAULT_PARAMS_FILEPATH,
)
@click.option(
    "--account",
    "-a",
    "account_alias",
    help="Alias of the ape account used to deploy",
    type=click.STRING,
    required=False,
)
def cli(network, params_filepath, account_alias):
    """Deploy the TrustSync agreement contract and record the deployment."""
    sys.exit(main(params_filepath=params_filepath, account_alias=account_alias))


if __name__ == "__main__":
    cli()
