import logging
import os
from typing import Annotated

import typer
from botocore.exceptions import BotoCoreError, ClientError

from .backends import ApiGatewayStore
from .config import (
    AWS_REGIONS,
    DESTINATION_ENV_PREFIX,
    SOURCE_ENV_PREFIX,
    AwsCredentials,
    MigrationConfig,
    build_rename_rule,
    credentials_from_env,
)
from .errors import ConfigurationError, RemoteCallError
from .migrate import MigrationEngine, MigrationReport

app = typer.Typer(help="Migrate API Gateway API keys between AWS accounts")


def setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    # botocore debug output includes request bodies, i.e. key values
    for name in ("botocore", "boto3", "urllib3"):
        logging.getLogger(name).setLevel(logging.WARNING)


def prompt_credentials(label: str, endpoint_url: str | None) -> AwsCredentials:
    """Ask for static credentials interactively."""
    typer.echo(f"Enter the AWS credentials for the account you want to {label}")
    access_key_id = typer.prompt("Access Key Id")
    secret_access_key = typer.prompt("Secret Access Key", hide_input=True)
    session_token = typer.prompt("Session Token", default="", show_default=False)
    region = typer.prompt("AWS Region", default=AWS_REGIONS[0])
    return AwsCredentials(
        region=region,
        access_key_id=access_key_id,
        secret_access_key=secret_access_key,
        session_token=session_token or None,
        endpoint_url=endpoint_url,
    )


def resolve_credentials(
    label: str,
    env_prefix: str,
    profile: str | None,
    region: str | None,
    endpoint_url: str | None,
) -> AwsCredentials:
    """Pick credentials from flags, then the environment, then a prompt."""
    if profile:
        return AwsCredentials(
            region=region
            or os.environ.get(f"{env_prefix}AWS_REGION")
            or typer.prompt("AWS Region", default=AWS_REGIONS[0]),
            profile=profile,
            endpoint_url=endpoint_url,
        )

    credentials = credentials_from_env(env_prefix)
    if credentials is None:
        return prompt_credentials(label, endpoint_url)

    if region or endpoint_url:
        credentials = AwsCredentials(
            region=region or credentials.region,
            access_key_id=credentials.access_key_id,
            secret_access_key=credentials.secret_access_key,
            session_token=credentials.session_token,
            profile=credentials.profile,
            endpoint_url=endpoint_url or credentials.endpoint_url,
        )
    return credentials


def open_store(label: str, credentials: AwsCredentials) -> ApiGatewayStore:
    try:
        return ApiGatewayStore.from_credentials(credentials)
    except ConfigurationError as e:
        typer.echo(f"Configuration error ({label} account): {e}", err=True)
        raise typer.Exit(1)


def print_report(report: MigrationReport) -> None:
    for outcome in report.provisioning.outcomes:
        if outcome.destination_key:
            typer.echo(f"  ✓ Created: {outcome.destination_key.name}")
    for key in report.attachment.attached:
        typer.echo(f"  ✓ Attached: {key.name}")
    if report.error:
        typer.echo(f"  ⚠ Error: {report.error}", err=True)

    summary = (
        f"\nSummary: {len(report.source_keys)} found, "
        f"{len(report.provisioning.created)} created, "
        f"{len(report.attachment.attached)} attached"
    )
    if report.deletion is not None:
        summary += f", {report.deletion.attempted} delete attempted"
        if report.deletion.errors:
            summary += f" ({len(report.deletion.errors)} failed, ignored)"
    typer.echo(summary)


@app.command()
def migrate(
    name_prefix: Annotated[
        str | None, typer.Option("--name-prefix", "-n", help="Only keys whose name starts with this")
    ] = None,
    pattern: Annotated[
        str | None, typer.Option("--pattern", "-p", help="Regex to replace in key names (first match)")
    ] = None,
    replacement: Annotated[
        str | None, typer.Option("--replacement", "-r", help="Replacement for the matched pattern")
    ] = None,
    source_plan: Annotated[
        str | None, typer.Option(help="Only copy keys of this source usage plan id")
    ] = None,
    destination_plan: Annotated[
        str | None, typer.Option(help="Attach created keys to this destination usage plan id")
    ] = None,
    delete_source: Annotated[
        bool,
        typer.Option("--delete-source/--keep-source", help="Delete the source keys afterwards"),
    ] = False,
    dry_run: Annotated[
        bool, typer.Option("--dry-run", help="Preview without changes")
    ] = False,
    yes: Annotated[bool, typer.Option("--yes", "-y", help="Do not ask for confirmation")] = False,
    source_profile: Annotated[str | None, typer.Option(help="AWS profile for the source")] = None,
    source_region: Annotated[str | None, typer.Option(help="AWS region for the source")] = None,
    destination_profile: Annotated[
        str | None, typer.Option(help="AWS profile for the destination")
    ] = None,
    destination_region: Annotated[
        str | None, typer.Option(help="AWS region for the destination")
    ] = None,
    endpoint_url: Annotated[
        str | None, typer.Option(help="Custom API Gateway endpoint, e.g. LocalStack")
    ] = None,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Debug logging")] = False,
):
    """Copy API keys from a source account into a destination account.

    Credentials are read from SOURCE_AWS_* / DESTINATION_AWS_* environment
    variables, a profile flag, or prompted for.
    """
    setup_logging(verbose)

    try:
        rule = build_rename_rule(pattern, replacement)
        source = resolve_credentials(
            "copy from", SOURCE_ENV_PREFIX, source_profile, source_region, endpoint_url
        )
    except ConfigurationError as e:
        typer.echo(f"Configuration error: {e}", err=True)
        raise typer.Exit(1)

    engine_source = open_store("source", source)

    if dry_run:
        typer.echo("[DRY RUN]")
        engine = MigrationEngine(engine_source, engine_source)
        try:
            keys = engine.enumerate(source_plan, name_prefix)
        except RemoteCallError as e:
            typer.echo(f"  ⚠ Error: {e}", err=True)
            raise typer.Exit(1)
        for key, new_name in engine.plan(keys, rule):
            typer.echo(f"  ✓ Would create: {key.name} → {new_name}")
        if delete_source:
            typer.echo(f"  ✗ Would delete {len(keys)} source keys")
        return

    try:
        destination = resolve_credentials(
            "paste to",
            DESTINATION_ENV_PREFIX,
            destination_profile,
            destination_region,
            endpoint_url,
        )
    except ConfigurationError as e:
        typer.echo(f"Configuration error: {e}", err=True)
        raise typer.Exit(1)

    if delete_source and not yes:
        delete_source = typer.confirm(
            "Delete the api keys in the source account after copying?"
        )

    config = MigrationConfig(
        source=source,
        destination=destination,
        name_prefix=name_prefix,
        rename_rule=rule,
        source_usage_plan_id=source_plan,
        destination_usage_plan_id=destination_plan,
        delete_source_after_migration=delete_source,
    )
    engine = MigrationEngine(engine_source, open_store("destination", destination))
    report = engine.run(config)
    print_report(report)

    if not report.succeeded:
        raise typer.Exit(1)


@app.command("list-keys")
def list_keys(
    plan: Annotated[str | None, typer.Option(help="Usage plan id to list through")] = None,
    name_prefix: Annotated[
        str | None, typer.Option("--name-prefix", "-n", help="Name prefix filter")
    ] = None,
    profile: Annotated[str | None, typer.Option(help="AWS profile")] = None,
    region: Annotated[str | None, typer.Option(help="AWS region")] = None,
    endpoint_url: Annotated[str | None, typer.Option(help="Custom API Gateway endpoint")] = None,
):
    """List API key names in the source account. Values are never shown."""
    setup_logging(False)
    try:
        credentials = resolve_credentials(
            "list", SOURCE_ENV_PREFIX, profile, region, endpoint_url
        )
    except ConfigurationError as e:
        typer.echo(f"Configuration error: {e}", err=True)
        raise typer.Exit(1)

    store = open_store("source", credentials)
    try:
        keys = MigrationEngine(store, store).enumerate(plan, name_prefix)
    except RemoteCallError as e:
        typer.echo(f"  ⚠ Error: {e}", err=True)
        raise typer.Exit(1)

    for key in keys:
        state = "enabled" if key.enabled else "disabled"
        typer.echo(f"{key.id}  {key.name}  ({state})")


@app.command("list-plans")
def list_plans(
    profile: Annotated[str | None, typer.Option(help="AWS profile")] = None,
    region: Annotated[str | None, typer.Option(help="AWS region")] = None,
    endpoint_url: Annotated[str | None, typer.Option(help="Custom API Gateway endpoint")] = None,
):
    """List usage plans in the source account."""
    setup_logging(False)
    try:
        credentials = resolve_credentials(
            "list", SOURCE_ENV_PREFIX, profile, region, endpoint_url
        )
    except ConfigurationError as e:
        typer.echo(f"Configuration error: {e}", err=True)
        raise typer.Exit(1)

    store = open_store("source", credentials)
    try:
        plans = store.list_usage_plans()
    except (ClientError, BotoCoreError) as e:
        typer.echo(f"  ⚠ Error: list usage plans failed: {e}", err=True)
        raise typer.Exit(1)

    for plan in plans:
        typer.echo(f"{plan.id}  {plan.name}")


if __name__ == "__main__":
    app()
