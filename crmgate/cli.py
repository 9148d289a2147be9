"""Command line interface for the record API client."""

import json
from typing import Any, Callable

import click
from dotenv import load_dotenv

from crmgate.config import EnvConfigProvider, YamlConfigProvider
from crmgate.errors import CrmGateError
from crmgate.factory import ClientFactory
from crmgate.logging_config import configure_logging
from crmgate.modules.gateway import OperationGateway


def _parse_json(value: str) -> Any:
    try:
        return json.loads(value)
    except json.JSONDecodeError as err:
        raise click.BadParameter(f"not valid JSON: {err}") from err


def _run(ctx: click.Context, action: Callable[[OperationGateway], Any]) -> None:
    """Build the gateway, run one action and print its result as JSON."""
    try:
        config = ctx.obj["provider"].get_client_config()
    except (OSError, ValueError) as err:
        raise click.ClickException(f"Invalid configuration: {err}") from err

    configure_logging(ctx.obj["log_level"] or config.log_level, stream="ext://sys.stderr")

    try:
        gateway = ClientFactory.from_config(config)
        with gateway.transport:
            output = action(gateway)
    except CrmGateError as err:
        code = getattr(err, "code", None)
        detail = f" ({code})" if code else ""
        click.echo(f"Error [{err.kind.value}]{detail}: {err.message}", err=True)
        ctx.exit(1)
    except ValueError as err:
        raise click.BadParameter(str(err)) from err

    click.echo(json.dumps(output, indent=2, default=str))


@click.group()
@click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False),
    default=None,
    help="YAML configuration file (environment variables are used otherwise).",
)
@click.option("--log-level", "log_level", default=None, help="Override the configured log level.")
@click.pass_context
def cli(ctx: click.Context, config_path: str, log_level: str):
    """Query and modify records through a cached API session."""
    load_dotenv()
    provider = YamlConfigProvider(config_path) if config_path else EnvConfigProvider()
    ctx.obj = {"provider": provider, "log_level": log_level}


@cli.command()
@click.argument("query")
@click.pass_context
def query(ctx: click.Context, query: str):
    """Run QUERY and print the matching records."""
    _run(ctx, lambda gateway: gateway.query(query).result)


@cli.command()
@click.argument("record_id")
@click.pass_context
def retrieve(ctx: click.Context, record_id: str):
    """Print the record RECORD_ID (e.g. 4x12)."""
    _run(ctx, lambda gateway: gateway.retrieve(record_id).result)


@cli.command()
@click.argument("element_type")
@click.argument("data")
@click.pass_context
def create(ctx: click.Context, element_type: str, data: str):
    """Create an ELEMENT_TYPE record from the JSON object DATA."""
    fields = _parse_json(data)
    _run(ctx, lambda gateway: gateway.create(element_type, fields).result)


@cli.command()
@click.argument("data")
@click.pass_context
def update(ctx: click.Context, data: str):
    """Update a record from the JSON object DATA (must carry its id)."""
    record = _parse_json(data)
    _run(ctx, lambda gateway: gateway.update(record).result)


@cli.command()
@click.argument("record_id")
@click.pass_context
def delete(ctx: click.Context, record_id: str):
    """Delete the record RECORD_ID."""
    _run(ctx, lambda gateway: gateway.delete(record_id).result)


@cli.command()
@click.argument("element_type")
@click.pass_context
def describe(ctx: click.Context, element_type: str):
    """Print the field metadata of ELEMENT_TYPE."""
    _run(ctx, lambda gateway: gateway.describe(element_type).result)


@cli.command()
@click.pass_context
def session(ctx: click.Context):
    """Print a usable session id, logging in if needed."""
    _run(ctx, lambda gateway: {"sessionName": gateway.session.session_id()})


def main():
    cli(prog_name="crmgate")


if __name__ == "__main__":
    main()
