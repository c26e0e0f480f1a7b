import json
import logging
import os
import sys

import click
from rich.console import Console

from cfproxy import __version__, config

console = Console()


def _setup_cli_debug():
    from cfproxy.logging.setup import setup_logging_for_cli

    config.DEBUG = True
    os.environ["DEBUG"] = "1"

    setup_logging_for_cli(logging.DEBUG)


@click.group(name="cfproxy", help="CloudFormation proxy that reports deployments to Slack")
@click.version_option(version=__version__, message="%(version)s")
@click.option("--debug", is_flag=True, help="Enable CLI debugging mode")
def cfproxy(debug):
    if debug:
        _setup_cli_debug()


@cfproxy.command(name="start", help="Start the proxy in the foreground")
@click.option("--host", type=str, help="Host to bind to (default from GATEWAY_LISTEN)")
@click.option("--port", type=int, help="Port to listen on (default from GATEWAY_LISTEN)")
@click.option(
    "--endpoint",
    type=str,
    help="CloudFormation endpoint to forward to, like cloudformation.eu-west-1.amazonaws.com",
)
@click.option("--debug", is_flag=True, help="Enable debug logging")
def cmd_start(host: str, port: int, endpoint: str, debug: bool):
    if debug:
        config.DEBUG = True

    from cfproxy.logging.setup import setup_logging_from_config
    from cfproxy.runtime import ProxyRuntime, main

    setup_logging_from_config()

    endpoint_url = None
    if endpoint:
        endpoint_url = endpoint if "://" in endpoint else f"{config.CLOUDFORMATION_SCHEME}://{endpoint}"

    try:
        runtime = ProxyRuntime(host=host, port=port, endpoint_url=endpoint_url)
    except OSError as e:
        raise click.ClickException(f"unable to start proxy: {e}")

    main(runtime)


@cfproxy.group(name="config", help="Inspect the proxy configuration")
def cfproxy_config():
    pass


@cfproxy_config.command(name="show", help="Print the current configuration")
@click.option(
    "--format",
    "format_",
    type=click.Choice(["table", "plain", "dict", "json"]),
    default="table",
    help="The output format",
)
def cmd_config_show(format_=None):
    if format_ == "table":
        print_config_table()
    elif format_ == "plain":
        print_config_pairs()
    elif format_ == "dict":
        print_config_dict()
    elif format_ == "json":
        print_config_json()
    else:
        print_config_pairs()  # fall back to plain


def print_config_json():
    click.echo(json.dumps(dict(config.collect_config_items()), default=str))


def print_config_pairs():
    for key, value in config.collect_config_items():
        click.echo(f"{key}={value}")


def print_config_dict():
    console.print({key: str(value) for key, value in config.collect_config_items()})


def print_config_table():
    from rich.table import Table

    grid = Table(show_header=True)
    grid.add_column("Key")
    grid.add_column("Value")

    for key, value in config.collect_config_items():
        grid.add_row(key, str(value))

    console.print(grid)


def main():
    cfproxy(prog_name="cfproxy")


if __name__ == "__main__":
    sys.exit(main())
