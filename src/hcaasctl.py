#!/usr/bin/env python3
"""
CLI tool for the HCaaS reconciler plugin
Creates, reads, lists and deletes HCaaS resources one at a time
"""

import json
import logging
import sys

import click
import yaml
from tabulate import tabulate

from config import get_config
from errors import HcaasError
from provider import HcaasProvider


def _load_file(filename):
    with open(filename, "r") as f:
        if filename.endswith(".yaml") or filename.endswith(".yml"):
            return yaml.safe_load(f)
        return json.load(f)


def _echo_data(data, output):
    if output == "yaml":
        click.echo(yaml.safe_dump(data, default_flow_style=False, sort_keys=False))
    else:
        click.echo(json.dumps(data, indent=2))


def _fail(e):
    click.echo(f"Error: {e}", err=True)
    sys.exit(1)


@click.group()
@click.option("--host", envvar="HCAAS_HOST", help="Target tsuru API host")
@click.option("--token", envvar="HCAAS_TOKEN", help="Token for the tsuru API")
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx, host, token, verbose):
    """HCaaS CLI - manage monitored URLs, watchers and groups"""
    config = get_config()
    logging.basicConfig(
        level=logging.DEBUG if verbose else config.logging.log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    ctx.ensure_object(dict)
    ctx.obj["host"] = host
    ctx.obj["token"] = token
    if "provider" not in ctx.obj:
        ctx.obj["provider"] = HcaasProvider(config=config)


def _provider(ctx) -> HcaasProvider:
    provider = ctx.obj["provider"]
    try:
        provider.configure(host=ctx.obj["host"], token=ctx.obj["token"])
    except HcaasError as e:
        _fail(e)
    return provider


@cli.command()
@click.pass_context
def kinds(ctx):
    """List the resource kinds"""
    provider = ctx.obj["provider"]
    rows = []
    for name in provider.resource_kinds():
        kind = provider.registry.get_kind(name)
        rows.append([name, kind.sub_path, kind.id_field, kind.description])
    click.echo(
        tabulate(rows, headers=["Kind", "Path", "Identity", "Description"], tablefmt="grid")
    )


@cli.command()
@click.option(
    "--filename", "-f", type=click.Path(exists=True), required=True,
    help="YAML/JSON file with 'kind' and the resource attributes",
)
@click.option("--timeout", type=float, help="Operation timeout in seconds")
@click.pass_context
def create(ctx, filename, timeout):
    """Create a resource from a YAML/JSON file"""
    data = _load_file(filename)
    if not isinstance(data, dict) or "kind" not in data:
        _fail(f"{filename} must be a mapping with a 'kind' key")

    attributes = dict(data)
    kind_name = attributes.pop("kind")
    provider = _provider(ctx)
    try:
        state = provider.state_from_attributes(kind_name, attributes)
        provider.reconciler(kind_name).create(state, timeout=timeout)
    except (HcaasError, ValueError) as e:
        _fail(e)

    click.echo(f"{kind_name} created successfully!")
    click.echo(f"ID: {state.id}")


@cli.command()
@click.argument("kind")
@click.argument("identity")
@click.option("--instance", "-i", required=True, help="HCaaS instance name")
@click.option("--service-name", "-s", default=None, help="HCaaS service name")
@click.option("--output", "-o", type=click.Choice(["json", "yaml"]), default="json")
@click.pass_context
def read(ctx, kind, identity, instance, service_name, output):
    """Read a resource by identity"""
    provider = _provider(ctx)
    try:
        reconciler = provider.reconciler(kind)
        state = reconciler.import_state(
            instance, identity, service_name or provider.config.provider.service_name
        )
        reconciler.read(state)
    except (HcaasError, ValueError) as e:
        _fail(e)

    if not state.exists:
        click.echo(f"{kind} '{identity}' not found on instance {instance}", err=True)
        sys.exit(1)

    attributes = state.to_attributes()
    attributes.pop("password", None)
    _echo_data(attributes, output)


@cli.command(name="list")
@click.argument("kind")
@click.option("--instance", "-i", required=True, help="HCaaS instance name")
@click.option("--service-name", "-s", default=None, help="HCaaS service name")
@click.option(
    "--output", "-o", type=click.Choice(["table", "json", "yaml"]), default="table"
)
@click.pass_context
def list_resources(ctx, kind, instance, service_name, output):
    """List the remote resources of a kind"""
    provider = _provider(ctx)
    try:
        listing = provider.reconciler(kind).list(
            instance, service_name or provider.config.provider.service_name
        )
    except (HcaasError, ValueError) as e:
        _fail(e)

    if output != "table":
        _echo_data(listing, output)
        return

    if listing and isinstance(listing[0], dict):
        headers = sorted({key for entry in listing for key in entry})
        rows = [[entry.get(h, "") for h in headers] for entry in listing]
    else:
        headers = [provider.registry.get_kind(kind).id_field]
        rows = [[entry] for entry in listing]
    click.echo(tabulate(rows, headers=headers, tablefmt="grid"))


@cli.command()
@click.argument("kind")
@click.argument("identity")
@click.option("--instance", "-i", required=True, help="HCaaS instance name")
@click.option("--service-name", "-s", default=None, help="HCaaS service name")
@click.option("--timeout", type=float, help="Operation timeout in seconds")
@click.confirmation_option(prompt="Are you sure you want to delete this resource?")
@click.pass_context
def delete(ctx, kind, identity, instance, service_name, timeout):
    """Delete a resource by identity"""
    provider = _provider(ctx)
    try:
        reconciler = provider.reconciler(kind)
        state = reconciler.import_state(
            instance, identity, service_name or provider.config.provider.service_name
        )
        reconciler.delete(state, timeout=timeout)
    except (HcaasError, ValueError) as e:
        _fail(e)

    click.echo(f"{kind} '{identity}' deleted")


if __name__ == "__main__":
    cli()
