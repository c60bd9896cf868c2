#!/usr/bin/env python3
"""HERA Legacy Mapper - Entry point."""
import logging
import os
import sys

import click
from colorama import Fore, Style, init

from hera_mapper.cli.interactive import InteractiveCLI

# Initialize colorama
init(autoreset=True)

logging.basicConfig(
    level=os.getenv("HERA_LOG_LEVEL", "WARNING").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)


def print_banner():
    """Print application banner."""
    click.echo(f"{Fore.CYAN}{'=' * 44}")
    click.echo(f"{Fore.CYAN}║   {Fore.WHITE}HERA Legacy Mapper{Fore.CYAN}                   ║")
    click.echo(f"{Fore.CYAN}║   {Fore.WHITE}Universal Schema Mapping Assistant{Fore.CYAN}   ║")
    click.echo(f"{Fore.CYAN}{'=' * 44}{Style.RESET_ALL}")
    click.echo()


@click.group()
@click.version_option(version="0.1.0")
def cli():
    """HERA Legacy Mapper - Map legacy data onto the universal schema."""
    pass


@cli.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False))
@click.option("--export", "export_path", type=click.Path(dir_okay=False), help="Write the mapping JSON here")
@click.option("--review", is_flag=True, help="Edit low-confidence mappings interactively")
def analyze(file, export_path, review):
    """Analyze a JSON, CSV or Excel file and propose mappings."""
    print_banner()

    cli_tool = InteractiveCLI()
    if not cli_tool.analyze_file(file, export_path, review):
        sys.exit(1)


@cli.command()
@click.option("--export", "export_path", type=click.Path(dir_okay=False), help="Write the mapping JSON here")
@click.option("--review", is_flag=True, help="Edit low-confidence mappings interactively")
def sample(export_path, review):
    """Map the built-in restaurant sample dataset."""
    print_banner()

    cli_tool = InteractiveCLI()
    cli_tool.load_sample(export_path, review)


@cli.command()
@click.argument("requirement")
@click.option("--entity-type", help="Entity type hint, e.g. customer")
@click.option("--org", "organization_id", help="Organization id for schema reuse and registration")
@click.option("--no-ai", is_flag=True, help="Use the rule-based generator only")
def generate(requirement, entity_type, organization_id, no_ai):
    """Generate a schema from a business requirement."""
    print_banner()

    cli_tool = InteractiveCLI()
    cli_tool.generate(
        requirement,
        entity_type=entity_type,
        organization_id=organization_id,
        ai_enabled=False if no_ai else None,
    )


@cli.command()
@click.argument("organization_id")
def registry(organization_id):
    """List schemas registered for an organization."""
    print_banner()

    cli_tool = InteractiveCLI()
    cli_tool.list_registry(organization_id)


if __name__ == "__main__":
    cli()
