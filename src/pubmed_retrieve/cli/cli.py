"""Command-line interface for pubmed-retrieve."""

import asyncio
import logging
from pathlib import Path

import click

from pubmed_retrieve.config import get_settings
from pubmed_retrieve.data_sources.base_client import DataSourceError
from pubmed_retrieve.runners.pubmed_runner import (
    count_matches,
    retrieve_pmids,
    retrieve_records,
)


def _configure_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else get_settings().log_level.upper()
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _run(coro):
    try:
        return asyncio.run(coro)
    except DataSourceError as e:
        raise click.ClickException(str(e)) from e


@click.group()
@click.version_option(package_name="pubmed-retrieve")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
def main(verbose: bool):
    """pubmed-retrieve: fetch PubMed records for a search query."""
    _configure_logging(verbose)


@main.command()
@click.argument("query")
@click.option(
    "-n", "--max-results", type=click.IntRange(min=0), help="Maximum PMIDs to return"
)
def pmids(query: str, max_results: int | None):
    """Print the PMIDs matching QUERY, most relevant first."""
    for pmid in _run(retrieve_pmids(query, max_results=max_results)):
        click.echo(pmid)


@main.command()
@click.argument("query")
def count(query: str):
    """Print how many records match QUERY."""
    click.echo(_run(count_matches(query)))


@main.command()
@click.argument("query")
@click.option(
    "-n", "--max-results", type=click.IntRange(min=0), help="Maximum records to fetch"
)
@click.option("--id-field", help="JSON key for the record identifier")
@click.option("-o", "--output", type=click.Path(), help="Output file path (JSON)")
def fetch(
    query: str, max_results: int | None, id_field: str | None, output: str | None
):
    """Fetch full records for QUERY as JSON."""
    data = _run(
        retrieve_records(query, max_results=max_results, id_field=id_field, indent=2)
    )

    if output:
        Path(output).write_bytes(data)
        click.echo(f"Results saved to: {output}")
    else:
        click.echo(data.decode("utf-8"))


if __name__ == "__main__":
    main()
