"""Command-line interface for Literature Scout."""

import asyncio
import json
import logging
from pathlib import Path

import click

from literature_scout.config import get_settings
from literature_scout.exceptions import LiteratureScoutError
from literature_scout.models.model_blueprint import ArticleRequest, QueryFilters
from literature_scout.services.blueprint import (
    get_specialties,
    get_specialty_mesh_terms,
    get_suggested_topics,
    normalize_specialty,
    process_blueprint,
)
from literature_scout.services.journal_ranking import rank_articles
from literature_scout.services.query_builder import build_search_query
from literature_scout.services.retrieval import PubmedRetrievalService
from literature_scout.utils.rate_limiter import RateLimiter


def _build_request(
    specialty: str,
    topics: tuple[str, ...],
    categories: tuple[str, ...],
    age_group: str | None,
    years: int | None,
    page: int = 1,
    limit: int | None = None,
    mesh_filter: bool = False,
) -> ArticleRequest:
    return ArticleRequest(
        specialty=specialty,
        topics=list(topics),
        filters=QueryFilters(
            clinical_query_categories=list(categories),
            age_group=age_group,
            year_range=years,
        ),
        page=page,
        limit=limit,
        mesh_filter=mesh_filter,
    )


def _request_options(func):
    options = [
        click.option("-s", "--specialty", default="", help="Clinical specialty"),
        click.option("-t", "--topic", "topics", multiple=True, help="Topic (repeatable)"),
        click.option(
            "-c",
            "--category",
            "categories",
            multiple=True,
            help="Clinical query category, e.g. Therapy (repeatable)",
        ),
        click.option("--age-group", default=None, help="Age group key"),
        click.option("-y", "--years", type=int, default=None, help="Publication year range"),
    ]
    for option in reversed(options):
        func = option(func)
    return func


@click.group()
@click.version_option(package_name="literature-scout")
def main():
    """Literature Scout: retrieve clinical literature from PubMed."""
    logging.basicConfig(level=get_settings().log_level)


@main.command()
@_request_options
def query(specialty, topics, categories, age_group, years):
    """Print the PubMed query built for a request."""
    try:
        blueprint = process_blueprint(
            _build_request(specialty, topics, categories, age_group, years)
        )
        click.echo(build_search_query(blueprint))
    except LiteratureScoutError as e:
        raise click.ClickException(str(e)) from e


@main.command()
@_request_options
@click.option("-p", "--page", default=1, show_default=True, help="Results page")
@click.option("-n", "--limit", type=int, default=None, help="Articles per page")
@click.option("--rank/--no-rank", default=True, show_default=True, help="Rank by journal")
@click.option(
    "--mesh-filter",
    is_flag=True,
    help="Keep only articles indexed under the specialty's MeSH terms",
)
@click.option("-o", "--output", type=click.Path(), help="Output file path (JSON)")
def search(
    specialty, topics, categories, age_group, years, page, limit, rank, mesh_filter, output
):
    """Search PubMed and print matching articles."""
    request = _build_request(
        specialty, topics, categories, age_group, years, page, limit, mesh_filter
    )

    async def _run():
        settings = get_settings()
        async with PubmedRetrievalService(
            rate_limiter=RateLimiter.from_settings(settings), settings=settings
        ) as service:
            return await service.retrieve_for_request(request)

    try:
        result = asyncio.run(_run())
    except LiteratureScoutError as e:
        raise click.ClickException(str(e)) from e

    articles = rank_articles(result.articles) if rank else result.articles
    click.echo(f"Query: {result.query}")
    click.echo(f"{result.total_count} matching articles, showing {len(articles)}:")
    for i, article in enumerate(articles, 1):
        click.echo(f"  {i}. [{article.pmid}] {article.title} ({article.journal}, {article.pub_date})")

    if output:
        payload = result.model_copy(update={"articles": articles})
        Path(output).write_text(json.dumps(payload.model_dump(), indent=2))
        click.echo(f"\nResults saved to: {output}")


@main.command()
def specialties():
    """List the configured specialties."""
    for name in get_specialties():
        click.echo(name)


@main.command()
@click.argument("specialty")
@click.option("--mesh", is_flag=True, help="Also list the specialty's MeSH terms")
def topics(specialty, mesh):
    """List suggested topics for SPECIALTY."""
    suggested = get_suggested_topics(specialty)
    if not suggested:
        raise click.ClickException(f"Invalid specialty: {normalize_specialty(specialty)}")
    for topic in suggested:
        click.echo(topic)
    if mesh:
        click.echo("\nMeSH terms:")
        for term in get_specialty_mesh_terms(specialty):
            click.echo(f"  {term}")


if __name__ == "__main__":
    main()
