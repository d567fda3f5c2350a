"""Command line interface for feed_ranker."""

import asyncio
import sys
from dataclasses import replace

import click

from feed_ranker.config import get_config
from feed_ranker.errors import FeedRankerError
from feed_ranker.logging_config import setup_logging
from feed_ranker.services.aggregator import aggregate_feeds
from feed_ranker.services.atom_writer import build_atom_feed
from feed_ranker.services.opml_reader import read_opml
from feed_ranker.services.ranking import rank_posts
from feed_ranker.server.app import TRANSPORTS, run_server


def _load_subscriptions(opml_path: str):
    try:
        return read_opml(opml_path)
    except (FeedRankerError, OSError) as e:
        raise click.ClickException(str(e))


def _report_failures(result) -> None:
    for failure in result.failures:
        click.echo(f"skipped {failure.feed_url}: {failure.error}", err=True)


@click.group()
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    default=None,
    help="Override FEED_RANKER_LOG_LEVEL",
)
@click.pass_context
def main(ctx: click.Context, log_level: str) -> None:
    """Aggregate RSS/Atom subscriptions into one cadence-ranked stream."""
    config = get_config()
    if log_level:
        config = replace(config, log_level=log_level.upper())
    setup_logging(config)
    ctx.obj = config


@main.command()
@click.option(
    "--port",
    default=3001,
    help="Port to listen on for SSE or Streamable HTTP transport"
)
@click.option(
    "--host",
    default="127.0.0.1",
    help="Host to bind to (use 0.0.0.0 for Docker)"
)
@click.option(
    "--transport",
    type=click.Choice(TRANSPORTS),
    default="stdio",
    help="Transport type (stdio, sse, or streamable-http)"
)
@click.pass_obj
def serve(config, port: int, host: str, transport: str) -> None:
    """Run the MCP server."""
    sys.exit(run_server(transport=transport, host=host, port=port, config=config))


@main.command()
@click.argument("opml_path", type=click.Path(dir_okay=False))
def subscriptions(opml_path: str) -> None:
    """List the feeds in an OPML file."""
    subscription_list = _load_subscriptions(opml_path)
    for descriptor in subscription_list.feeds:
        click.echo(f"{descriptor.title}\t{descriptor.feed_url}")


@main.command()
@click.argument("opml_path", type=click.Path(dir_okay=False))
@click.option("--limit", default=50, show_default=True, help="Number of posts to show (0 for all)")
@click.pass_obj
def rank(config, opml_path: str, limit: int) -> None:
    """Fetch all feeds and print the ranked posts."""
    subscription_list = _load_subscriptions(opml_path)
    result = asyncio.run(aggregate_feeds(subscription_list.feeds, config=config))
    _report_failures(result)

    ranked = rank_posts(result.feeds)
    if limit > 0:
        ranked = ranked[:limit]

    for post in ranked:
        date = post.date.strftime("%Y-%m-%d %H:%M") if post.date else "----------------"
        click.echo(f"{date}  [{post.feed.title}] {post.title}")


@main.command()
@click.argument("opml_path", type=click.Path(dir_okay=False))
@click.option("--output", "-o", type=click.Path(dir_okay=False), default=None, help="Write to FILE instead of stdout")
@click.option("--title", default=None, help="Title of the combined feed")
@click.option("--feed-id", default=None, help="Atom id of the combined feed")
@click.pass_obj
def combine(config, opml_path: str, output: str, title: str, feed_id: str) -> None:
    """Fetch all feeds and write one combined Atom feed."""
    subscription_list = _load_subscriptions(opml_path)
    result = asyncio.run(aggregate_feeds(subscription_list.feeds, config=config))
    _report_failures(result)

    document = build_atom_feed(
        rank_posts(result.feeds),
        title=title or config.default_title,
        feed_id=feed_id,
    )

    if output:
        with open(output, "w", encoding="utf-8") as fh:
            fh.write(document)
        click.echo(f"Wrote {result.post_count} entries to {output}", err=True)
    else:
        click.echo(document, nl=False)


if __name__ == "__main__":
    main()
