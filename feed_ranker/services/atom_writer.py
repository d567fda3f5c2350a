"""Atom feed writer.

This module serializes a ranked post sequence into one Atom document. Each
entry carries an <atom:source> block so readers can tell which feed a post
came from after posts of different feeds are interleaved.
"""

import re
from datetime import datetime
from typing import Iterable, Optional

from lxml import etree

from feed_ranker.models.schemas import Post
from feed_ranker.utils.timestamps import format_timestamp, parse_timestamp, utc_now


ATOM_NS = "http://www.w3.org/2005/Atom"
DEFAULT_TITLE = "Combined Feed"
UNKNOWN_FEED_ID = "urn:uuid:unknown-feed"
XML_DECLARATION = '<?xml version="1.0" encoding="utf-8"?>\n'

# Characters outside the XML 1.0 Char production
INVALID_XML_CHARS = re.compile("[^\u0009\u000a\u000d\u0020-\ud7ff\ue000-\ufffd\U00010000-\U0010ffff]")


def xml_safe(value: str) -> str:
    """Strip characters that cannot appear in an XML 1.0 document."""
    return INVALID_XML_CHARS.sub("", value)


def _sub(parent, tag: str, text: Optional[str] = None, **attrs):
    attrs = {key: xml_safe(value) for key, value in attrs.items()}
    element = etree.SubElement(parent, f"{{{ATOM_NS}}}{tag}", **attrs)
    if text is not None:
        element.text = xml_safe(text)
    return element


def _source_updated(post: Post, now: datetime) -> datetime:
    feed = post.feed
    built = parse_timestamp(feed.last_build_date) if feed and feed.last_build_date else None
    return built or post.date or now


def _add_source(entry, post: Post, now: datetime) -> None:
    feed = post.feed
    if feed is None:
        return

    source = _sub(entry, "source")
    _sub(source, "id", feed.url)
    if feed.site_link:
        _sub(source, "link", href=feed.site_link)
    if feed.description:
        _sub(source, "subtitle", feed.description)
    _sub(source, "title", feed.title)
    _sub(source, "updated", format_timestamp(_source_updated(post, now)))


def _add_entry(root, post: Post, now: datetime) -> None:
    entry = _sub(root, "entry")

    _sub(entry, "id", post.guid or post.url)
    _sub(entry, "title", post.title)
    # Atom requires <updated>; a dateless post gets the generation time
    _sub(entry, "updated", format_timestamp(post.date or now))
    _sub(entry, "link", href=post.url)

    if post.date is not None:
        _sub(entry, "published", format_timestamp(post.date))

    if post.creator:
        author = _sub(entry, "author")
        _sub(author, "name", post.creator)

    if post.content:
        content = _sub(entry, "content", type="html")
        body = xml_safe(post.content)
        # CDATA cannot hold its own terminator; lxml escapes plain text instead
        content.text = etree.CDATA(body) if "]]>" not in body else body

    _add_source(entry, post, now)


def build_atom_feed(
    posts: Iterable[Post],
    title: str = DEFAULT_TITLE,
    feed_id: Optional[str] = None,
    now: Optional[datetime] = None,
) -> str:
    """Serialize posts into an Atom document.

    Entries are written in the order given.

    Args:
        posts: Posts to include, typically the output of rank_posts
        title: Title of the combined feed
        feed_id: Feed id; defaults to the first post's feed URL
        now: Timestamp used wherever a date is missing (defaults to current UTC time)

    Returns:
        Atom XML document as a string
    """
    posts = list(posts)
    now = now or utc_now()

    if not feed_id:
        first_feed = posts[0].feed if posts else None
        feed_id = first_feed.url if first_feed is not None and first_feed.url else UNKNOWN_FEED_ID

    dates = [post.date for post in posts if post.date is not None]

    root = etree.Element(f"{{{ATOM_NS}}}feed", nsmap={None: ATOM_NS})
    _sub(root, "id", feed_id)
    _sub(root, "title", title or DEFAULT_TITLE)
    _sub(root, "updated", format_timestamp(max(dates) if dates else now))

    for post in posts:
        _add_entry(root, post, now)

    return XML_DECLARATION + etree.tostring(root, encoding="unicode", pretty_print=True)
