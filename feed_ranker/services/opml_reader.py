"""OPML subscription list reader.

This module turns an OPML document into an ordered list of feed descriptors.
"""

from pathlib import Path
from typing import Optional, Union

from lxml import etree

from feed_ranker.errors import OpmlParseError
from feed_ranker.logging_config import get_logger
from feed_ranker.models.schemas import FeedDescriptor, SubscriptionList


# Outline types that denote a feed; outlines without a type are accepted
FEED_OUTLINE_TYPES = {"rss", "atom"}


def _parser() -> etree.XMLParser:
    return etree.XMLParser(resolve_entities=False, no_network=True, remove_comments=True)


def _head_text(head, tag: str) -> Optional[str]:
    if head is None:
        return None
    node = head.find(tag)
    if node is None or node.text is None:
        return None
    return node.text.strip()


def _is_feed_outline(outline) -> bool:
    if not (outline.get("xmlUrl") or "").strip():
        return False
    outline_type = outline.get("type")
    return outline_type is None or outline_type.strip().lower() in FEED_OUTLINE_TYPES


def parse_opml(xml_content: Union[str, bytes]) -> SubscriptionList:
    """Parse an OPML document into a SubscriptionList.

    Outlines are visited depth-first in document order, so feeds nested in a
    folder follow the folder's position.

    Args:
        xml_content: OPML XML as text or bytes

    Returns:
        SubscriptionList with head metadata and feed descriptors

    Raises:
        OpmlParseError: If the document is not well-formed OPML
    """
    logger = get_logger(__name__)

    if isinstance(xml_content, str):
        xml_content = xml_content.encode("utf-8")

    try:
        root = etree.fromstring(xml_content, parser=_parser())
    except etree.XMLSyntaxError as e:
        raise OpmlParseError(f"Malformed OPML document: {e}") from e

    if root is None or root.tag != "opml":
        raise OpmlParseError("Document root is not <opml>")

    head = root.find("head")
    subscriptions = SubscriptionList(
        title=_head_text(head, "title"),
        date_created=_head_text(head, "dateCreated"),
        owner_email=_head_text(head, "ownerEmail"),
    )

    body = root.find("body")
    if body is None:
        return subscriptions

    for outline in body.iter("outline"):
        if not _is_feed_outline(outline):
            continue

        text = outline.get("text")
        subscriptions.feeds.append(FeedDescriptor(
            title=outline.get("title") or text or "",
            feed_url=outline.get("xmlUrl").strip(),
            site_url=outline.get("htmlUrl"),
            text=text,
        ))

    logger.info(f"Read {len(subscriptions.feeds)} feeds from subscription list")
    return subscriptions


def read_opml(path: Union[str, Path]) -> SubscriptionList:
    """Read and parse an OPML file.

    Raises:
        OSError: If the file cannot be read
        OpmlParseError: If the contents are not OPML
    """
    return parse_opml(Path(path).read_bytes())
