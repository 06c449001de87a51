"""
Content extractor for isolating the meaningful part of a page.

Only the element with a fixed id is compared; everything outside it
(navigation, timestamps, tracking markup) is ignored.
"""

import re

import html2text
import structlog
from bs4 import BeautifulSoup, Comment

logger = structlog.get_logger(__name__)

# Backslash escapes html2text adds in front of Markdown syntax characters
MARKDOWN_ESCAPE = re.compile(r"\\([\\`*_{}\[\]()#+\-.!>])")


class ContentExtractor:
    """
    Extracts the content region of a page as plain text.

    Extraction never raises: malformed markup, undecodable bytes and a
    missing region all produce an empty string.
    """

    # Tags removed from the region before conversion
    IGNORED_TAGS = {"script", "style", "noscript", "template"}

    def __init__(self, content_id: str = "content"):
        """
        Initialize the content extractor.

        Args:
            content_id: id attribute of the element holding the page content
        """
        self.content_id = content_id

    def extract(self, raw: bytes) -> str:
        """
        Extract the content region of a raw document as plain text.

        Args:
            raw: Raw response body

        Returns:
            Normalized text, or "" when the region is absent
        """
        try:
            return self.to_text(self.extract_region(raw))
        except Exception as e:
            logger.debug("Extraction degraded to empty content", error=str(e))
            return ""

    def extract_region(self, raw: bytes) -> str:
        """
        Return the inner markup of the content element.

        Args:
            raw: Raw response body

        Returns:
            Inner HTML of the element, or "" if the page has no such element
        """
        soup = BeautifulSoup(raw, "lxml")
        region = soup.find(id=self.content_id)
        if region is None:
            return ""

        for tag in region.find_all(self.IGNORED_TAGS):
            tag.decompose()
        for comment in region.find_all(string=lambda text: isinstance(text, Comment)):
            comment.extract()

        return region.decode_contents()

    def to_text(self, markup: str) -> str:
        """
        Convert markup to readable text, keeping paragraph breaks.

        Lines are never re-wrapped so a one-word edit stays a one-line diff.
        The backslash escapes html2text puts before Markdown characters are
        removed so lines read as they do on the page.
        """
        if not markup.strip():
            return ""

        converter = html2text.HTML2Text()
        converter.body_width = 0
        converter.ignore_images = True
        converter.ignore_links = False

        text = MARKDOWN_ESCAPE.sub(r"\1", converter.handle(markup))
        lines = [line.rstrip() for line in text.split("\n")]
        return "\n".join(lines).strip("\n")
