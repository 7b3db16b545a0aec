"""
Web Loader - Fetch a web page and extract its visible text

License: MIT
"""

from html.parser import HTMLParser
from typing import List
import logging

import httpx

from ..exceptions import ContentLoadError
from ..utils.helpers import clean_text

logger = logging.getLogger(__name__)

_SKIPPED_TAGS = {"script", "style", "noscript"}


class _TextExtractor(HTMLParser):
    """Collects text outside script/style/noscript, preferring the <body>."""

    def __init__(self):
        super().__init__(convert_charrefs=True)
        self._skip_depth = 0
        self._in_body = False
        self.body_parts: List[str] = []
        self.all_parts: List[str] = []

    def handle_starttag(self, tag, attrs):
        if tag in _SKIPPED_TAGS:
            self._skip_depth += 1
        elif tag == "body":
            self._in_body = True

    def handle_endtag(self, tag):
        if tag in _SKIPPED_TAGS and self._skip_depth:
            self._skip_depth -= 1
        elif tag == "body":
            self._in_body = False

    def handle_data(self, data):
        if self._skip_depth:
            return
        self.all_parts.append(data)
        if self._in_body:
            self.body_parts.append(data)


def extract_text(html: str) -> str:
    """
    Extract visible text from HTML.

    Body text is used when present, otherwise all text in the document.
    Whitespace is collapsed.
    """
    parser = _TextExtractor()
    parser.feed(html)
    parser.close()

    body_text = clean_text(" ".join(parser.body_parts))
    return body_text or clean_text(" ".join(parser.all_parts))


async def load_web_content(url: str, timeout: float = 30.0, client: httpx.AsyncClient = None) -> str:
    """
    Fetch a URL and return its cleaned text content.

    Args:
        url: Page to fetch
        timeout: Request timeout in seconds
        client: Optional shared HTTP client

    Returns:
        Cleaned text

    Raises:
        ContentLoadError: If the request fails or returns a non-2xx status
    """
    try:
        if client is None:
            async with httpx.AsyncClient(timeout=timeout, follow_redirects=True) as own_client:
                response = await own_client.get(url)
        else:
            response = await client.get(url)
        response.raise_for_status()
    except httpx.HTTPStatusError as e:
        raise ContentLoadError(
            f"Failed to fetch {url}: {e.response.status_code} {e.response.reason_phrase}"
        ) from e
    except httpx.HTTPError as e:
        raise ContentLoadError(f"Error loading web content: {str(e)}") from e

    text = extract_text(response.text)
    logger.info(f"Loaded {url}, extracted {len(text)} characters")
    return text
