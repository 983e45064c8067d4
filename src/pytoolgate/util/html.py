from __future__ import annotations

from html.parser import HTMLParser

from bs4 import BeautifulSoup
from markdownify import markdownify as to_markdown


class _HTMLTextExtractor(HTMLParser):
    def __init__(self) -> None:
        super().__init__()
        self._parts: list[str] = []
        self._skip_depth = 0

    def handle_starttag(self, tag: str, attrs):  # type: ignore[override]
        if tag.lower() in {"script", "style", "noscript"}:
            self._skip_depth += 1

    def handle_endtag(self, tag: str):  # type: ignore[override]
        if tag.lower() in {"script", "style", "noscript"} and self._skip_depth > 0:
            self._skip_depth -= 1

    def handle_data(self, data: str):  # type: ignore[override]
        if self._skip_depth > 0:
            return
        text = data.strip()
        if text:
            self._parts.append(text)

    def text(self) -> str:
        # one space between every word, no line structure kept
        return " ".join(" ".join(self._parts).split())


def html_to_text(html: str) -> str:
    parser = _HTMLTextExtractor()
    parser.feed(html)
    parser.close()
    return parser.text()


def html_to_markdown(html: str) -> str:
    return to_markdown(html, heading_style="ATX").strip()


def extract_body(html: str) -> str:
    """Inner HTML of <body> in a minimal envelope; input unchanged when there is no body."""
    soup = BeautifulSoup(html, "html.parser")
    body = soup.body
    if body is None:
        return html
    return f"<html>\n<body>\n{body.decode_contents()}\n</body>\n</html>"
