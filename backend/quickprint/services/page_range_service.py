# Overview: Parses customer page selections ("1-5, 7, 10-12") into page counts.

from __future__ import annotations

import re

from ..validation import ValidationError


ALL_PAGES = "all"

_SINGLE_PAGE = re.compile(r"^\d+$")
_PAGE_SPAN = re.compile(r"^(\d+)-(\d+)$")


def parse_page_spans(expression: str, total_pages: int) -> list[tuple[int, int]]:
    """
    Parse a page-selection expression into inclusive (start, end) spans.

    Accepted tokens, separated by commas (whitespace around tokens is ignored):
    - "7"      -> (7, 7)
    - "10-12"  -> (10, 12)

    Raises:
        ValidationError: empty expression, unknown token, page outside
        [1, total_pages], or a span whose start is after its end.

    Overlapping spans are not merged; "1-3,2" selects four pages, the
    same way the shop counts sheets to print.
    """
    if expression is None or not expression.strip():
        raise ValidationError("Please specify a page range", field="pages")

    spans: list[tuple[int, int]] = []
    for token in expression.split(","):
        token = token.strip()
        if _SINGLE_PAGE.match(token):
            start = end = int(token)
        else:
            match = _PAGE_SPAN.match(token)
            if not match:
                raise ValidationError(
                    "Invalid page format. Use format like: 1-5, 7, 10-12",
                    field="pages",
                )
            start, end = int(match.group(1)), int(match.group(2))
            if start > end:
                raise ValidationError(
                    f"Invalid page range '{token}': start page is after end page",
                    field="pages",
                )

        if start < 1 or end > total_pages:
            raise ValidationError(
                f"Page numbers must be between 1 and {total_pages}",
                field="pages",
            )
        spans.append((start, end))

    return spans


def count_pages(expression: str, total_pages: int) -> int:
    """Number of pages selected by `expression` ("all" selects every page)."""
    if expression == ALL_PAGES:
        return total_pages
    return sum(end - start + 1 for start, end in parse_page_spans(expression, total_pages))
