"""
Small text normalization helpers shared by the parser and the adapters.
"""

from __future__ import annotations

from typing import Any

from bs4 import BeautifulSoup


def clean(value: Any) -> str:
    """
    None -> '', everything else -> stripped str.
    """
    return "" if value is None else str(value).strip()


def plain_text(value: Any) -> str:
    """
    Descriptions coming from LMS feeds and calendar APIs are often HTML.
    Strip the markup but keep line breaks readable.
    """
    text = clean(value)
    if "<" not in text or ">" not in text:
        return text
    soup = BeautifulSoup(text, "html.parser")
    return soup.get_text("\n", strip=True)
