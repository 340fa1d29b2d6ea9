from __future__ import annotations

import re
from collections.abc import Callable, Iterator
from urllib.parse import urljoin

from bs4 import BeautifulSoup, Tag

from study_monitor.core.config import settings
from study_monitor.crawlers import fields
from study_monitor.crawlers.base import NormalizedStudy, SourceAdapter
from study_monitor.crawlers.http_helpers import fetch_html, render_html

STUDY_LINK_PATTERN = re.compile(r"/projects/view/([a-f0-9]+)", re.IGNORECASE)
MAX_CARD_DEPTH = 6
LABEL_TAGS = ["span", "small", "li", "label", "em", "strong", "b", "i"]
HEADING_TAGS = ["h1", "h2", "h3", "h4", "h5", "h6"]
UNKNOWN_TITLE = "Unknown Study"


def _classes(el: Tag) -> list[str]:
    value = el.get("class") or []
    if isinstance(value, str):
        value = value.split()
    return [c.lower() for c in value]


# Tried in order; for each marker the nearest ancestor within MAX_CARD_DEPTH wins.
CARD_MARKERS: tuple[Callable[[Tag], bool], ...] = (
    lambda el: "project-card" in _classes(el),
    lambda el: "card" in _classes(el),
    lambda el: any("project" in c for c in _classes(el)),
    lambda el: any(k in str(el.get("data-testid") or "").lower() for k in ("project", "card")),
    lambda el: el.name in ("article", "li"),
)


def _ancestors(anchor: Tag) -> list[Tag]:
    chain: list[Tag] = []
    node = anchor.parent
    while isinstance(node, Tag) and node.name != "[document]" and len(chain) < MAX_CARD_DEPTH:
        chain.append(node)
        node = node.parent
    return chain


def find_card(anchor: Tag) -> Tag:
    chain = _ancestors(anchor)
    for marker in CARD_MARKERS:
        for node in chain:
            if marker(node):
                return node
    if len(chain) >= 2:
        return chain[1]
    if chain:
        return chain[0]
    return anchor


def _label_texts(card: Tag) -> list[str]:
    return [el.get_text(" ", strip=True) for el in card.find_all(LABEL_TAGS)]


def _title(anchor: Tag, card: Tag) -> str:
    title = " ".join(anchor.get_text(" ", strip=True).split())
    if title:
        return title[:512]
    heading = card.find(HEADING_TAGS)
    if heading:
        text = " ".join(heading.get_text(" ", strip=True).split())
        if text:
            return text[:512]
    return UNKNOWN_TITLE


def _description(card: Tag) -> str:
    para = card.find("p")
    return fields.clip_description(para.get_text(" ", strip=True)) if para else ""


def _safe(parser: Callable, default, *args):
    try:
        return parser(*args)
    except (ValueError, TypeError, AttributeError):
        return default


def build_study(anchor: Tag, external_id: str, base_url: str) -> NormalizedStudy:
    card = find_card(anchor)
    raw_text = card.get_text(" ", strip=True)
    normalized = fields.normalize_text(raw_text)
    tokens = fields.split_tokens(_label_texts(card))

    return NormalizedStudy(
        external_id=external_id,
        title=_safe(_title, UNKNOWN_TITLE, anchor, card),
        payout=_safe(fields.parse_payout, 0, raw_text),
        duration=_safe(fields.parse_duration, fields.DEFAULT_DURATION, raw_text),
        study_type=_safe(fields.parse_study_type, fields.DEFAULT_STUDY_TYPE, normalized, tokens),
        study_format=_safe(fields.parse_study_format, "", normalized, tokens),
        match_score=_safe(fields.parse_match_score, None, normalized),
        posted_at=_safe(fields.parse_posted_at, "", raw_text),
        link=urljoin(base_url, anchor.get("href", "")),
        description=_safe(_description, "", card),
    )


def iter_studies(html: str, base_url: str) -> Iterator[NormalizedStudy]:
    """Yield one candidate per distinct study link; first occurrence of an id wins."""

    soup = BeautifulSoup(html or "", "html.parser")
    seen: set[str] = set()
    for anchor in soup.find_all("a", href=True):
        match = STUDY_LINK_PATTERN.search(anchor.get("href") or "")
        if not match:
            continue
        external_id = match.group(1).lower()
        if external_id in seen:
            continue
        seen.add(external_id)
        yield build_study(anchor, external_id, base_url)


def extract_studies(html: str, base_url: str) -> list[NormalizedStudy]:
    return list(iter_studies(html, base_url))


class RespondentAdapter(SourceAdapter):
    source_name = "respondent"

    def __init__(self, listing_url: str | None = None, base_url: str | None = None, render_js: bool | None = None):
        self.listing_url = listing_url or settings.target_url
        self.base_url = base_url or settings.base_url
        self.render_js = settings.render_js if render_js is None else render_js

    def load_page(self) -> str:
        if self.render_js:
            return render_html(
                self.listing_url,
                timeout=settings.fetch_timeout_seconds,
                wait_selector=settings.wait_selector,
                wait_selector_timeout=settings.wait_selector_timeout_seconds,
                executable_path=settings.chromium_executable_path,
            )
        return fetch_html(self.listing_url, timeout=settings.fetch_timeout_seconds)

    def fetch(self) -> list[NormalizedStudy]:
        return extract_studies(self.load_page(), self.base_url)
