from __future__ import annotations

from bs4 import BeautifulSoup

from study_monitor.crawlers.adapters.respondent import extract_studies, find_card
from study_monitor.crawlers.base import NormalizedStudy

BASE_URL = "https://app.respondent.io"

LISTING_HTML = """
<html><body>
  <nav><a href="/respondents/v2/projects/browse">Browse</a></nav>
  <div class="grid">
    <div class="project-card">
      <a href="/respondents/v2/projects/view/abc123">Fintech app feedback session</a>
      <span>Remote • Unmoderated • 30 min</span>
      <span>$150</span>
      <small>Posted 2 hours ago</small>
      <small>92% match</small>
      <p>Share how you manage   your monthly budget.</p>
    </div>
    <div class="project-card">
      <a href="/respondents/v2/projects/view/def456">Grocery shopping habits</a>
      <span>In‑person</span>
      <span>Focus group</span>
      <span>$50 to $200</span>
      <span>1 hour</span>
    </div>
  </div>
</body></html>
"""


def _by_id(studies: list[NormalizedStudy]) -> dict[str, NormalizedStudy]:
    return {s.external_id: s for s in studies}


def test_extracts_one_candidate_per_card():
    studies = _by_id(extract_studies(LISTING_HTML, BASE_URL))

    assert set(studies) == {"abc123", "def456"}

    first = studies["abc123"]
    assert first.title == "Fintech app feedback session"
    assert first.payout == 150
    assert first.duration == "30 min"
    assert first.study_type == "Remote"
    assert first.study_format == "Unmoderated"
    assert first.match_score == 92
    assert first.posted_at == "2 hours ago"
    assert first.link == "https://app.respondent.io/respondents/v2/projects/view/abc123"
    assert first.description == "Share how you manage your monthly budget."


def test_dash_variants_and_payout_ranges():
    second = _by_id(extract_studies(LISTING_HTML, BASE_URL))["def456"]

    assert second.study_type == "In-Person"
    assert second.study_format == "Focus Group"
    assert second.payout == 200
    assert second.duration == "1 hour"
    assert second.match_score is None
    assert second.posted_at == ""
    assert second.description == ""


def test_repeated_link_yields_single_candidate():
    html = """
    <div class="card"><a href="/projects/view/aaa111">First</a><span>$10</span></div>
    <div class="card"><a href="/projects/view/AAA111">Again</a><span>$99</span></div>
    """
    studies = extract_studies(html, BASE_URL)

    assert len(studies) == 1
    assert studies[0].external_id == "aaa111"
    assert studies[0].title == "First"
    assert studies[0].payout == 10


def test_links_without_identifier_are_skipped():
    html = """
    <div class="card"><a href="/projects/view/">Broken</a></div>
    <div class="card"><a href="/projects/view/xyz">Not hex</a></div>
    <div class="card"><a href="/settings">Settings</a></div>
    """
    assert extract_studies(html, BASE_URL) == []


def test_empty_or_malformed_html_yields_nothing():
    assert extract_studies("", BASE_URL) == []
    assert extract_studies("<div><span>no studies here", BASE_URL) == []


def test_missing_anchor_text_falls_back_to_heading_then_unknown():
    html = """
    <div class="card"><h3>Sleep tracking study</h3><a href="/projects/view/b0b0"><img src="x.png"/></a></div>
    <div class="card"><a href="/projects/view/c0c0"></a></div>
    """
    studies = _by_id(extract_studies(html, BASE_URL))

    assert studies["b0b0"].title == "Sleep tracking study"
    assert studies["c0c0"].title == "Unknown Study"
    assert studies["c0c0"].payout == 0
    assert studies["c0c0"].duration == "Unknown"
    assert studies["c0c0"].study_type == "Unknown"


def test_card_falls_back_to_grandparent_without_markers():
    html = """
    <section>
      <div id="outer">
        <div id="inner"><a href="/projects/view/d00d">Plain markup</a></div>
        <b>$75</b>
      </div>
    </section>
    """
    studies = extract_studies(html, BASE_URL)

    assert len(studies) == 1
    assert studies[0].payout == 75


def test_nearest_marked_ancestor_is_the_card():
    soup = BeautifulSoup(
        '<div class="card" id="outer"><div class="card" id="inner"><a href="/projects/view/e1">x</a></div></div>',
        "html.parser",
    )
    card = find_card(soup.find("a"))

    assert card.get("id") == "inner"


def test_description_is_clipped():
    html = f'<div class="card"><a href="/projects/view/f00">Long</a><p>{"word " * 200}</p></div>'
    study = extract_studies(html, BASE_URL)[0]

    assert len(study.description) == 500
