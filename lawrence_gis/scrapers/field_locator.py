"""
Declarative field lookups for property detail pages.

A ``FieldLocator`` names one way of finding a value: the cell following a
label cell (``label``) or the text of the first element matching a CSS
selector (``css``). Chains of locators are tried in order and the first
non-empty value wins.

All lookups run against a ``PageSnapshot`` gathered with a single in-page
evaluation, so the chains can be exercised without a browser.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable, Sequence

LABEL = "label"
CSS = "css"


@dataclass(frozen=True)
class FieldLocator:
    strategy: str
    target: str

    def resolve(self, snapshot: PageSnapshot) -> str | None:
        if self.strategy == LABEL:
            value = snapshot.label_cells.get(self.target)
        elif self.strategy == CSS:
            value = snapshot.selector_texts.get(self.target)
        else:
            raise ValueError(f"Unknown locator strategy: {self.strategy}")
        value = (value or "").strip()
        return value or None


def label(text: str) -> FieldLocator:
    return FieldLocator(LABEL, text)


def css(selector: str) -> FieldLocator:
    return FieldLocator(CSS, selector)


def first_match(locators: Iterable[FieldLocator], snapshot: PageSnapshot) -> str | None:
    for locator in locators:
        value = locator.resolve(snapshot)
        if value:
            return value
    return None


ACREAGE_LOCATORS = (
    label("Deeded Acres"),
    css('span[id*="Acre"]'),
    label("Acre"),
    label("Land"),
    label("Lot Size"),
    label("Total Acres"),
    css('span[id*="Land"]'),
    css('span[id*="Lot"]'),
)

ASSESSMENT_LOCATORS = (
    label("Assessment"),
    css('span[id*="Assessment"]'),
)

OWNER_LOCATORS = (
    css('span[id*="Owner"]'),
    label("Owner"),
)
# Only read on full detail pages; on other layouts it catches unrelated "*Name*" spans.
OWNER_NAME_SPAN = css('span[id*="Name"]')

LOCATION_LOCATOR = label("Location")

PARCEL_LOCATORS = (
    css('span[id*="Parcel"]'),
    css('span[id*="ID"]'),
)

CITY_LOCATORS = (
    label("City"),
    label("Municipality"),
    label("Township"),
    css('span[id*="City"]'),
    css('span[id*="Municipality"]'),
    css('span[id*="Township"]'),
)

ALL_LOCATORS = (
    *ACREAGE_LOCATORS,
    *ASSESSMENT_LOCATORS,
    *OWNER_LOCATORS,
    OWNER_NAME_SPAN,
    LOCATION_LOCATOR,
    *PARCEL_LOCATORS,
    *CITY_LOCATORS,
)

HEADING_SELECTOR = "h1, h2, h3, .large, .title"
BLOCK_SELECTOR = "div, span, p"
MAX_BLOCKS = 10


@dataclass
class PageSnapshot:
    label_cells: dict[str, str] = field(default_factory=dict)
    selector_texts: dict[str, str] = field(default_factory=dict)
    headings: list[str] = field(default_factory=list)
    blocks: list[str] = field(default_factory=list)
    body_text: str = ""
    html: str = ""

    @classmethod
    def from_payload(cls, payload: dict[str, Any] | None) -> PageSnapshot:
        payload = payload or {}
        return cls(
            label_cells=dict(payload.get("labelCells") or {}),
            selector_texts=dict(payload.get("selectorTexts") or {}),
            headings=list(payload.get("headings") or []),
            blocks=list(payload.get("blocks") or []),
            body_text=payload.get("bodyText") or "",
            html=payload.get("html") or "",
        )


# Runs inside the document. Label lookups use XPath over td text nodes.
SNAPSHOT_SCRIPT = """
({labels, selectors, headingSelector, blockSelector, maxBlocks}) => {
    const textOf = (el) => (el && el.textContent ? el.textContent.trim() : '');
    const labelCells = {};
    for (const text of labels) {
        const escaped = text.replace(/"/g, '&quot;').replace(/'/g, '&apos;');
        const xpath = `//td[contains(text(), "${escaped}")]/following-sibling::td[1]`;
        const result = document.evaluate(xpath, document, null, XPathResult.FIRST_ORDERED_NODE_TYPE, null);
        labelCells[text] = textOf(result.singleNodeValue);
    }
    const selectorTexts = {};
    for (const selector of selectors) {
        selectorTexts[selector] = textOf(document.querySelector(selector));
    }
    const headings = Array.from(document.querySelectorAll(headingSelector)).map(textOf);
    const blocks = Array.from(document.querySelectorAll(blockSelector)).slice(0, maxBlocks).map(textOf);
    return {
        labelCells,
        selectorTexts,
        headings,
        blocks,
        bodyText: document.body ? document.body.textContent || '' : '',
        html: document.documentElement ? document.documentElement.innerHTML : '',
    };
}
"""


def snapshot_arguments(locators: Sequence[FieldLocator] = ALL_LOCATORS) -> dict[str, Any]:
    return {
        "labels": sorted({loc.target for loc in locators if loc.strategy == LABEL}),
        "selectors": sorted({loc.target for loc in locators if loc.strategy == CSS}),
        "headingSelector": HEADING_SELECTOR,
        "blockSelector": BLOCK_SELECTOR,
        "maxBlocks": MAX_BLOCKS,
    }


async def take_snapshot(page, locators: Sequence[FieldLocator] = ALL_LOCATORS) -> PageSnapshot:
    """Collect every value the locator chains need in one round trip."""
    payload = await page.evaluate(SNAPSHOT_SCRIPT, snapshot_arguments(locators))
    return PageSnapshot.from_payload(payload)
