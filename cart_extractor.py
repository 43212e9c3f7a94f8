"""
Shopping cart extraction - turns the rendered cart markup into a status snapshot

The cart's DOM structure shifts between portal deployments while its visible and
accessible text stays stable, so rows are located by a ranked chain of
strategies and fields are read from the row text with regexes.
"""

import re
from typing import List, Optional, Sequence
import logging

from bs4 import BeautifulSoup
from bs4.element import Tag

from classwatch_errors import ExtractionRowError
from course_models import (
    UNKNOWN_COURSE_NAME,
    CourseState,
    CourseStatus,
    StatusSnapshot,
    freeze_snapshot,
)

logger = logging.getLogger(__name__)

CRN_PATTERN = re.compile(r'\(\s*(\d{4,5})\s*\)')
COURSE_NAME_PATTERN = re.compile(r'[A-Z]{3}\s+\d{4}[-\w]*')
CART_LABEL_PATTERN = re.compile(r'shopping\s+cart', re.IGNORECASE)
ROW_ACTION_PATTERN = re.compile(r'^\s*delete\b', re.IGNORECASE)

# Whole-label match for screen reader text, e.g. "Open" or "Status: Wait List"
ACCESSIBLE_STATE_PATTERN = re.compile(
    r'^\s*(?:status\s*:?\s*)?(open|closed|wait\s*-?\s*list(?:ed)?)\s*$', re.IGNORECASE)
ACCESSIBLE_TEXT_SELECTOR = '.sr-only, .visually-hidden, .screen-reader-text, [hidden]'

# Icon alt/title text or file names such as PS_CS_STATUS_OPEN_ICN.gif
ICON_STATE_PATTERNS = [
    (CourseState.WAITLIST, re.compile(r'(?<![a-z])wait[\s_-]*list', re.IGNORECASE)),
    (CourseState.CLOSED, re.compile(r'(?<![a-z])closed(?![a-z])', re.IGNORECASE)),
    (CourseState.OPEN, re.compile(r'(?<![a-z])open(?![a-z])', re.IGNORECASE)),
]

HEADING_TAGS = ['caption', 'h1', 'h2', 'h3', 'h4', 'h5', 'h6', 'span', 'div', 'td', 'th', 'label']


def _innermost_rows(rows: Sequence[Tag]) -> List[Tag]:
    """Drop rows that only wrap other candidate rows (nested layout tables)"""
    candidates = set(id(row) for row in rows)
    innermost = []
    for row in rows:
        if any(id(inner) in candidates for inner in row.find_all('tr')):
            continue
        innermost.append(row)
    return innermost


class CartTableStrategy:
    """Rows of the table wrapped in the region labelled "Shopping Cart" """
    name = 'cart-table'

    def _find_cart_table(self, soup: BeautifulSoup) -> Optional[Tag]:
        for attr in ('aria-label', 'title', 'summary'):
            for region in soup.find_all(attrs={attr: CART_LABEL_PATTERN}):
                if region.name == 'iframe':
                    continue
                table = region if region.name == 'table' else region.find('table')
                if table is not None:
                    return table

        # Visible header such as "2026 Spring Shopping Cart"; the last one is the cart grid
        headers = [
            el for el in soup.find_all(HEADING_TAGS)
            if CART_LABEL_PATTERN.search(el.get_text(' ', strip=True) or '')
            and not el.find(HEADING_TAGS)
        ]
        for header in reversed(headers):
            if header.name == 'caption' and header.parent is not None and header.parent.name == 'table':
                return header.parent
            table = header.find_next('table')
            if table is not None:
                return table
        return None

    def find_rows(self, soup: BeautifulSoup) -> List[Tag]:
        table = self._find_cart_table(soup)
        if table is None:
            logger.debug("Shopping cart anchor not found")
            return []
        rows = [row for row in table.find_all('tr') if row.find('td')]
        return _innermost_rows(rows)


class ActionButtonRowStrategy:
    """Any row carrying the per-row "Delete" control only cart rows have"""
    name = 'delete-button-rows'

    @staticmethod
    def _is_row_action(control: Tag) -> bool:
        labels = [
            control.get_text(' ', strip=True),
            control.get('value') or '',
            control.get('aria-label') or '',
            control.get('title') or '',
            control.get('alt') or '',
        ]
        # Image buttons take their name from the icon's alt text
        labels.extend(img.get('alt') or '' for img in control.find_all('img'))
        return any(ROW_ACTION_PATTERN.search(label) for label in labels if label)

    def find_rows(self, soup: BeautifulSoup) -> List[Tag]:
        rows = []
        for row in soup.find_all('tr'):
            controls = row.find_all(['button', 'input', 'a'])
            if any(self._is_row_action(control) for control in controls):
                rows.append(row)
        return _innermost_rows(rows)


def _accessible_state(row: Tag) -> Optional[CourseState]:
    labels = []
    for el in row.find_all(attrs={'aria-label': True}):
        if el.name != 'img':
            labels.append(el['aria-label'])
    labels.extend(el.get_text(' ', strip=True) for el in row.select(ACCESSIBLE_TEXT_SELECTOR))
    for label in labels:
        match = ACCESSIBLE_STATE_PATTERN.match(label or '')
        if match:
            return CourseState.parse(match.group(1))
    return None


def _icon_state(row: Tag) -> Optional[CourseState]:
    for img in row.find_all('img'):
        hints = ' '.join(filter(None, [img.get('alt'), img.get('title'), img.get('src')]))
        for state, pattern in ICON_STATE_PATTERNS:
            if pattern.search(hints):
                return state
    return None


def parse_row(row: Tag) -> CourseStatus:
    """Derive (crn, name, state) from one cart row; raises ExtractionRowError when it has no CRN"""
    text = row.get_text(' ', strip=True)
    crn_match = CRN_PATTERN.search(text)
    if not crn_match:
        raise ExtractionRowError(f"No CRN in row text: {text[:80]!r}")

    state = _accessible_state(row) or _icon_state(row) or CourseState.UNKNOWN
    name_match = COURSE_NAME_PATTERN.search(text)
    return CourseStatus(
        crn=crn_match.group(1),
        name=name_match.group(0) if name_match else UNKNOWN_COURSE_NAME,
        state=state,
    )


class CartExtractor:
    """Runs the row strategies in rank order until one produces statuses"""

    def __init__(self, strategies=None):
        self.strategies = strategies if strategies is not None else [
            CartTableStrategy(),
            ActionButtonRowStrategy(),
        ]

    def _parse_rows(self, rows: List[Tag]) -> StatusSnapshot:
        statuses = []
        for row in rows:
            try:
                status = parse_row(row)
            except ExtractionRowError as e:
                logger.debug(f"Skipping row: {e}")
                continue
            except Exception as e:
                logger.warning(f"Error parsing row: {e}")
                continue
            logger.info(f"Found: {status.name} ({status.crn}) - {status.state.value}")
            statuses.append(status)
        return freeze_snapshot(statuses)

    def extract_statuses(self, html: str) -> StatusSnapshot:
        soup = BeautifulSoup(html or '', 'html.parser')
        for strategy in self.strategies:
            rows = strategy.find_rows(soup)
            logger.debug(f"Strategy {strategy.name}: {len(rows)} candidate rows")
            if not rows:
                continue
            snapshot = self._parse_rows(rows)
            if snapshot:
                logger.info(f"🛒 Found {len(snapshot)} classes in the cart (strategy: {strategy.name})")
                return snapshot
        logger.warning("⚠️ No classes found in the shopping cart")
        return freeze_snapshot([])
