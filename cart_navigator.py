"""
Scripted navigation from the portal dashboard into the shopping cart
"""

import re
import logging

from playwright.sync_api import Error as PlaywrightError, Page

from classwatch_errors import NavigationError

logger = logging.getLogger(__name__)

NAVIGATION_LINKS = ('Student Central', 'My Classes', 'Enrollment: Add Classes')
MAIN_FRAME_SELECTOR = 'iframe[title="Main Content"]'
CONTINUE_BUTTON = 'Continue'


class CartNavigator:
    def __init__(self, page: Page, term: str, settle_ms: int = 5000):
        self.page = page
        self.term = term
        self.settle_ms = settle_ms

    def open_shopping_cart(self):
        """Click through to Add Classes, pick the term and wait for the cart to render"""
        logger.info("Navigating to Add Classes...")
        try:
            for link in NAVIGATION_LINKS:
                logger.debug(f"Clicking link: {link}")
                self.page.get_by_role('link', name=link).click()

            logger.info(f"Selecting term: {self.term}")
            frame = self.page.frame_locator(MAIN_FRAME_SELECTOR)
            # The radio's accessible name reads like "Select a term... Select 2026 Spring"
            frame.get_by_role('radio', name=re.compile(self.term, re.IGNORECASE)).check()
            frame.get_by_role('button', name=CONTINUE_BUTTON).click()
        except PlaywrightError as e:
            raise NavigationError(f"Could not reach the shopping cart: {e}") from e

        self.page.wait_for_timeout(self.settle_ms)

    def read_cart_html(self) -> str:
        """Markup of the main content frame, or the whole page when there is no frame"""
        try:
            handle = self.page.query_selector(MAIN_FRAME_SELECTOR)
            frame = handle.content_frame() if handle else None
            if frame is None:
                logger.debug("Main content frame not found, reading the page itself")
                return self.page.content()
            return frame.content()
        except PlaywrightError as e:
            raise NavigationError(f"Could not read the shopping cart: {e}") from e
