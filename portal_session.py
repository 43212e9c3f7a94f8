"""
Portal Session - owns the authenticated browser context

Restores the saved Playwright storage state when it is still valid, otherwise
drives the FSUID/password login (plus the optional "Is this your device?"
prompt) and saves the fresh state for the next run.
"""

from enum import Enum
from pathlib import Path
from typing import Optional
import logging

from playwright.sync_api import (
    Browser,
    BrowserContext,
    Error as PlaywrightError,
    Page,
    TimeoutError as PlaywrightTimeoutError,
    sync_playwright,
)

from classwatch_config import Credentials, Timeouts
from classwatch_errors import LoginFlowError

logger = logging.getLogger(__name__)

LANDMARK_LINK = 'Student Central'
USERNAME_FIELD = 'FSUID'
PASSWORD_FIELD = 'Password'
SIGN_IN_BUTTON = 'Sign In'
DEVICE_PROMPT_HEADING = 'Is this your device?'
DEVICE_CONFIRM_BUTTON = 'Yes, this is my device'

VIEWPORT = {'width': 1280, 'height': 720}


class DeviceConfirmation(Enum):
    HANDLED = 'present-and-handled'
    ABSENT = 'absent'
    TIMED_OUT = 'timed-out'


class PortalSession:
    """Handles portal login and session storage for a single run"""

    def __init__(
            self,
            portal_url: str,
            credentials: Credentials,
            session_file: str,
            headless: bool = False,
            timeouts: Optional[Timeouts] = None):
        self.portal_url = portal_url
        self.credentials = credentials
        self.session_file = Path(session_file)
        self.headless = headless
        self.timeouts = timeouts or Timeouts()

        self.playwright = None
        self.browser: Optional[Browser] = None
        self.context: Optional[BrowserContext] = None
        self.page: Optional[Page] = None

    def start_browser(self):
        if self.browser is not None:
            return
        self.playwright = sync_playwright().start()
        self.browser = self.playwright.chromium.launch(headless=self.headless)
        logger.info("✅ Playwright browser initialized")

    # ---------------------- Context helpers ---------------------- #
    def _open_context(self, storage_state: Optional[Path] = None):
        self._discard_context()
        options = {'viewport': VIEWPORT}
        if storage_state is not None:
            options['storage_state'] = str(storage_state)
        self.context = self.browser.new_context(**options)
        self.page = self.context.new_page()

    def _discard_context(self):
        if self.context is None:
            return
        try:
            self.context.close()
        except PlaywrightError as e:
            logger.debug(f"Error closing context: {e}")
        self.context = None
        self.page = None

    def _landmark(self):
        return self.page.get_by_role('link', name=LANDMARK_LINK)

    def _save_session(self):
        try:
            self.session_file.parent.mkdir(parents=True, exist_ok=True)
            self.context.storage_state(path=str(self.session_file))
            logger.info(f"💾 Session state saved to {self.session_file}")
        except (PlaywrightError, OSError) as e:
            logger.error(f"Failed to save session: {e}")

    # ---------------------- Session flow ---------------------- #
    def establish_session(self) -> Page:
        """Return a page that is logged in to the portal"""
        self.credentials.validate()
        logger.info(f"Using FSUID: {self.credentials.username}")
        self.start_browser()

        if self._restore_session():
            return self.page
        self._full_login()
        return self.page

    def _restore_session(self) -> bool:
        if not self.session_file.exists():
            logger.info("🔐 No saved session, full login required")
            return False

        logger.info("🍪 Restoring saved session...")
        try:
            self._open_context(storage_state=self.session_file)
            self.page.goto(self.portal_url, wait_until='domcontentloaded')
        except PlaywrightError as e:
            logger.warning(f"⚠️ Saved session could not be loaded, logging in again: {e}")
            self._discard_context()
            return False

        try:
            self._landmark().wait_for(timeout=self.timeouts.session_probe_ms)
        except PlaywrightTimeoutError:
            logger.info("⌛ Saved session expired, falling back to full login")
            self._discard_context()
            return False
        except PlaywrightError as e:
            raise LoginFlowError(f"Could not check the saved session: {e}") from e

        logger.info("✅ Saved session still valid, skipping login")
        self._save_session()
        return True

    def _full_login(self):
        logger.info("Logging in...")
        if self.context is None:
            self._open_context()
        page = self.page
        try:
            page.goto(self.portal_url, wait_until='domcontentloaded')
            username_box = page.get_by_role('textbox', name=USERNAME_FIELD)
            username_box.click()
            username_box.fill(self.credentials.username)
            password_box = page.get_by_role('textbox', name=PASSWORD_FIELD)
            password_box.click()
            password_box.fill(self.credentials.password)
            page.get_by_role('button', name=SIGN_IN_BUTTON).click()
        except PlaywrightError as e:
            raise LoginFlowError(f"Could not complete the sign-in form: {e}") from e

        self.handle_device_confirmation()

        try:
            self._landmark().wait_for(timeout=self.timeouts.login_landmark_ms)
        except PlaywrightError as e:
            raise LoginFlowError(f"'{LANDMARK_LINK}' never appeared after signing in") from e

        logger.info("✅ Login confirmed")
        self._save_session()

    def handle_device_confirmation(self) -> DeviceConfirmation:
        """
        Wait (bounded) for the optional "Is this your device?" prompt.

        The prompt only shows up after the user approves the MFA push, and the
        portal may skip it entirely, so a missing prompt is not an error.
        """
        logger.info('Waiting for 2FA approval and "Is this your device?" prompt...')
        prompt = self.page.get_by_role('heading', name=DEVICE_PROMPT_HEADING)
        try:
            prompt.or_(self._landmark()).first.wait_for(timeout=self.timeouts.device_confirmation_ms)
        except PlaywrightTimeoutError:
            logger.info("Device confirmation prompt did not appear in time, checking for dashboard...")
            return DeviceConfirmation.TIMED_OUT

        if not prompt.is_visible():
            logger.info("No device confirmation prompt, already on the dashboard")
            return DeviceConfirmation.ABSENT

        logger.info('Found "Is this your device?" prompt. Clicking "Yes"...')
        try:
            self.page.get_by_role('button', name=DEVICE_CONFIRM_BUTTON).click()
        except PlaywrightError as e:
            raise LoginFlowError(f"Could not confirm this device: {e}") from e
        return DeviceConfirmation.HANDLED

    def clear_saved_session(self) -> bool:
        if self.session_file.exists():
            self.session_file.unlink()
            logger.info(f"🗑️ Removed saved session {self.session_file}")
            return True
        return False

    def screenshot(self, path: str) -> bool:
        if self.page is None:
            return False
        self.page.screenshot(path=path)
        return True

    def close(self):
        """Close browser resources safely"""
        self._discard_context()
        if self.browser is not None:
            try:
                self.browser.close()
            except PlaywrightError as e:
                logger.debug(f"Error closing browser: {e}")
            self.browser = None
        if self.playwright is not None:
            try:
                self.playwright.stop()
            except PlaywrightError as e:
                logger.debug(f"Error stopping playwright: {e}")
            self.playwright = None
        logger.info("🔒 Browser resources closed")
