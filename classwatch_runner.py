"""
Run orchestrator - one linear pass from login to the saved status file
"""

import os
from datetime import datetime
from enum import Enum
from typing import Dict, Optional
import logging

from cart_extractor import CartExtractor
from cart_navigator import CartNavigator
from classwatch_config import AppConfig, Credentials
from course_models import StatusSnapshot
from email_notifier import EmailNotifier
from portal_session import PortalSession
from status_diff import NotificationPolicy, TransitionOutcome, build_message, classify, notify_eligible
from status_store import StatusStore

logger = logging.getLogger(__name__)


class RunState(Enum):
    INIT = 'Init'
    AUTHENTICATING = 'Authenticating'
    NAVIGATING = 'Navigating'
    EXTRACTING = 'Extracting'
    DIFFING = 'Diffing'
    NOTIFYING = 'Notifying'
    PERSISTING = 'Persisting'
    DONE = 'Done'
    FAILED = 'Failed'


class ClassWatchRunner:
    def __init__(
            self,
            config: AppConfig,
            credentials: Credentials,
            session: Optional[PortalSession] = None,
            store: Optional[StatusStore] = None,
            notifier: Optional[EmailNotifier] = None,
            extractor: Optional[CartExtractor] = None,
            navigator_cls=CartNavigator):
        self.config = config
        self.credentials = credentials
        if session is None:
            session = PortalSession(
                config.portal_url,
                credentials,
                config.session_file,
                headless=config.headless,
                timeouts=config.timeouts,
            )
        self.session = session
        self.store = store if store is not None else StatusStore(config.status_file)
        self.notifier = notifier if notifier is not None else EmailNotifier(config.email, credentials.resend_api_key)
        self.extractor = extractor if extractor is not None else CartExtractor()
        self.navigator_cls = navigator_cls
        self.policy = NotificationPolicy.ANY_CHANGE if config.notify_on_any_change else NotificationPolicy.OPEN_ONLY

        self.state = RunState.INIT
        self.outcomes: Dict[str, TransitionOutcome] = {}
        self.notifications_sent = 0

    def _enter(self, state: RunState):
        logger.info(f"➡️ {self.state.value} -> {state.value}")
        self.state = state

    def run(self) -> bool:
        """Execute one run; True when the new snapshot was persisted"""
        logger.info("Starting ClassWatch (Shopping Cart Mode)...")
        try:
            previous = self.store.load()

            self._enter(RunState.AUTHENTICATING)
            page = self.session.establish_session()

            self._enter(RunState.NAVIGATING)
            navigator = self.navigator_cls(page, self.config.term, settle_ms=self.config.timeouts.settle_ms)
            navigator.open_shopping_cart()
            html = navigator.read_cart_html()

            self._enter(RunState.EXTRACTING)
            current = self.extractor.extract_statuses(html)

            self._enter(RunState.DIFFING)
            self.outcomes = classify(previous, current)
            for crn, outcome in self.outcomes.items():
                logger.debug(f"{current[crn].name} ({crn}): {outcome.value}")

            self._enter(RunState.NOTIFYING)
            self._send_notifications(previous, current)

            self._enter(RunState.PERSISTING)
            self.store.save(current)

            self._enter(RunState.DONE)
            return True
        except Exception as e:
            self._enter(RunState.FAILED)
            logger.error(f"❌ Error during execution: {e}", exc_info=True)
            self._capture_failure_screenshot()
            return False
        finally:
            logger.info("Closing browser...")
            self.session.close()

    def _send_notifications(self, previous: StatusSnapshot, current: StatusSnapshot):
        for crn in notify_eligible(self.outcomes, self.policy):
            message = build_message(current[crn], self.outcomes[crn], previous.get(crn))
            logger.info(message)
            if self.notifier.notify(message):
                self.notifications_sent += 1
        if not self.outcomes:
            logger.info("No classes with a known status this run")

    def _capture_failure_screenshot(self) -> Optional[str]:
        timestamp = datetime.now().strftime('%Y%m%d_%H%M%S')
        path = os.path.join(self.config.screenshot_dir, f'error-{timestamp}.png')
        try:
            os.makedirs(self.config.screenshot_dir, exist_ok=True)
            if self.session.screenshot(path):
                logger.info(f"📸 Saved failure screenshot: {path}")
                return path
        except Exception as e:
            logger.debug(f"Screenshot failed: {e}")
        return None
