"""
Error types raised across the ClassWatch run
"""


class ClassWatchError(Exception):
    """Base class for every ClassWatch failure"""


class ConfigurationError(ClassWatchError):
    """Config file or environment is unusable, no run is attempted"""


class AuthenticationError(ConfigurationError):
    """Portal credentials are missing or still the placeholder"""


class LoginFlowError(ClassWatchError):
    """The login page could not be driven to the post-login landmark"""


class NavigationError(ClassWatchError):
    """An expected link or control on the way to the shopping cart is missing"""


class ExtractionRowError(ClassWatchError):
    """A single cart row could not be parsed, only that row is skipped"""


class NotificationTransportError(ClassWatchError):
    """The email endpoint could not be reached or rejected the message"""
