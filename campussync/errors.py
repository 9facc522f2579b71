"""Error taxonomy shared by the repositories, the router and the HTTP layer.

Repositories raise ``ConstraintViolation`` and ``StorageUnavailable``; the
router turns them into user-visible outcomes. ``AuthenticationRequired`` and
``AuthorizationDenied`` never reach the user as errors, the router reports
them as a redirect to the login page.
"""


class CampusSyncError(Exception):
    """Base class for every error raised by this package."""


class AuthFailure(CampusSyncError):
    """Submitted credentials did not match any account."""


class AuthenticationRequired(CampusSyncError):
    """No principal is attached to the request."""


class AuthorizationDenied(CampusSyncError):
    """A principal is attached but holds the wrong role."""


class ConstraintViolation(CampusSyncError):
    """Duplicate unique key or dangling reference on insert."""


class StorageUnavailable(CampusSyncError):
    """The underlying store failed for a reason other than a constraint."""


class MalformedInput(CampusSyncError):
    """Form input rejected before it reached the repository layer."""


class UnknownAction(MalformedInput):
    """A mutating request named an action the routing table does not know."""

    def __init__(self, action, method='POST'):
        super().__init__(f"Unknown {method} action: {action!r}")
        self.action = action
        self.method = method


class RequestFailed(CampusSyncError):
    """The current request was aborted because storage failed."""
