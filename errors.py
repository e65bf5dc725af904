# errors.py
"""Error taxonomy shared by the services and the HTTP layer.

Every error carries the status code and the message shown to the caller.
Services raise these; form routes catch them and re-display the form, the
rest reach the app-level handler registered in app.py.
"""


class PortalError(Exception):
    status_code = 400
    message = "Request failed"

    def __init__(self, message=None):
        super().__init__(message or self.message)
        if message:
            self.message = message


class ValidationError(PortalError):
    message = "Missing fields"


class InvalidCredentials(PortalError):
    status_code = 401
    message = "Invalid credentials"


class CaptchaMismatch(PortalError):
    message = "Incorrect answer to the security question"


class UsernameTaken(PortalError):
    status_code = 409
    message = "Username already taken"


class Unauthenticated(PortalError):
    """Raised when the session is not bound to the required role.

    `role` names the login page the caller should be sent to.
    """
    status_code = 401
    message = "Please log in"

    def __init__(self, role="student", message=None):
        super().__init__(message)
        self.role = role


class Unauthorized(PortalError):
    status_code = 403
    message = "Insufficient permissions"


class NotFound(PortalError):
    status_code = 404
    message = "Not found"


class InvalidStateTransition(PortalError):
    status_code = 409
    message = "Request has already been processed"


class StorageError(PortalError):
    status_code = 500
    message = "Could not complete the request"
