"""Failure taxonomy shared by the auth, catalog and order layers.

Each error knows the HTTP status it maps to; the app renders it as
``{"message": ...}`` so no domain failure escapes a request.
"""


class MarketplaceError(Exception):
    status_code = 400
    message = "Bad request"

    def __init__(self, message: str | None = None):
        self.message = message or self.message
        super().__init__(self.message)


class Unauthenticated(MarketplaceError):
    status_code = 401
    message = "No token provided"


class InvalidToken(MarketplaceError):
    status_code = 401
    message = "Invalid token"


class Forbidden(MarketplaceError):
    status_code = 403
    message = "Forbidden"


class DuplicateEmail(MarketplaceError):
    message = "User already exists"


class UserNotFound(MarketplaceError):
    message = "User not found"


class InvalidCredentials(MarketplaceError):
    message = "Invalid credentials"
