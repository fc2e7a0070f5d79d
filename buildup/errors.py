"""Domain errors surfaced to API callers as ``{"success": false, "error": ...}``."""


class ServiceError(Exception):
    status_code = 400
    message = "Request failed"

    def __init__(self, message=None):
        super().__init__(message or self.message)
        self.message = message or self.message


class ValidationError(ServiceError):
    status_code = 400
    message = "Invalid request"


class InvalidPlan(ValidationError):
    message = "Invalid plan selected"


class NotFoundError(ServiceError):
    status_code = 400
    message = "Not found"


class OrderNotFound(NotFoundError):
    message = "No payment record found for this order"


class NoValidPayment(NotFoundError):
    message = "No valid payment record found"


class UserNotFound(NotFoundError):
    status_code = 404
    message = "User not found"


class InvalidSignature(ServiceError):
    status_code = 400
    message = "Invalid signature"


class AuthError(ServiceError):
    status_code = 401
    message = "Not authenticated"


class InvalidCredentials(AuthError):
    message = "Invalid email or password"


class InvalidToken(AuthError):
    message = "Invalid or missing token"


class MembershipInactive(AuthError):
    status_code = 403
    message = "Your membership has expired"


class ConflictError(ServiceError):
    status_code = 409
    message = "Conflict"


class UserExists(ConflictError):
    message = "User with this email already exists"


class AlreadyFinalized(ConflictError):
    message = "Payment has already been processed"


class ProviderError(ServiceError):
    # detail stays in the logs, callers only see the generic message
    status_code = 500
    message = "Payment provider error"


class DatabaseError(ServiceError):
    status_code = 500
    message = "Internal server error"
