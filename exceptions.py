"""
Domain errors raised by the helper layer and turned into JSON by the routes.
"""


class MembershipError(Exception):
    status_code = 500

    def __init__(self, message, status_code=None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code

    def to_response(self):
        return {"error": self.message}


class ValidationFailed(MembershipError):
    status_code = 400

    def __init__(self, errors, message="Validation failed"):
        super().__init__(message)
        self.errors = errors

    def to_response(self):
        return {"errors": self.errors}


class NotFoundError(MembershipError):
    status_code = 404


class ConflictError(MembershipError):
    status_code = 400


class CapacityError(MembershipError):
    status_code = 400


class AuthError(MembershipError):
    status_code = 401


class ForbiddenError(MembershipError):
    status_code = 403
