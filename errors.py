class RailwayError(Exception):
    status_code = 400

    def __init__(self, message):
        super().__init__(message)
        self.message = message

    def to_dict(self):
        return {"status": "error", "message": self.message}


class ValidationError(RailwayError):
    status_code = 400


class PermissionDenied(RailwayError):
    status_code = 403


class NotFoundError(RailwayError):
    status_code = 404


class BookingConflict(RailwayError):
    """The request is valid but the booking's current state forbids it."""
    status_code = 409
