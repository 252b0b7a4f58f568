"""
Domain Exceptions

Error taxonomy shared by all apps. Services and models raise these; the API
layer (``shared.api.exception_handler``) renders them with the HTTP status
and machine-readable code carried by each class.
"""

from __future__ import annotations


class DomainError(Exception):
    """Base class for errors raised by domain code."""

    status_code = 400
    default_code = "error"
    default_message = "Request could not be processed."

    def __init__(self, message: str | None = None, *, code: str | None = None):
        self.message = message or self.default_message
        self.code = code or self.default_code
        super().__init__(self.message)


# ===== 400 =====

class ValidationError(DomainError):
    """Malformed or missing input, correctable by the caller."""

    status_code = 400
    default_code = "validation_error"
    default_message = "Invalid input."


class InvalidDateRange(ValidationError):
    default_code = "invalid_date_range"
    default_message = "Check-out date must be after check-in date and check-in cannot be in the past."


class PriceMismatch(ValidationError):
    default_code = "price_mismatch"
    default_message = "Submitted total price does not match the current price."


# ===== 403 =====

class AuthorizationError(DomainError):
    status_code = 403
    default_code = "not_authorized"
    default_message = "You are not allowed to perform this action."


# ===== 404 =====

class NotFoundError(DomainError):
    status_code = 404
    default_code = "not_found"
    default_message = "Resource not found."


class HotelNotFound(NotFoundError):
    default_code = "hotel_not_found"
    default_message = "Hotel not found."


class RoomNotFound(NotFoundError):
    default_code = "room_not_found"
    default_message = "Room not found."


class BookingNotFound(NotFoundError):
    default_code = "booking_not_found"
    default_message = "Booking not found."


# ===== 409 =====

class ConflictError(DomainError):
    status_code = 409
    default_code = "conflict"
    default_message = "Request conflicts with the current state."


class RoomNotAvailable(ConflictError):
    # The booking endpoint reports lost availability as a bad request.
    status_code = 400
    default_code = "room_not_available"
    default_message = "Selected room is no longer available for the chosen dates."


class NoRoomAvailable(ConflictError):
    status_code = 400
    default_code = "no_room_available"
    default_message = "No available rooms of the requested type."


class DuplicateRoomNumber(ConflictError):
    default_code = "duplicate_room_number"
    default_message = "Room number already exists in this hotel."


class AlreadyRequested(ConflictError):
    default_code = "refund_already_requested"
    default_message = "There is already a pending refund request for this booking."


class InvalidTransition(ConflictError):
    default_code = "invalid_transition"
    default_message = "Booking cannot move to the requested state."


# ===== 5xx =====

class ExternalServiceError(DomainError):
    """A payment, e-mail or SMS provider call failed."""

    status_code = 502
    default_code = "external_service_error"
    default_message = "External service is unavailable. Please try again later."


class InternalError(DomainError):
    status_code = 500
    default_code = "internal_error"
    default_message = "Internal server error."
