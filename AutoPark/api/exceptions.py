"""Domain exceptions for parking sessions, rates and invoices."""


class ParkingError(Exception):
    """Base exception for the parking core."""

    code = "PARKING_ERROR"
    status_code = 400

    def __init__(self, message: str = None):
        super().__init__(message or self.__doc__)
        self.message = message or self.__doc__


class NoApplicableRate(ParkingError):
    """No active rate of the requested type exists for this lot."""

    code = "NO_APPLICABLE_RATE"
    status_code = 404


class LotFull(ParkingError):
    """The parking lot has no available spots."""

    code = "LOT_FULL"
    status_code = 409


class VehicleAlreadyParked(ParkingError):
    """The vehicle is already checked in."""

    code = "VEHICLE_ALREADY_PARKED"
    status_code = 409


class SessionNotFound(ParkingError):
    """No active parking session was found."""

    code = "SESSION_NOT_FOUND"
    status_code = 404


class InvalidDuration(ParkingError):
    """Exit time lies before entry time."""

    code = "INVALID_DURATION"
    status_code = 400


class LotNotFound(ParkingError):
    """Parking lot does not exist."""

    code = "LOT_NOT_FOUND"
    status_code = 404


class VehicleNotFound(ParkingError):
    """Vehicle does not exist."""

    code = "VEHICLE_NOT_FOUND"
    status_code = 404


class InvoiceNotFound(ParkingError):
    """Invoice does not exist."""

    code = "INVOICE_NOT_FOUND"
    status_code = 404


class RateConflict(ParkingError):
    """An active rate of this type already exists for the lot."""

    code = "RATE_CONFLICT"
    status_code = 409


class InvalidQRCode(ParkingError):
    """QR code could not be accepted."""

    code = "INVALID_QR_CODE"
    status_code = 400

    EXPIRED = "EXPIRED"
    INVALID_FORMAT = "INVALID_FORMAT"
    INVALID_HASH = "INVALID_HASH"

    def __init__(self, reason: str, message: str = None):
        super().__init__(message or f"QR code rejected: {reason}")
        self.reason = reason


class InvoiceAlreadyPaid(ParkingError):
    """Invoice has already been paid."""

    code = "INVOICE_ALREADY_PAID"
    status_code = 409
