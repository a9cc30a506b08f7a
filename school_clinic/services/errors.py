"""Service-layer exceptions, translated to HTTP statuses by the routers."""


class ClinicServiceError(Exception):
    """Base exception for domain service errors."""

    pass


class NotFoundError(ClinicServiceError):
    """Target record does not exist."""

    pass


class ReferentialIntegrityError(ClinicServiceError):
    """Store rejected the change on a foreign key (dependents exist or a reference is missing)."""

    pass


class DuplicateError(ClinicServiceError):
    """Unique value already taken (e.g. username)."""

    pass


class RosterFormatError(ClinicServiceError):
    """Uploaded roster file cannot be read or has no name column."""

    pass


class AuthenticationError(ClinicServiceError):
    """Login refused. status_code is 401 for credential failures, 403 for locked/inactive."""

    def __init__(self, message: str, status_code: int = 401):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class LastAdminError(ClinicServiceError):
    """Change would leave the store without an active Admin account."""

    pass
