"""Custom exceptions for the back-office application."""

CONNECTION_ERROR_MESSAGE = 'Erreur de connexion au serveur'


class BackofficeError(Exception):
    """Base exception for all application errors."""
    def __init__(self, message="Une erreur interne est survenue", status_code=500, payload=None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.payload = payload

    def to_dict(self):
        rv = dict(self.payload or ())
        rv['message'] = self.message
        rv['status'] = 'error'
        return rv

class ValidationError(BackofficeError):
    """Raised when user input fails a local check. Nothing was sent to the backend."""
    def __init__(self, message, status_code=400, payload=None):
        super().__init__(message, status_code, payload)

class InsufficientPaymentError(ValidationError):
    """Raised when the amount paid does not cover the sale total."""
    def __init__(self, total, amount_paid=None):
        from backoffice.utils.formatters import plain_amount
        self.total = total
        self.amount_paid = amount_paid
        message = f"Montant insuffisant. Total: {plain_amount(total)} GNF"
        super().__init__(message, payload={'total': plain_amount(total)})

class TransportError(BackofficeError):
    """Raised when the backend cannot be reached or answers garbage."""
    def __init__(self, message=CONNECTION_ERROR_MESSAGE):
        super().__init__(message, 502)

class ApiError(BackofficeError):
    """Raised when the backend rejects a request (success flag false)."""
    def __init__(self, message, status_code=422, payload=None):
        super().__init__(message, status_code, payload)

class NotFoundError(BackofficeError):
    """Exception raised when a resource is not found."""
    def __init__(self, message="Ressource introuvable", payload=None):
        super().__init__(message, 404, payload)

class UnauthorizedError(BackofficeError):
    """Raised when the session carries no usable token."""
    def __init__(self, message="Authentification requise"):
        super().__init__(message, 401)
