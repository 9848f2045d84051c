"""Error taxonomy for the POS backend."""
import enum


class ErrorKind(enum.Enum):
    """Outcome kinds a ledger operation can fail with."""
    VALIDATION = 'validation'
    NOT_FOUND = 'not_found'
    CONFLICT = 'conflict'
    INTERNAL = 'internal'


class PosError(Exception):
    """Base exception for all application errors."""
    kind = ErrorKind.INTERNAL

    def __init__(self, message="Ocurrió un error interno", status_code=500, payload=None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.payload = payload

    def to_dict(self):
        rv = dict(self.payload or ())
        rv['error'] = self.message
        return rv


class ValidationError(PosError):
    """Malformed, missing or non-positive input. Raised before any write."""
    kind = ErrorKind.VALIDATION

    def __init__(self, message, payload=None):
        super().__init__(message, 400, payload)


class NotFoundError(PosError):
    """Referenced product or quotation does not exist (or is inactive)."""
    kind = ErrorKind.NOT_FOUND

    def __init__(self, message="Recurso no encontrado", payload=None):
        super().__init__(message, 404, payload)


class ConflictError(PosError):
    """Operation is well-formed but clashes with the current ledger state."""
    kind = ErrorKind.CONFLICT

    def __init__(self, message, payload=None):
        super().__init__(message, 409, payload)


class InsufficientStockError(ConflictError):
    """Raised when a sale asks for more units than are on hand."""
    def __init__(self, product_name, requested, available):
        self.requested = requested
        self.available = available
        message = f'Stock insuficiente para "{product_name}". Disponible: {available}'
        super().__init__(message, payload={'disponible': available, 'solicitado': requested})


class InternalError(PosError):
    """Storage failure. The message stays generic; details go to the log."""
    kind = ErrorKind.INTERNAL

    def __init__(self, message="Error interno del servidor"):
        super().__init__(message, 500)
