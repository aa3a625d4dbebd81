# techfolio/core/domain/exceptions.py
class DomainError(Exception):
    """Base class for all domain-level exceptions."""
    code = "domain_error"

    def __init__(self, message: str):
        self.message = message
        super().__init__(self.message)

# --- Entity Not Found Errors ---

class NotFoundError(DomainError):
    """Raised when a referenced entity does not exist."""
    code = "not_found"

class CategoryNotFoundError(NotFoundError):
    def __init__(self, category_id: str):
        self.category_id = category_id
        super().__init__(f"Category '{category_id}' not found.")

class ContentNotFoundError(NotFoundError):
    def __init__(self, item_id: str):
        self.item_id = item_id
        super().__init__(f"Content item '{item_id}' not found.")

# --- Uniqueness / Blocking Errors ---

class ConflictError(DomainError):
    """Raised on a uniqueness violation or a blocked deletion."""
    code = "conflict"

class SlugConflictError(ConflictError):
    def __init__(self, slug: str, scope: str):
        self.slug = slug
        super().__init__(f"Slug '{slug}' is already in use ({scope}).")

# --- State / Structure Errors ---

class InvalidOperationError(DomainError):
    """Raised on an illegal state transition or an illegal structural move."""
    code = "invalid_operation"

# --- Validation Errors ---

class ValidationError(DomainError):
    """Raised when a required field is missing or malformed."""
    code = "validation_error"

    def __init__(self, message: str, field: str = None):
        self.field = field
        super().__init__(message)

# --- Authorization ---

class PermissionDeniedError(DomainError):
    """Raised when the caller's role lacks the capability for an operation."""
    code = "permission_denied"

    def __init__(self, role: str, operation: str):
        self.role = role
        self.operation = operation
        super().__init__(f"Role '{role}' is not permitted to perform '{operation}'.")
