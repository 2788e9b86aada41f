"""
Storefront Backend — Custom Exception Hierarchy
=================================================

What:  Application-specific exceptions, one class per error outcome.
How:   Each exception carries a user-facing message and an optional context
       dict. Global exception handlers (registered in main.py) map every class
       to exactly one HTTP status and a structured JSON body.
Who:   Raised by services and dependencies; caught by the global handlers.

Exception Hierarchy:
    StorefrontError (base)
    ├── ValidationError               → 400 Bad Request
    │   └── EmailAlreadyRegisteredError → 400 Bad Request
    ├── AuthenticationError           → 401 Unauthorized
    ├── NotFoundError                 → 404 Not Found
    ├── RateLimitExceededError        → 429 Too Many Requests
    ├── OrderItemResolutionError      → 500 (message surfaced to caller)
    ├── FileStorageError              → 500 (generic "Upload failed")
    ├── EmailDeliveryError            → never reaches HTTP; logged by OrderService
    └── DatabaseError                 → 500 (generic message)

Route handlers never inspect an error's shape to pick a status code; the
exception class alone decides it.
"""

from typing import Any, Dict, List, Optional


class StorefrontError(Exception):
    """
    Base exception for all Storefront application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged, returned only where a handler says so)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(StorefrontError):
    """
    Raised when client input fails validation.

    What:    The client sent data that can be corrected: schema rejection,
             malformed JSON, a missing id, a duplicate slug.
    HTTP:    400 Bad Request

    `errors` holds field-level details (pydantic's error list, or a single
    synthesized entry when `field` is given).

    Example response:
        {
            "error": "validation_error",
            "message": "Invalid input",
            "details": [{"loc": ["price"], "msg": "Input should be greater than 0", ...}]
        }
    """

    def __init__(
        self,
        message: str = "Invalid input",
        field: Optional[str] = None,
        errors: Optional[List[Dict[str, Any]]] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field
        if errors is None and field:
            errors = [{"loc": [field], "msg": message, "type": "value_error"}]
        self.errors = errors or []


class EmailAlreadyRegisteredError(ValidationError):
    """Registration attempted with an email that already has an account."""

    def __init__(self, email: str):
        super().__init__(
            message="Email already registered",
            field="email",
            context={"email": email},
        )


class AuthenticationError(StorefrontError):
    """
    Raised when the caller's identity is missing, invalid, or insufficient.

    What:    No session cookie, a bad/expired token, wrong credentials, or a
             non-admin calling an admin-gated operation.
    HTTP:    401 Unauthorized

    The message never distinguishes "unknown email" from "wrong password".
    """

    def __init__(
        self,
        message: str = "Unauthorized",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class NotFoundError(StorefrontError):
    """
    Raised when a requested resource does not exist.

    SQLAlchemy returns None for missing records (not an exception); services
    convert None → NotFoundError so the route stays free of status logic.
    HTTP:    404 Not Found
    """

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[str] = None,
        message: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        if message is None:
            message = f"The requested {resource} was not found"
            if resource_id:
                message = f"{resource} with ID '{resource_id}' was not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)


class RateLimitExceededError(StorefrontError):
    """
    Raised when a client exceeds the per-IP auth rate limit.

    HTTP:    429 Too Many Requests (with Retry-After header)
    """

    def __init__(
        self,
        retry_after: int = 60,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = (
            f"Rate limit exceeded. Please wait {retry_after} seconds before making more requests."
        )
        ctx = context or {}
        ctx["retry_after"] = retry_after
        super().__init__(message=message, context=ctx)
        self.retry_after = retry_after


class OrderItemResolutionError(StorefrontError):
    """
    Raised when an order line references a product that does not exist.

    HTTP:    500, with the descriptive message returned to the caller
             (e.g. "Product 3f2c... not found"). Nothing is persisted.
    """

    def __init__(self, product_id: str):
        super().__init__(
            message=f"Product {product_id} not found",
            context={"product_id": product_id},
        )
        self.product_id = product_id


class FileStorageError(StorefrontError):
    """
    Raised when reading, resizing, or writing an upload fails.

    HTTP:    500 with the generic "Upload failed" message; the OS/Pillow error
             stays in `context` and the server log.
    """

    def __init__(
        self,
        message: str = "Upload failed",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class EmailDeliveryError(StorefrontError):
    """
    Raised by EmailService when the SMTP transport rejects or fails a send.

    Order placement treats this as non-fatal: it is logged and swallowed.
    """

    def __init__(
        self,
        message: str = "Email delivery failed",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class DatabaseError(StorefrontError):
    """
    Raised when database operations fail unexpectedly.

    HTTP:    500 Internal Server Error
    The message returned to the client is always generic; the original
    error is logged server-side only.
    """

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
