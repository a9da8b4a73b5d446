"""
Platform-wide exception hierarchy.

Services raise these; blueprints register handlers against them once and
translate them into the discriminated ``{"ok": false, "code", "error"}``
response (see app.utils.errors.api_error).

Every class carries a machine-readable ``code`` so the error handler does not
need a lookup table of its own.

Usage:
    from app.core.exceptions import NotFoundError, ValidationError

    raise NotFoundError(resource="Activity", resource_id=42)
    raise ValidationError("Title is required", details={"title": "required"})
"""


class NotFoundError(Exception):
    """Raised when a requested resource does not exist within the given scope.

    Used for BOTH genuinely missing records AND cross-project access
    attempts. A 403 would confirm the resource exists; a 404 does not.

    Args:
        resource: Human-readable entity name (e.g. "Activity", "Contractor").
        resource_id: The PK that was looked up. Included in logs, not in HTTP response.
        project_id: Optional — the scope that was enforced. For debug logging only.
    """

    code = "ERR_NOT_FOUND"

    def __init__(
        self,
        resource: str,
        resource_id: int | str | None = None,
        project_id: int | None = None,
    ) -> None:
        self.resource = resource
        self.resource_id = resource_id
        self.project_id = project_id
        msg = f"{resource}"
        if resource_id is not None:
            msg += f" id={resource_id}"
        msg += " not found"
        super().__init__(msg)

    @property
    def public_message(self) -> str:
        return f"{self.resource} not found"


class ValidationError(Exception):
    """Raised when input fails validation in the service layer.

    Args:
        message: Human-readable explanation of what failed.
        details: Optional field-level breakdown for structured API responses.
                 Keys are field names; values are error descriptions.
        code: ERR_VALIDATION_REQUIRED for missing fields, ERR_VALIDATION_INVALID
              for values that are present but unusable.
    """

    code = "ERR_VALIDATION_INVALID"

    def __init__(self, message: str, details: dict | None = None, code: str | None = None) -> None:
        self.details = details or {}
        if code:
            self.code = code
        super().__init__(message)


class ConflictError(Exception):
    """Raised when an operation would violate a unique constraint.

    Args:
        resource: Model name.
        field: The unique field that would be duplicated.
        value: The conflicting value.
    """

    code = "ERR_CONFLICT_DUPLICATE"

    def __init__(self, resource: str, field: str, value: str | None = None) -> None:
        self.resource = resource
        self.field = field
        self.value = value
        msg = f"{resource} with {field}={value!r} already exists"
        super().__init__(msg)


class DuplicateNameError(ConflictError):
    """A contractor with the same name (case-insensitive) exists in the project."""

    def __init__(self, name: str) -> None:
        super().__init__("Contractor", "name", name)


# ── Day-copy preconditions ───────────────────────────────────────────────────


class CopyPreconditionError(Exception):
    """Base for the refusals raised by the day-copy operator."""

    code: str

    def __init__(self, message: str, **context) -> None:
        self.context = context
        super().__init__(message)


class NoSourceDataError(CopyPreconditionError):
    """The source date has no briefing."""

    code = "ERR_NO_SOURCE_DATA"


class TargetNotEmptyError(CopyPreconditionError):
    """The target briefing already holds activities; copy never merges."""

    code = "ERR_TARGET_NOT_EMPTY"


class NothingToCopyError(CopyPreconditionError):
    """The source briefing exists but has no activities."""

    code = "ERR_NOTHING_TO_COPY"


# ── Storage ──────────────────────────────────────────────────────────────────


class StorageError(Exception):
    """Any underlying datastore failure, including statement timeouts.

    Wraps the original SQLAlchemy exception as ``__cause__``.
    """

    code = "ERR_STORAGE"

    def __init__(self, operation: str, message: str = "Database error") -> None:
        self.operation = operation
        super().__init__(f"{message} during {operation}")
