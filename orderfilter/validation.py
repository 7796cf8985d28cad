"""Validation outcome types returned by :class:`orderfilter.filter.Filter`."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable

from jsonschema.exceptions import ValidationError

__all__ = ["ValidationIssue", "ValidationResult"]

ROOT_FIELD = "(root)"


@dataclass(frozen=True)
class ValidationIssue:
    """A single violated constraint."""

    field: str
    message: str
    validator: str
    validator_value: Any = None

    @classmethod
    def from_error(cls, error: ValidationError) -> "ValidationIssue":
        path = [str(part) for part in error.absolute_path]
        if error.validator == "required":
            missing = _missing_property(error)
            if missing is not None:
                path.append(missing)
        return cls(
            field=".".join(path) or ROOT_FIELD,
            message=error.message,
            validator=str(error.validator),
            validator_value=error.validator_value,
        )

    def as_dict(self) -> dict[str, Any]:
        return {
            "field": self.field,
            "message": self.message,
            "validator": self.validator,
            "validator_value": self.validator_value,
        }


def _missing_property(error: ValidationError) -> str | None:
    # jsonschema reports one "required" error per missing property without
    # naming it outside the message.
    instance = error.instance
    if not isinstance(instance, dict):
        return None
    for name in error.validator_value or ():
        if name not in instance and error.message.startswith(repr(name)):
            return str(name)
    return None


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of validating one document against a compiled schema."""

    valid: bool
    errors: tuple[ValidationIssue, ...] = field(default_factory=tuple)

    @classmethod
    def from_errors(cls, errors: Iterable[ValidationError]) -> "ValidationResult":
        issues = tuple(ValidationIssue.from_error(err) for err in errors)
        return cls(valid=not issues, errors=issues)

    def __bool__(self) -> bool:
        return self.valid

    @property
    def fields(self) -> list[str]:
        """Return the fields named by each issue, in report order."""

        return [issue.field for issue in self.errors]

    def as_dict(self) -> dict[str, object]:
        """Return a serializable representation of the result."""

        return {
            "valid": self.valid,
            "errors": [issue.as_dict() for issue in self.errors],
        }
