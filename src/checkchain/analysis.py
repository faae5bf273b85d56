"""
Contains functionality to analyze the result of a validation process
"""
from typing import Any, Mapping, Optional

from frozendict import frozendict

from .outcome import Fail


class ValidationResult:
    """
    The function `ValidationManager.validate` will return an instance of this class. It is created once every chain
    of a run settled and is never emitted partially. Note that the derived values are calculated only if you use
    them.
    """

    def __init__(self, failures: Mapping[str, Fail]):
        self._failures: frozendict[str, Fail] = frozendict(failures)
        self._failed_fields: Optional[list[str]] = None
        self._messages: Optional[frozendict[str, str]] = None

    @property
    def success(self) -> bool:
        """True if no field failed"""
        return len(self._failures) == 0

    @property
    def errors(self) -> Optional[frozendict[str, Fail]]:
        """Maps the names of the failed fields onto their failures. `None` if the validation succeeded."""
        if self.success:
            return None
        return self._failures

    @property
    def failed_fields(self) -> list[str]:
        """Sorted list of the names of all failed fields"""
        if self._failed_fields is None:
            self._failed_fields = sorted(self._failures)
        return self._failed_fields

    @property
    def messages(self) -> frozendict[str, str]:
        """Maps the names of the failed fields onto their error messages"""
        if self._messages is None:
            self._messages = frozendict({field: failure.msg for field, failure in self._failures.items()})
        return self._messages

    @property
    def num_errors(self) -> int:
        """Number of failed fields"""
        return len(self._failures)

    def to_dict(self) -> dict[str, Any]:
        """Returns a JSON serializable representation"""
        if self.success:
            return {"success": True}
        return {
            "success": False,
            "errors": {field: self._failures[field].to_dict() for field in self.failed_fields},
        }

    def __bool__(self) -> bool:
        return self.success

    def __eq__(self, other):
        return isinstance(other, ValidationResult) and self._failures == other._failures

    def __hash__(self):
        return hash(self._failures)

    def __repr__(self):
        if self.success:
            return "ValidationResult(success=True)"
        return f"ValidationResult(success=False, errors={dict(self._failures)})"
