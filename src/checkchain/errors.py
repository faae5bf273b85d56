"""
Contains the exceptions raised by the validation framework
"""
from typing import Mapping

from frozendict import frozendict


class ConfigurationError(ValueError):
    """
    Raised when a check is built with invalid options or a validator is called without schema or value.
    These are programming errors and never end up in a `ValidationResult`.
    """


class CheckFailure(Exception):
    """
    A check may raise this exception to let its field fail with the given message. In contrast to any other
    exception it will be collected in the error map of the `ValidationResult`.
    """

    def __init__(self, msg: str = ""):
        super().__init__(msg)
        self.msg = msg


class ValidationRunError(Exception):
    """
    Raised if the validation itself broke, i.e. at least one chain raised an unexpected exception.
    `faults` maps the affected field names onto the raised exceptions. All other chains settled before this
    error got raised.
    """

    def __init__(self, faults: Mapping[str, BaseException]):
        self.faults: frozendict[str, BaseException] = frozendict(faults)
        fields = ", ".join(sorted(self.faults))
        super().__init__(f"Validation broke on field(s) {fields}")
