"""
This package enables you to validate plain data objects against a schema. Every field of the schema gets an ordered
chain of checks which may be synchronous or asynchronous. All chains of an object run concurrently and their
outcomes are merged into one `ValidationResult`.
"""

from .analysis import ValidationResult
from .chain import Checks, checks
from .config import ValidatorConfig
from .context import Context
from .errors import CheckFailure, ConfigurationError, ValidationRunError
from .execution import ValidationManager, new_object_validator
from .middleware import ResponseLike, new_request_body_validator
from .outcome import PASS, Fail, Outcome, Pass
from .registry import CheckRegistry, default_registry, register_custom_validator
from .types import CheckFunction, Proceed
