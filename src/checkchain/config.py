"""
Contains the configuration of object validators
"""
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class ValidatorConfig:
    """
    `trim_unknown`: remove every key from the validated object which is not declared in the schema.
    `timeout`: if set, a chain which did not settle after this many seconds fails its field.
    """

    trim_unknown: bool = True
    timeout: Optional[float] = None

    def __post_init__(self):
        if self.timeout is not None and self.timeout <= 0:
            raise ValueError(f"timeout must be positive, got {self.timeout}")
