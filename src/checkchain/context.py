"""
Contains the state shared by all chains of one validation run
"""
import dataclasses
from dataclasses import dataclass, field
from typing import Any, Mapping, MutableMapping, Optional

from .outcome import Fail


@dataclass
class Context:
    """
    `root` is the complete validated object, `current` is the object the active chain reads from and writes to
    (identical to `root` for flat schemas). `path` is the path of the field which is currently validated.
    `errors` gets filled by the `ValidationManager` once all chains settled.
    `request` and `response` are only set if the validation was started by the request middleware.
    """

    root: Any
    current: Any
    path: str = ""
    errors: dict[str, Fail] = field(default_factory=dict)
    request: Optional[Any] = None
    response: Optional[Any] = None

    def descend(self, field_name: str) -> "Context":
        """
        Returns a shallow copy of this context whose path is extended by `field_name`.
        `root`, `current` and `errors` are shared with this context.
        """
        path = f"{self.path}/{field_name}" if self.path else field_name
        return dataclasses.replace(self, path=path)

    def read(self, field_name: str) -> Any:
        """
        Returns the value of `field_name` in `current` as it is at the time of the call, `None` if it's missing.
        """
        if isinstance(self.current, Mapping):
            return self.current.get(field_name)
        return getattr(self.current, field_name, None)

    def write(self, field_name: str, value: Any) -> None:
        """Writes `value` to `field_name` in `current`"""
        if isinstance(self.current, MutableMapping):
            self.current[field_name] = value
        else:
            setattr(self.current, field_name, value)
