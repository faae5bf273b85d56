"""
Contains the types used in the validation framework
"""
from typing import TYPE_CHECKING, Any, Callable, Mapping, Optional, Protocol, TypeAlias

if TYPE_CHECKING:
    from .chain import Checks
    from .context import Context


Proceed: TypeAlias = Callable[[], Any]
"""
The continuation handed to every check. Calling it runs the rest of the chain and returns its raw result.
"""


class CheckFunction(Protocol):
    """
    A protocol that defines the signature of a single check in a chain.
    """

    def __call__(self, ctx: "Context", value: Any, field: str, proceed: Proceed) -> Any:
        ...


CheckFactory: TypeAlias = Callable[[Any], CheckFunction]
SchemaT: TypeAlias = "Mapping[str, Optional[Checks]]"  # pylint: disable=invalid-name
