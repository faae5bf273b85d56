"""
Contains some useful utility functions to be used in check functions.
"""
from typing import Any, Mapping, Optional, TypeVar, overload

from typeguard import TypeCheckError, check_type

AttrT = TypeVar("AttrT")


def split_path(path: str) -> tuple[bool, list[str]]:
    """
    Splits a slash delimited path into its segments. The first return value indicates whether the path is anchored
    at the root object (i.e. starts with `$/`).
    """
    from_root = path.startswith("$/")
    if from_root:
        path = path[2:]
    return from_root, path.split("/")


def _get_segment(obj: Any, segment: str) -> Any:
    if isinstance(obj, Mapping):
        return obj[segment]
    try:
        return getattr(obj, segment)
    except AttributeError as error:
        raise KeyError(segment) from error


def optional_field(obj: Any, attribute_path: str, attribute_type: type[AttrT]) -> Optional[AttrT]:
    """
    Tries to query the `obj` with the provided `attribute_path`. If it is not existent, `None` will be returned.
    If a segment on the way is `None` the result is `None` as well. If the attribute is found but its type doesn't
    match, `None` will be returned too.
    """
    try:
        return required_field(obj, attribute_path, attribute_type)
    except (KeyError, TypeCheckError):
        return None


@overload
def required_field(
    obj: Any, attribute_path: str, attribute_type: type[AttrT], param_base_path: Optional[str] = None
) -> AttrT:
    ...


@overload
def required_field(obj: Any, attribute_path: str, attribute_type: Any, param_base_path: Optional[str] = None) -> Any:
    ...


def required_field(obj: Any, attribute_path: str, attribute_type: Any, param_base_path: Optional[str] = None) -> Any:
    """
    Tries to query the `obj` with the provided slash delimited `attribute_path`. Mappings are queried by key, any
    other object by attribute. If it is not existent (or `None` on the way), a KeyError will be raised.
    If the attribute is found, the type will be checked and TypeCheckError will be raised if the type doesn't match
    the value.
    """
    current_obj: Any = obj
    splitted_path = attribute_path.split("/")
    for index, attr_name in enumerate(splitted_path):
        try:
            if current_obj is None:
                raise KeyError(attr_name)
            current_obj = _get_segment(current_obj, attr_name)
        except KeyError as error:
            current_path = "/".join(splitted_path[0 : index + 1])
            if param_base_path is not None:
                current_path = f"{param_base_path}/{current_path}"
            raise KeyError(f"{current_path}: Not found") from error
    try:
        check_type(current_obj, attribute_type)
    except TypeCheckError as error:
        current_path = attribute_path
        if param_base_path is not None:
            current_path = f"{param_base_path}/{attribute_path}"
        raise TypeCheckError(f"{current_path}: {error}") from error
    return current_obj
