"""Named converters for descriptors loaded from configuration files."""

from __future__ import annotations

from typing import Any, Callable, Dict, Mapping, Tuple

from ..paths import MISSING, dig, split_path
from .common import d, dt, lowercase, string, strip, to_list, uppercase
from .engine import Converter, DocumentConverter, ValueConverter

ValueFunc = Callable[[Any], Any]

BUILTIN_CONVERTERS: Tuple[Tuple[str, ValueFunc], ...] = (
    ("lowercase", lowercase),
    ("uppercase", uppercase),
    ("strip", strip),
    ("datetime", dt),
    ("date", d),
    ("string", string),
    ("to_list", to_list),
)

_BY_NAME: Dict[str, ValueFunc] = dict(BUILTIN_CONVERTERS)


class UnknownConverterError(LookupError):
    """Raised when a configuration names a converter that does not exist."""


def lookup(name: str) -> ValueFunc:
    try:
        return _BY_NAME[name]
    except KeyError:
        raise UnknownConverterError(
            f"Unknown converter '{name}'; available: {', '.join(sorted(_BY_NAME))}"
        ) from None


def _chain(funcs: Tuple[ValueFunc, ...]) -> ValueFunc:
    def run(value: Any) -> Any:
        for func in funcs:
            value = func(value)
        return value

    return run


def _copy_from(source: str, funcs: Tuple[ValueFunc, ...], as_list: bool):
    keys = split_path(source)
    chained = _chain(funcs)

    def copy(document: Dict[str, Any]) -> Any:
        value = dig(document, keys)
        value = None if value is MISSING else chained(value)
        return to_list(value) if as_list else value

    return copy


def resolve(spec: Any) -> Converter:
    """Build a converter from a configuration entry.

    ``"lowercase"`` or ``["strip", "lowercase"]`` rewrite the existing value
    and leave a missing path absent;
    ``{"from": "email", "apply": [...], "as_list": true}`` copies another field.
    """
    if isinstance(spec, str):
        return ValueConverter(lookup(spec), skip_missing=True)
    if isinstance(spec, (list, tuple)):
        return ValueConverter(
            _chain(tuple(lookup(name) for name in spec)), skip_missing=True
        )
    if isinstance(spec, Mapping):
        source = spec.get("from")
        if not isinstance(source, str):
            raise UnknownConverterError(f"Converter spec needs a 'from' path: {spec!r}")
        apply = spec.get("apply") or ()
        if isinstance(apply, str):
            apply = (apply,)
        funcs = tuple(lookup(name) for name in apply)
        return DocumentConverter(_copy_from(source, funcs, bool(spec.get("as_list"))))
    raise UnknownConverterError(f"Unsupported converter spec: {spec!r}")
