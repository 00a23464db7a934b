"""
Binding catalogue loader.

The catalogue is a YAML file listing the GLSL functions a sculpt program may
call, grouped by how a call is compiled (see bindings.yaml). Loading it
produces one BuiltinFunction per entry.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Tuple, Union

import yaml

from .. import config
from .values import (
    BuiltinFunction, GlslType, Var,
    ensure_scalar, ensure_dims, ensure_numeric, to_var, to_text,
)

logger = logging.getLogger(__name__)

DEFAULT_BINDINGS = Path(__file__).resolve().parent.parent / "bindings.yaml"

SIGNATURE_SECTIONS = ("geometry", "math", "other")
SECTIONS = SIGNATURE_SECTIONS + ("one_to_one",)


class CatalogueError(ValueError):
    """The binding catalogue file is malformed."""
    pass


@dataclass(frozen=True)
class Signature:
    """Argument and result component counts of a catalogue function."""
    args: Tuple[int, ...]
    ret: int


@dataclass
class Catalogue:
    """The parsed contents of a binding catalogue."""
    geometry: Dict[str, Signature] = field(default_factory=dict)
    math: Dict[str, Signature] = field(default_factory=dict)
    other: Dict[str, Signature] = field(default_factory=dict)
    one_to_one: List[str] = field(default_factory=list)
    source: Optional[Path] = None

    @property
    def names(self) -> List[str]:
        return [*self.geometry, *self.math, *self.other, *self.one_to_one]

    def builtins(self) -> List[BuiltinFunction]:
        """Synthesize the callable wrapper for every entry."""
        functions = []
        for name, sig in self.geometry.items():
            functions.append(geometry_builtin(name, sig))
        for section in (self.math, self.other):
            for name, sig in section.items():
                functions.append(glsl_builtin(name, sig))
        for name in self.one_to_one:
            functions.append(one_to_one_builtin(name))
        return functions


def _parse_dims(value, where: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or not 1 <= value <= 4:
        raise CatalogueError(f"{where}: component counts must be integers from 1 to 4, got {value!r}")
    return value


def _parse_signature(name: str, entry, section: str) -> Signature:
    where = f"{section}.{name}"
    if not isinstance(entry, dict) or "args" not in entry or "ret" not in entry:
        raise CatalogueError(f"{where}: expected a mapping with 'args' and 'ret'")
    args = entry["args"]
    if not isinstance(args, list):
        raise CatalogueError(f"{where}: 'args' must be a list")
    return Signature(
        args=tuple(_parse_dims(a, where) for a in args),
        ret=_parse_dims(entry["ret"], where),
    )


def parse_catalogue(data: dict, source: Optional[Path] = None) -> Catalogue:
    """Validate raw catalogue data (as loaded from YAML)."""
    if not isinstance(data, dict):
        raise CatalogueError("binding catalogue must be a mapping of sections")
    unknown = set(data) - set(SECTIONS)
    if unknown:
        raise CatalogueError(f"unknown catalogue section(s): {', '.join(sorted(unknown))}")

    catalogue = Catalogue(source=source)
    seen = set()

    def _claim(name: str, section: str) -> None:
        if not isinstance(name, str) or not name.isidentifier():
            raise CatalogueError(f"{section}: invalid function name {name!r}")
        if name in seen:
            raise CatalogueError(f"{section}.{name}: defined more than once")
        seen.add(name)

    for section in SIGNATURE_SECTIONS:
        entries = data.get(section) or {}
        if not isinstance(entries, dict):
            raise CatalogueError(f"{section}: expected a mapping of function names")
        target = getattr(catalogue, section)
        for name, entry in entries.items():
            _claim(name, section)
            target[name] = _parse_signature(name, entry, section)

    one_to_one = data.get("one_to_one") or []
    if not isinstance(one_to_one, list):
        raise CatalogueError("one_to_one: expected a list of function names")
    for name in one_to_one:
        _claim(name, "one_to_one")
        catalogue.one_to_one.append(name)

    return catalogue


def load_catalogue(path: Optional[Union[str, Path]] = None) -> Catalogue:
    """
    Load a binding catalogue.

    Args:
        path: YAML file to read. Defaults to $SCULPT_BINDINGS, then the
            bindings.yaml shipped with the package.

    Raises:
        CatalogueError: If the file content is malformed
        OSError: If the file cannot be read
    """
    if path is None:
        path = config.BINDINGS_PATH or DEFAULT_BINDINGS
    path = Path(path)
    with path.open("r", encoding="utf-8") as fp:
        data = yaml.safe_load(fp) or {}
    catalogue = parse_catalogue(data, source=path)
    logger.debug("loaded %d bindings from %s", len(catalogue.names), path)
    return catalogue


# --- Wrapper synthesis ---

def geometry_builtin(name: str, sig: Signature) -> BuiltinFunction:
    """A distance primitive: evaluated at the scope position and folded into the scope."""

    def _impl(state, *args):
        texts = [state.csg.current.position.text]
        for arg, dims in zip(args, sig.args):
            if dims == 1:
                ensure_scalar(name, arg)
            else:
                ensure_dims(name, arg, (dims,))
            texts.append(to_text(arg))
        state.csg.combine(f"{name}({', '.join(texts)})")
        return None

    count = len(sig.args)
    return BuiltinFunction(name, _impl, count, count,
                           doc=f"signed distance primitive {name}")


def glsl_builtin(name: str, sig: Signature) -> BuiltinFunction:
    """A GLSL function with a declared result size."""
    ret_type = GlslType.for_dims(sig.ret)

    def _impl(state, *args):
        texts = [to_text(ensure_numeric(name, arg)) for arg in args]
        return Var(ret_type, f"{name}({', '.join(texts)})")

    count = len(sig.args)
    return BuiltinFunction(name, _impl, count, count)


def one_to_one_builtin(name: str) -> BuiltinFunction:
    """A GLSL function applied component-wise: the result has the argument's size."""

    def _impl(state, value):
        var = to_var(ensure_numeric(name, value))
        return Var(var.glsl_type, f"{name}({var.text})")

    return BuiltinFunction(name, _impl, 1, 1)
