"""
Symbolic values for the sculpt interpreter.

A DSL expression evaluates either to a compile-time constant (Number,
Boolean, String) or to a Var: a typed piece of GLSL text that computes the
value on the GPU. Constants are folded while both operands are known and
promoted to Var text only when they meet a Var.
"""

import math
import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, List, Optional, Tuple, Union

from ..config import NUMBER_PRECISION
from ..errors import (
    error_type,
    error_scalar_required,
    error_constant_required,
    error_wrong_dimension,
    error_arity,
    error_non_finite,
)


class GlslType(Enum):
    """GLSL types a Var can have, with their component counts."""
    BOOL = ("bool", 0)
    FLOAT = ("float", 1)
    VEC2 = ("vec2", 2)
    VEC3 = ("vec3", 3)
    VEC4 = ("vec4", 4)

    def __init__(self, glsl_name: str, dims: int):
        self.glsl_name = glsl_name
        self.dims = dims

    def __str__(self) -> str:
        return self.glsl_name

    @classmethod
    def for_dims(cls, dims: int) -> "GlslType":
        for member in cls:
            if member.dims == dims:
                return member
        raise ValueError(f"no GLSL type has {dims} components")


@dataclass(frozen=True)
class Number:
    """A compile-time constant number."""
    value: float


@dataclass(frozen=True)
class Boolean:
    """A compile-time constant boolean."""
    value: bool


@dataclass(frozen=True)
class String:
    """A compile-time string. Only used to name uniforms; never reaches GLSL."""
    value: str


SWIZZLE_SETS = ("xyzw", "rgba")
GLSL_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


@dataclass(frozen=True)
class Var:
    """GLSL text computing a value of ``glsl_type`` at shader runtime."""
    glsl_type: GlslType
    text: str

    @property
    def dims(self) -> int:
        return self.glsl_type.dims

    @property
    def is_identifier(self) -> bool:
        """True if the text is a plain GLSL name, so it can be assigned to."""
        return bool(GLSL_IDENTIFIER.match(self.text))

    def _swizzle_indices(self, swizzle: str) -> List[int]:
        for letters in SWIZZLE_SETS:
            if swizzle and all(c in letters for c in swizzle):
                indices = [letters.index(c) for c in swizzle]
                if len(swizzle) <= 4 and max(indices) < self.dims:
                    return indices
        raise error_type(f"'{swizzle}' is not a component of a {self.glsl_type}")

    def get_component(self, swizzle: str) -> "Var":
        """Read one or more components (v.x, v.xy)."""
        if self.dims < 2:
            raise error_type(f"a {self.glsl_type} has no component '{swizzle}'")
        self._swizzle_indices(swizzle)
        return Var(GlslType.for_dims(len(swizzle)), f"{self.text}.{swizzle}")

    def set_component(self, swizzle: str, value: "Value") -> str:
        """Return the GLSL statement writing ``value`` into ``self.swizzle``."""
        if self.dims < 2:
            raise error_type(f"a {self.glsl_type} has no component '{swizzle}'")
        indices = self._swizzle_indices(swizzle)
        if len(set(indices)) != len(indices):
            raise error_type(f"cannot assign to '{swizzle}': a component is repeated")
        if not self.is_identifier:
            raise error_type(f"cannot assign to a component of '{self.text}'")
        source = to_var(value)
        if source.dims != len(swizzle):
            raise error_wrong_dimension(
                f"{self.text}.{swizzle}",
                f"a {GlslType.for_dims(len(swizzle))}",
                type_name(value),
            )
        return f"{self.text}.{swizzle} = {source.text};"


SymbolicValue = Union[Number, Boolean, Var]
Value = Any  # SymbolicValue, String, a callable, or None (undefined)


# Convenience constructors

def float_var(text: str) -> Var:
    return Var(GlslType.FLOAT, text)


def bool_var(text: str) -> Var:
    return Var(GlslType.BOOL, text)


def vec3_var(text: str) -> Var:
    return Var(GlslType.VEC3, text)


# Conversions

def format_number(value: float) -> str:
    """Write a number the way GLSL float literals are emitted (fixed point)."""
    if not math.isfinite(value):
        raise error_non_finite()
    return f"{value:.{NUMBER_PRECISION}f}"


def type_name(value: Value) -> str:
    """Describe a value for error messages."""
    if isinstance(value, Var):
        return value.glsl_type.glsl_name
    if isinstance(value, Number):
        return "number"
    if isinstance(value, Boolean):
        return "boolean"
    if isinstance(value, String):
        return "string"
    if value is None:
        return "undefined"
    return "function"


def is_constant(value: Value) -> bool:
    return isinstance(value, (Number, Boolean, String))


def dims_of(value: Value) -> Optional[int]:
    """Component count of a symbolic value; None for anything else."""
    if isinstance(value, Var):
        return value.dims
    if isinstance(value, Number):
        return 1
    if isinstance(value, Boolean):
        return 0
    return None


def to_var(value: Value) -> Var:
    """Promote a constant to GLSL text; Vars pass through."""
    if isinstance(value, Var):
        return value
    if isinstance(value, Number):
        return float_var(format_number(value.value))
    if isinstance(value, Boolean):
        return bool_var("true" if value.value else "false")
    raise error_type(f"a {type_name(value)} cannot be used in GLSL")


def to_text(value: Value) -> str:
    """GLSL text for a symbolic value."""
    return to_var(value).text


# Validation

def ensure_scalar(func_name: str, value: Value) -> Value:
    if dims_of(value) != 1:
        raise error_scalar_required(func_name, type_name(value))
    return value


def ensure_boolean(func_name: str, value: Value) -> Value:
    if dims_of(value) != 0:
        raise error_type(f"{func_name} requires a boolean. Was given: {type_name(value)}")
    return value


def ensure_numeric(func_name: str, value: Value) -> Value:
    """Numbers and float/vector Vars are numeric; booleans are not."""
    dims = dims_of(value)
    if dims is None or dims < 1:
        raise error_type(f"{func_name} requires a number or vector. Was given: {type_name(value)}")
    return value


def ensure_dims(func_name: str, value: Value, allowed: Tuple[int, ...]) -> Value:
    """Check a numeric argument has one of the allowed component counts."""
    ensure_numeric(func_name, value)
    if dims_of(value) not in allowed:
        expected = " or ".join(GlslType.for_dims(d).glsl_name for d in allowed)
        raise error_wrong_dimension(func_name, f"a {expected}", type_name(value))
    return value


def ensure_constant_number(what: str, value: Value) -> float:
    """Unwrap a Number, or fail because a runtime value was given."""
    if not isinstance(value, Number):
        raise error_constant_required(what, type_name(value))
    return value.value


# Callables

@dataclass(eq=False)
class Closure:
    """A DSL function together with the environment it was created in."""
    parameters: List[str]
    body: Any               # ast.Block
    env: Any                # context.Environment
    name: Optional[str] = None
    is_branch: bool = False

    def __repr__(self) -> str:
        return f"Closure({self.name or '<anonymous>'}/{len(self.parameters)})"


@dataclass(eq=False)
class BuiltinFunction:
    """
    A host function callable from DSL code.

    The implementation receives the CompilerState followed by the evaluated
    arguments. ``max_args`` of None means any number of arguments.
    """
    name: str
    implementation: Callable[..., Any]
    min_args: int = 0
    max_args: Optional[int] = None
    doc: str = ""

    def check_arity(self, count: int) -> None:
        if count < self.min_args or (self.max_args is not None and count > self.max_args):
            if self.max_args is None:
                expected = f"at least {self.min_args}"
            elif self.min_args == self.max_args:
                expected = str(self.min_args)
            else:
                expected = f"{self.min_args} to {self.max_args}"
            raise error_arity(self.name, expected, count)

    def __repr__(self) -> str:
        return f"BuiltinFunction({self.name})"


def is_callable(value: Value) -> bool:
    return isinstance(value, (Closure, BuiltinFunction))
