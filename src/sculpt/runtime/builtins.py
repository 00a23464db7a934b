"""
Built-in function registry for the sculpt interpreter.

Maps DSL names to host implementations. Every implementation takes the
CompilerState as its first argument, followed by the evaluated DSL
arguments. Four groups are registered:

- control: the targets of the normalization passes (_binaryOp, _not,
  _negate, _if, _ternary, _bindName) and shape()
- constructors: float, vec2, vec3, vec4
- settings: input, setStepSize, setGeometryQuality
- emitters (emitters.py) and the binding catalogue (catalogue.py)
"""

import math
from typing import Dict, List, Optional, Union
from pathlib import Path

from ..errors import (
    error_type,
    error_dimension,
    error_dimension_mismatch,
    error_division_by_zero,
    error_non_finite,
    error_wrong_dimension,
)
from .catalogue import Catalogue, CatalogueError, load_catalogue
from .context import Uniform
from .emitters import EMITTERS
from .values import (
    Value, Number, Boolean, String, Var, GlslType, BuiltinFunction,
    float_var, vec3_var, type_name, dims_of, is_callable,
    ensure_boolean, ensure_numeric, ensure_constant_number, to_var, to_text,
)


COMPARISON_OPERATORS = ('==', '!=', '<', '<=', '>', '>=')
ARITHMETIC_OPERATORS = ('+', '-', '*', '/', '%')
LOGICAL_OPERATORS = ('&&', '||')


def global_values() -> Dict[str, Value]:
    """Names every program starts with."""
    return {
        "time": float_var("time"),
        "mouse": vec3_var("mouse"),
        "normal": vec3_var("normal"),
        "PI": Number(math.pi),
        "TWO_PI": Number(2 * math.pi),
        "TAU": Number(2 * math.pi),
    }


# --- Operators ---

def _fold_arithmetic(left: float, right: float, operator: str) -> float:
    if not (math.isfinite(left) and math.isfinite(right)):
        raise error_non_finite()
    if operator == '+':
        result = left + right
    elif operator == '-':
        result = left - right
    elif operator == '*':
        result = left * right
    elif right == 0:
        raise error_division_by_zero()
    elif operator == '/':
        result = left / right
    else:
        result = math.fmod(left, right)
    # Overflow (1e308 * 10) gives inf without raising
    if not math.isfinite(result):
        raise error_non_finite()
    return result


def _fold_comparison(left, right, operator: str) -> bool:
    if operator == '==':
        return left == right
    if operator == '!=':
        return left != right
    if operator == '<':
        return left < right
    if operator == '<=':
        return left <= right
    if operator == '>':
        return left > right
    return left >= right


def binary_op(state, left: Value, right: Value, operator: Value) -> Value:
    """Fold two constants, or build the GLSL text combining them."""
    if not isinstance(operator, String):
        raise error_type("operator must be given as a string")
    op = operator.value

    if isinstance(left, Number) and isinstance(right, Number):
        if op in ARITHMETIC_OPERATORS:
            return Number(_fold_arithmetic(left.value, right.value, op))
        if op in COMPARISON_OPERATORS:
            return Boolean(_fold_comparison(left.value, right.value, op))
    if isinstance(left, Boolean) and isinstance(right, Boolean):
        if op == '&&':
            return Boolean(left.value and right.value)
        if op == '||':
            return Boolean(left.value or right.value)
        if op in ('==', '!='):
            return Boolean(_fold_comparison(left.value, right.value, op))
    if isinstance(left, String) and isinstance(right, String):
        if op == '+':
            return String(left.value + right.value)
        if op in ('==', '!='):
            return Boolean(_fold_comparison(left.value, right.value, op))

    if op not in ARITHMETIC_OPERATORS + COMPARISON_OPERATORS + LOGICAL_OPERATORS:
        raise error_type(f"unsupported operator '{op}'")

    lhs = to_var(left)
    rhs = to_var(right)

    if op in LOGICAL_OPERATORS:
        ensure_boolean(f"'{op}'", lhs)
        ensure_boolean(f"'{op}'", rhs)
        return Var(GlslType.BOOL, f"({lhs.text} {op} {rhs.text})")

    if op in COMPARISON_OPERATORS:
        for operand in (lhs, rhs):
            if operand.dims != 1:
                raise error_dimension(op, type_name(operand))
        return Var(GlslType.BOOL, f"({lhs.text} {op} {rhs.text})")

    ensure_numeric(f"'{op}'", lhs)
    ensure_numeric(f"'{op}'", rhs)
    if lhs.dims != rhs.dims and lhs.dims != 1 and rhs.dims != 1:
        raise error_dimension_mismatch(f"'{op}'", type_name(lhs), type_name(rhs))
    result_type = GlslType.for_dims(max(lhs.dims, rhs.dims))
    if op == '%':
        return Var(result_type, f"mod({lhs.text}, {rhs.text})")
    return Var(result_type, f"({lhs.text} {op} {rhs.text})")


def logical_not(state, value: Value) -> Value:
    if isinstance(value, Boolean):
        return Boolean(not value.value)
    if isinstance(value, Var) and value.glsl_type is GlslType.BOOL:
        return Var(GlslType.BOOL, f"!{value.text}")
    raise error_type(f"'!' requires a boolean. Was given: {type_name(value)}")


def negate(state, value: Value) -> Value:
    if isinstance(value, Number):
        return Number(-value.value)
    ensure_numeric("'-'", value)
    return Var(value.glsl_type, f"(-{value.text})")


# --- Control flow ---

def _check_branch(branch: Value, what: str) -> None:
    if branch is not None and not is_callable(branch):
        raise error_type(f"{what} must be a function. Was given: {type_name(branch)}")


def _run_symbolic_branch(state, branch: Value) -> None:
    with state.indented():
        state.call(branch, [])
    if state.should_return:
        raise error_type("cannot return from inside an if whose condition is only known on the GPU")


def if_(state, condition: Value, then_branch: Value = None, else_branch: Value = None) -> None:
    """
    Conditional execution.

    A constant condition runs one branch at compile time. A symbolic
    condition emits a GLSL if/else and runs both branches, each emitting
    into its own indented block.
    """
    _check_branch(then_branch, "if branch")
    _check_branch(else_branch, "else branch")

    if isinstance(condition, Boolean):
        chosen = then_branch if condition.value else else_branch
        if chosen is not None:
            state.call(chosen, [])
        return None

    ensure_boolean("if", condition)
    state.emit(f"if ({to_text(condition)}) {{")
    if then_branch is not None:
        _run_symbolic_branch(state, then_branch)
    if else_branch is not None:
        state.emit("} else {")
        _run_symbolic_branch(state, else_branch)
    state.emit("}")
    return None


def ternary(state, condition: Value, when_true: Value, when_false: Value) -> Value:
    _check_branch(when_true, "?: branch")
    _check_branch(when_false, "?: branch")

    if isinstance(condition, Boolean):
        return state.call(when_true if condition.value else when_false, [])

    ensure_boolean("?:", condition)
    a = to_var(state.call(when_true, []))
    b = to_var(state.call(when_false, []))
    if a.glsl_type is not b.glsl_type:
        raise error_dimension_mismatch("?:", type_name(a), type_name(b))
    return Var(a.glsl_type, f"({to_text(condition)} ? {a.text} : {b.text})")


def bind_name(state, name: Value, value: Value) -> Value:
    """
    Give a symbolic value a named GLSL temporary.

    Declares `<type> <name> = <text>;` and returns a Var referring to the
    temporary, so later uses and assignments read as the DSL variable does.
    Constants and callables are returned unchanged.
    """
    if not isinstance(value, Var):
        return value
    if not isinstance(name, String):
        raise error_type("variable name must be given as a string")
    if value.text == name.value:
        return value
    glsl_name = state.declare_local(name.value)
    state.emit(f"{value.glsl_type.glsl_name} {glsl_name} = {value.text};")
    return Var(value.glsl_type, glsl_name)


def shape(state, func: Value) -> BuiltinFunction:
    """Wrap a function so each call runs inside its own CSG scope."""
    if not is_callable(func):
        raise error_type(f"shape requires a function. Was given: {type_name(func)}")

    def _scoped(state, *args):
        state.csg.push()
        result = state.call(func, list(args))
        state.csg.pop()
        return result

    name = getattr(func, "name", None) or "shape"
    return BuiltinFunction(name, _scoped, doc="function running in its own CSG scope")


# --- Constructors ---

def _constructor(glsl_type: GlslType):
    size = glsl_type.dims

    def _impl(state, *args):
        for arg in args:
            ensure_numeric(glsl_type.glsl_name, arg)
        if len(args) == 1:
            value = args[0]
            if dims_of(value) not in (1, size):
                raise error_wrong_dimension(
                    glsl_type.glsl_name, f"a float or {glsl_type.glsl_name}", type_name(value)
                )
            return Var(glsl_type, f"{glsl_type.glsl_name}({to_text(value)})")
        total = sum(dims_of(arg) for arg in args)
        if total != size:
            raise error_wrong_dimension(
                glsl_type.glsl_name, f"{size} components", f"{total}"
            )
        return Var(glsl_type, f"{glsl_type.glsl_name}({', '.join(to_text(a) for a in args)})")

    return _impl


# --- Settings ---

def input_(state, name: Value, value: Value = None, minimum: Value = None,
           maximum: Value = None) -> Var:
    """Declare a float uniform the user can adjust, with a UI range."""
    if not isinstance(name, String):
        raise error_type(f"input name must be a string. Was given: {type_name(name)}")
    default = ensure_constant_number("input value", value if value is not None else Number(0.0))
    low = ensure_constant_number("input min", minimum if minimum is not None else Number(0.0))
    high = ensure_constant_number("input max", maximum if maximum is not None else Number(1.0))
    state.add_uniform(Uniform(name.value, "float", default, low, high))
    return float_var(name.value)


def set_step_size(state, value: Value) -> None:
    state.step_size = ensure_constant_number("setStepSize", value)


def set_geometry_quality(state, value: Value) -> None:
    quality = ensure_constant_number("setGeometryQuality", value)
    state.step_size = 1 - 0.01 * quality * 0.995


class BuiltinRegistry:
    """
    Registry of all built-in functions.

    Functions are registered by name; duplicate names are rejected so a
    catalogue entry cannot silently replace an emitter.
    """

    def __init__(self, catalogue: Optional[Catalogue] = None):
        self._functions: Dict[str, BuiltinFunction] = {}
        self.catalogue = catalogue if catalogue is not None else load_catalogue()
        self._register_all()

    def get_function(self, name: str) -> Optional[BuiltinFunction]:
        return self._functions.get(name)

    @property
    def names(self) -> List[str]:
        return list(self._functions)

    def register(self, func: BuiltinFunction) -> None:
        if func.name in self._functions:
            raise CatalogueError(f"builtin '{func.name}' is already registered")
        self._functions[func.name] = func

    def _register_all(self) -> None:
        self._register_control()
        self._register_constructors()
        self._register_settings()
        self._register_emitters()
        self._register_catalogue()

    def _register_control(self) -> None:
        control = [
            ("_binaryOp", binary_op, 3, 3),
            ("_not", logical_not, 1, 1),
            ("_negate", negate, 1, 1),
            ("_if", if_, 2, 3),
            ("_ternary", ternary, 3, 3),
            ("_bindName", bind_name, 2, 2),
            ("shape", shape, 1, 1),
        ]
        for name, impl, low, high in control:
            self.register(BuiltinFunction(name, impl, low, high))

    def _register_constructors(self) -> None:
        self.register(BuiltinFunction("float", _constructor(GlslType.FLOAT), 1, 1))
        self.register(BuiltinFunction("vec2", _constructor(GlslType.VEC2), 1, 2))
        self.register(BuiltinFunction("vec3", _constructor(GlslType.VEC3), 1, 3))
        self.register(BuiltinFunction("vec4", _constructor(GlslType.VEC4), 1, 4))

    def _register_settings(self) -> None:
        self.register(BuiltinFunction("input", input_, 1, 4,
                                      doc="input(name, value=0, min=0, max=1)"))
        self.register(BuiltinFunction("setStepSize", set_step_size, 1, 1))
        self.register(BuiltinFunction("setGeometryQuality", set_geometry_quality, 1, 1))

    def _register_emitters(self) -> None:
        for name, impl, low, high in EMITTERS:
            self.register(BuiltinFunction(name, impl, low, high))

    def _register_catalogue(self) -> None:
        for func in self.catalogue.builtins():
            self.register(func)


# Global registries, one per catalogue file
_registries: Dict[Optional[str], BuiltinRegistry] = {}


def get_builtin_registry(bindings: Optional[Union[str, Path]] = None) -> BuiltinRegistry:
    """Get the registry for a catalogue file (the packaged one by default)."""
    key = str(bindings) if bindings is not None else None
    if key not in _registries:
        _registries[key] = BuiltinRegistry(load_catalogue(bindings))
    return _registries[key]
