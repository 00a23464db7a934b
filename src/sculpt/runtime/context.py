"""
Compile-time state for the sculpt interpreter.

Two separate structures live here:

- Environment: the lexical chain of DSL variable bindings
- CompilerState: everything one compile accumulates (emission buffers,
  uniforms, CSG stack, settings); it is threaded through every builtin
"""

import re
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Set
from contextlib import contextmanager

from ..config import DEFAULT_STEP_SIZE, INDENT, BASE_INDENT_LEVEL
from ..errors import error_unbound_identifier, error_type, error_duplicate_uniform
from .csg import CsgStack
from .values import Value, Var


@dataclass
class Environment:
    """
    A single lexical scope containing variable bindings.

    Environments form a chain via the `parent` field. Bindings may hold
    undefined (None), so lookups raise instead of returning None for a
    missing name.
    """
    variables: Dict[str, Value] = field(default_factory=dict)
    parent: Optional["Environment"] = None
    name: str = "anonymous"  # For debugging
    constants: Set[str] = field(default_factory=set)
    # name -> the GLSL temporary that name declared and may write to
    temporaries: Dict[str, str] = field(default_factory=dict)

    def _owner(self, name: str) -> Optional["Environment"]:
        env = self
        while env is not None:
            if name in env.variables:
                return env
            env = env.parent
        return None

    def lookup(self, name: str) -> Value:
        """Look up a variable in this scope or parent scopes."""
        owner = self._owner(name)
        if owner is None:
            raise error_unbound_identifier(name)
        return owner.variables[name]

    def contains(self, name: str) -> bool:
        return self._owner(name) is not None

    def is_constant(self, name: str) -> bool:
        owner = self._owner(name)
        return owner is not None and name in owner.constants

    def owns_temporary(self, name: str, text: str) -> bool:
        """True if `name` declared the temporary `text`, rather than aliasing it."""
        owner = self._owner(name)
        return owner is not None and owner.temporaries.get(name) == text

    def define(self, name: str, value: Value, constant: bool = False) -> None:
        """Bind a name in this scope, shadowing any outer binding."""
        self.variables[name] = value
        self.temporaries.pop(name, None)
        if constant:
            self.constants.add(name)
        else:
            self.constants.discard(name)

    def assign(self, name: str, value: Value) -> None:
        """Update an existing binding wherever it lives in the chain."""
        owner = self._owner(name)
        if owner is None:
            raise error_unbound_identifier(name)
        if name in owner.constants:
            raise error_type(f"assignment to constant variable '{name}'")
        owner.variables[name] = value

    def child(self, name: str = "block") -> "Environment":
        return Environment(parent=self, name=name)


@dataclass
class Uniform:
    """A shader uniform, with UI range hints for inputs."""
    name: str
    glsl_type: str
    value: Any
    min: Optional[float] = None
    max: Optional[float] = None

    def to_glsl(self) -> str:
        return f"uniform {self.glsl_type} {self.name};"

    def to_dict(self) -> dict:
        result = {"name": self.name, "type": self.glsl_type, "value": self.value}
        if self.min is not None:
            result["min"] = self.min
        if self.max is not None:
            result["max"] = self.max
        return result


def default_uniforms() -> List[Uniform]:
    """Uniforms every compiled sculpture declares, in order."""
    return [
        Uniform("time", "float", 0.0),
        Uniform("opacity", "float", 1.0),
        Uniform("sculptureCenter", "vec3", [0.0, 0.0, 0.0]),
        Uniform("mouse", "vec3", [0.5, 0.5, 0.5]),
        Uniform("stepSize", "float", DEFAULT_STEP_SIZE),
    ]


# Names the shader templates already use
RESERVED_NAMES = frozenset({
    "p", "d", "op", "normal", "material", "occ", "mouseIntersect", "lightDirection",
    "time", "opacity", "sculptureCenter", "mouse", "stepSize",
    "bool", "int", "float", "vec2", "vec3", "vec4", "mat2", "mat3", "mat4", "void",
    "true", "false", "if", "else", "for", "while", "do", "return", "break", "continue",
    "in", "out", "inout", "const", "uniform", "struct", "discard", "Material",
})
GENERATED_NAME = re.compile(r"^(scope_\d+_.*|prim_\d+)$")


class CompilerState:
    """
    The mutable state of one compile.

    Tracks:
    - The geometry and color emission buffers and their indentation
    - Uniforms and the ray-marching step size
    - The CSG scope stack
    - GLSL names already taken by declared temporaries
    - The current lexical environment and return signalling
    """

    def __init__(self, source: str = "", global_values: Optional[Dict[str, Value]] = None):
        self.geometry: List[str] = []
        self.color: List[str] = []
        self.indent_level = BASE_INDENT_LEVEL
        self.uniforms: List[Uniform] = default_uniforms()
        self.step_size = DEFAULT_STEP_SIZE
        self.use_lighting = True
        self.source_lines = source.split('\n') if source else []

        self.global_env = Environment(variables=dict(global_values or {}), name="global")
        self.env = self.global_env

        self._taken_names: Set[str] = set(RESERVED_NAMES)
        self.locals: Set[str] = set()
        self._claimed: Set[str] = set()

        # Set by the interpreter so builtins can call DSL closures
        self.call: Optional[Callable[[Any, List[Value]], Value]] = None

        self._should_return = False
        self._return_value: Value = None

        self.csg = CsgStack(self)

    # -------------------------------------------------------------------------
    # Emission
    # -------------------------------------------------------------------------

    def _indented(self, statement: str) -> str:
        return f"{INDENT * self.indent_level}{statement}"

    def emit(self, statement: str) -> None:
        """Append a statement to both buffers."""
        line = self._indented(statement)
        self.geometry.append(line)
        self.color.append(line)

    def emit_color(self, statement: str) -> None:
        """Append a statement to the color buffer only."""
        self.color.append(self._indented(statement))

    @contextmanager
    def indented(self):
        """Emit statements one level deeper (if/else bodies)."""
        self.indent_level += 1
        try:
            yield
        finally:
            self.indent_level -= 1

    @property
    def geometry_length(self) -> int:
        """Characters emitted to the geometry buffer so far."""
        return sum(len(line) + 1 for line in self.geometry)

    # -------------------------------------------------------------------------
    # Names and uniforms
    # -------------------------------------------------------------------------

    def declare_local(self, name: str) -> str:
        """Reserve a unique GLSL name for a temporary named after a DSL variable."""
        if GENERATED_NAME.match(name):
            name = f"user_{name}"
        candidate = name
        suffix = 0
        while candidate in self._taken_names:
            suffix += 1
            candidate = f"{name}_{suffix}"
        self._taken_names.add(candidate)
        self.locals.add(candidate)
        return candidate

    def claim_temporary(self, name: str, value: Value) -> None:
        """Record that `name` in the current scope owns the temporary holding `value`."""
        if not isinstance(value, Var) or value.text not in self.locals:
            return
        if value.text in self._claimed:
            return
        self._claimed.add(value.text)
        self.env.temporaries[name] = value.text

    def reserve_name(self, name: str) -> None:
        self._taken_names.add(name)

    def add_uniform(self, uniform: Uniform) -> None:
        if uniform.name in self._taken_names:
            raise error_duplicate_uniform(uniform.name)
        self.uniforms.append(uniform)
        self.reserve_name(uniform.name)

    # -------------------------------------------------------------------------
    # Lexical environment
    # -------------------------------------------------------------------------

    @contextmanager
    def new_scope(self, name: str = "block"):
        """
        Context manager to create a nested lexical scope.

        Usage:
            with state.new_scope("for-loop"):
                state.env.define("i", Number(0))
        """
        old_env = self.env
        self.env = old_env.child(name)
        try:
            yield self.env
        finally:
            self.env = old_env

    @contextmanager
    def use_environment(self, env: Environment):
        """Temporarily switch to another environment (a closure's)."""
        old_env = self.env
        self.env = env
        try:
            yield env
        finally:
            self.env = old_env

    def get_source_line(self, line_num: int) -> Optional[str]:
        if 1 <= line_num <= len(self.source_lines):
            return self.source_lines[line_num - 1]
        return None

    # -------------------------------------------------------------------------
    # Return signalling
    # -------------------------------------------------------------------------

    def signal_return(self, value: Value) -> None:
        """Signal an early return from a function."""
        self._should_return = True
        self._return_value = value

    @property
    def should_return(self) -> bool:
        return self._should_return

    @property
    def return_value(self) -> Value:
        return self._return_value

    def clear_return(self) -> None:
        """Clear the return signal (used after handling return)."""
        self._should_return = False
        self._return_value = None
