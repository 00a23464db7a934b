"""
Nested CSG scopes.

Every shape() call opens a scope with its own distance, position and
material variables in the emitted GLSL. Primitives evaluated inside a scope
are folded into the scope's distance with the scope's combine mode; when the
scope closes, its distance and material are folded into the parent the same
way.

Emitted names for scope N:

    scope_N_d                distance accumulated so far
    scope_N_p                local space position
    scope_N_material         material of the closest surface (color only)
    scope_N_currentMaterial  material applied to the next primitive (color only)
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Protocol

from ..config import SENTINEL_DISTANCE, ROOT_POSITION, ROOT_MATERIAL
from .values import Value, Number, Var, vec3_var, to_text


class CsgMode(Enum):
    """How a scope combines primitives into its distance."""
    UNION = "add"
    DIFFERENCE = "subtract"
    INTERSECT = "intersect"
    BLEND = "smoothAdd"
    MIX = "mix"

    @property
    def function(self) -> str:
        """GLSL function implementing the mode."""
        return self.value

    @property
    def additive(self) -> bool:
        """Additive modes pick up the material of whichever primitive is closest."""
        return self in (CsgMode.UNION, CsgMode.BLEND, CsgMode.MIX)


class Emitter(Protocol):
    def emit(self, statement: str) -> None: ...
    def emit_color(self, statement: str) -> None: ...


@dataclass
class CsgScope:
    """One entry of the scope stack."""
    id: str
    position: Var
    mode: CsgMode = CsgMode.UNION
    blend_amount: Value = field(default_factory=lambda: Number(0.0))
    mix_amount: Value = field(default_factory=lambda: Number(0.0))

    @property
    def distance(self) -> str:
        return f"{self.id}d"

    @property
    def material(self) -> str:
        return f"{self.id}material"

    @property
    def current_material(self) -> str:
        return f"{self.id}currentMaterial"

    @property
    def mode_argument(self) -> Optional[Value]:
        """Extra argument the combine function takes, if any."""
        if self.mode is CsgMode.BLEND:
            return self.blend_amount
        if self.mode is CsgMode.MIX:
            return self.mix_amount
        return None


class CsgStack:
    """
    The stack of open CSG scopes for one compile.

    The base scope is pushed on construction and is never popped, so
    ``current`` is always defined.
    """

    def __init__(self, emitter: Emitter):
        self.emitter = emitter
        self.scopes: List[CsgScope] = []
        self.scope_count = 0
        self.primitive_count = 0
        self.push_count = 0
        self.pop_count = 0
        self.push()

    @property
    def current(self) -> CsgScope:
        return self.scopes[-1]

    @property
    def depth(self) -> int:
        return len(self.scopes)

    @property
    def parent(self) -> Optional[CsgScope]:
        return self.scopes[-2] if len(self.scopes) > 1 else None

    def push(self) -> CsgScope:
        """Open a new scope inheriting position and material from the current one."""
        parent = self.scopes[-1] if self.scopes else None
        scope_id = f"scope_{self.scope_count}_"
        self.scope_count += 1

        parent_position = parent.position.text if parent else ROOT_POSITION
        parent_material = parent.current_material if parent else ROOT_MATERIAL

        scope = CsgScope(id=scope_id, position=vec3_var(f"{scope_id}p"))
        self.emitter.emit(f"float {scope.distance} = {SENTINEL_DISTANCE};")
        self.emitter.emit(f"vec3 {scope.position.text} = {parent_position};")
        self.emitter.emit_color(f"Material {scope.material} = {parent_material};")
        self.emitter.emit_color(f"Material {scope.current_material} = {parent_material};")

        self.scopes.append(scope)
        if parent is not None:
            self.push_count += 1
        return scope

    def pop(self) -> CsgScope:
        """Close the current scope and fold it into its parent."""
        if len(self.scopes) < 2:
            raise IndexError("cannot pop the base scope")
        child = self.scopes.pop()
        self.pop_count += 1
        self.combine(child.distance, child.material)
        return child

    def combine(self, candidate: str, material: Optional[str] = None) -> str:
        """
        Fold a primitive distance into the current scope.

        Args:
            candidate: GLSL text of the distance to fold in
            material: Material of the candidate; defaults to the scope's
                current material

        Returns:
            The name of the primitive temporary that was declared
        """
        scope = self.current
        prim = f"prim_{self.primitive_count}"
        self.primitive_count += 1

        self.emitter.emit(f"float {prim} = {candidate};")
        if scope.mode.additive:
            chosen = material if material is not None else scope.current_material
            self.emitter.emit_color(
                f"if ({prim} < {scope.distance}) {{ {scope.material} = {chosen}; }}"
            )

        args = [prim, scope.distance]
        extra = scope.mode_argument
        if extra is not None:
            args.append(to_text(extra))
        self.emitter.emit(f"{scope.distance} = {scope.mode.function}({', '.join(args)});")
        return prim

    def set_mode(self, mode: CsgMode, amount: Optional[Value] = None) -> None:
        scope = self.current
        scope.mode = mode
        if mode is CsgMode.BLEND and amount is not None:
            scope.blend_amount = amount
        elif mode is CsgMode.MIX and amount is not None:
            scope.mix_amount = amount
