"""
Statement emitters.

Each emitter validates its arguments and appends GLSL statements that act on
the current CSG scope: its position (P), distance (D) or current material
(M). Position and distance statements go to both buffers because the
shading pass re-evaluates the geometry; material and lighting statements go
to the color buffer only.
"""

from typing import Optional

from ..errors import error_arity, error_type
from .csg import CsgMode
from .values import (
    Value, Number, Var,
    float_var, vec3_var, format_number, type_name,
    ensure_scalar, ensure_dims, to_text,
)


def _vector_argument(func_name: str, x: Value, y: Optional[Value], z: Optional[Value],
                     allowed=(3,)) -> str:
    """GLSL text for either one vector argument or three scalar components."""
    if y is None and z is None:
        ensure_dims(func_name, x, allowed)
        return to_text(x)
    if y is None or z is None:
        raise error_arity(func_name, "1 or 3", 2)
    for component in (x, y, z):
        ensure_scalar(func_name, component)
    return f"vec3({to_text(x)}, {to_text(y)}, {to_text(z)})"


def _negated_text(value: Value) -> str:
    if isinstance(value, Number):
        return format_number(-value.value)
    text = to_text(value)
    return f"-({text})" if text.startswith('-') else f"-{text}"


# --- Position ---

def reset(state) -> None:
    """Return to the parent scope's position (the original point at the base)."""
    parent = state.csg.parent
    origin = parent.position.text if parent is not None else "op"
    state.emit(f"{state.csg.current.position.text} = {origin};")


def displace(state, x, y=None, z=None) -> None:
    offset = _vector_argument("displace", x, y, z, allowed=(1, 3))
    state.emit(f"{state.csg.current.position.text} -= {offset};")


def set_space(state, x, y=None, z=None) -> None:
    position = _vector_argument("setSpace", x, y, z)
    state.emit(f"{state.csg.current.position.text} = {position};")


def repeat(state, spacing, repetitions) -> None:
    """Repeat space in a finite grid of ``repetitions`` cells each way."""
    ensure_dims("repeat", spacing, (1, 3))
    ensure_dims("repeat", repetitions, (1, 3))
    p = state.csg.current.position.text
    s = to_text(spacing)
    state.emit(
        f"{p} = {p} - {s}*clamp(round({p}/{s}), {_negated_text(repetitions)}, {to_text(repetitions)});"
    )


def _rotate(func_name: str, plane: str):
    def _impl(state, angle) -> None:
        ensure_scalar(func_name, angle)
        p = state.csg.current.position.text
        state.emit(f"{p}.{plane} = {p}.{plane}*rot2({to_text(angle)});")
    return _impl


def _mirror(axis: str):
    def _impl(state) -> None:
        p = state.csg.current.position.text
        state.emit(f"{p}.{axis} = abs({p}.{axis});")
    return _impl


def mirror_xyz(state) -> None:
    p = state.csg.current.position.text
    state.emit(f"{p} = abs({p});")


def _flip(axis: str):
    def _impl(state) -> None:
        p = state.csg.current.position.text
        state.emit(f"{p}.{axis} = -{p}.{axis};")
    return _impl


# --- Distance ---

def expand(state, amount) -> None:
    ensure_scalar("expand", amount)
    state.emit(f"{state.csg.current.distance} -= {to_text(amount)};")


def shell(state, depth) -> None:
    ensure_scalar("shell", depth)
    d = state.csg.current.distance
    state.emit(f"{d} = shell({d}, {to_text(depth)});")


def set_sdf(state, distance) -> None:
    """Fold an arbitrary distance expression into the current scope."""
    ensure_scalar("setSDF", distance)
    state.csg.combine(to_text(distance))


def get_sdf(state) -> Var:
    return float_var(state.csg.current.distance)


# --- Material and lighting ---

def color(state, r, g=None, b=None) -> None:
    material = state.csg.current.current_material
    if g is None and b is None:
        if not (isinstance(r, Var) and r.dims == 3):
            raise error_type(f"albedo must be a vec3. Was given: {type_name(r)}")
        state.emit_color(f"{material}.albedo = {r.text};")
        return
    state.emit_color(f"{material}.albedo = {_vector_argument('color', r, g, b)};")


def metal(state, value) -> None:
    ensure_scalar("metal", value)
    state.emit_color(f"{state.csg.current.current_material}.metallic = {to_text(value)};")


def shine(state, value) -> None:
    ensure_scalar("shine", value)
    state.emit_color(f"{state.csg.current.current_material}.roughness = 1.0 - {to_text(value)};")


def light_direction(state, x, y=None, z=None) -> None:
    state.emit_color(f"lightDirection = {_vector_argument('lightDirection', x, y, z)};")


def occlusion(state, amount=None) -> None:
    amt = "1.0"
    if amount is not None:
        ensure_scalar("occlusion", amount)
        amt = to_text(amount)
    state.emit_color(
        f"{state.csg.current.current_material}.ao = mix(1.0, occlusion(op,normal), {amt});"
    )


def no_lighting(state) -> None:
    state.use_lighting = False


def basic_lighting(state) -> None:
    # Lighting is on unless noLighting() was called
    return None


# --- CSG modes ---

def _mode(mode: CsgMode, func_name: str):
    if mode in (CsgMode.BLEND, CsgMode.MIX):
        def _impl(state, amount) -> None:
            ensure_scalar(func_name, amount)
            state.csg.set_mode(mode, amount)
    else:
        def _impl(state) -> None:
            state.csg.set_mode(mode)
    return _impl


# --- Queries ---

def get_space(state) -> Var:
    return state.csg.current.position


def mouse_intersection(state) -> Var:
    state.emit_color("mouseIntersect = mouseIntersection();")
    return vec3_var("mouseIntersect")


def get_ray_direction(state) -> Var:
    return vec3_var("getRayDirection()")


def get_spherical(state) -> Var:
    return vec3_var(f"toSpherical({state.csg.current.position.text})")


# (name, implementation, min args, max args)
EMITTERS = [
    ("reset", reset, 0, 0),
    ("displace", displace, 1, 3),
    ("setSpace", set_space, 1, 3),
    ("repeat", repeat, 2, 2),
    ("rotateX", _rotate("rotateX", "yz"), 1, 1),
    ("rotateY", _rotate("rotateY", "xz"), 1, 1),
    ("rotateZ", _rotate("rotateZ", "xy"), 1, 1),
    ("mirrorX", _mirror("x"), 0, 0),
    ("mirrorY", _mirror("y"), 0, 0),
    ("mirrorZ", _mirror("z"), 0, 0),
    ("mirrorXYZ", mirror_xyz, 0, 0),
    ("flipX", _flip("x"), 0, 0),
    ("flipY", _flip("y"), 0, 0),
    ("flipZ", _flip("z"), 0, 0),
    ("expand", expand, 1, 1),
    ("shell", shell, 1, 1),
    ("setSDF", set_sdf, 1, 1),
    ("getSDF", get_sdf, 0, 0),
    ("color", color, 1, 3),
    ("metal", metal, 1, 1),
    ("shine", shine, 1, 1),
    ("lightDirection", light_direction, 1, 3),
    ("occlusion", occlusion, 0, 1),
    ("noLighting", no_lighting, 0, 0),
    ("basicLighting", basic_lighting, 0, 0),
    ("union", _mode(CsgMode.UNION, "union"), 0, 0),
    ("difference", _mode(CsgMode.DIFFERENCE, "difference"), 0, 0),
    ("intersect", _mode(CsgMode.INTERSECT, "intersect"), 0, 0),
    ("blend", _mode(CsgMode.BLEND, "blend"), 1, 1),
    ("mixGeo", _mode(CsgMode.MIX, "mixGeo"), 1, 1),
    ("getSpace", get_space, 0, 0),
    ("mouseIntersection", mouse_intersection, 0, 0),
    ("getRayDirection", get_ray_direction, 0, 0),
    ("getSpherical", get_spherical, 0, 0),
]
