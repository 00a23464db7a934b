"""
Wraps the emitted statement buffers in the shader function templates.

The geometry buffer becomes the body of `float surfaceDistance(vec3 p)` and
the color buffer the body of `vec3 shade(vec3 p, vec3 normal)`. Both read
the base scope (scope_0_) that every compile opens first.
"""

from typing import Iterable, List

from .runtime.context import Uniform


GEOMETRY_TEMPLATE = """
float surfaceDistance(vec3 p) {{
    vec3 normal = vec3(0.0,1.0,0.0);
    vec3 mouseIntersect = vec3(0.0,1.0,0.0);
    float d = 100.0;
    vec3 op = p;
{body}
    return scope_0_d;
}}"""

SHADING_TEMPLATE = """
vec3 shade(vec3 p, vec3 normal) {{
    float d = 100.0;
    vec3 op = p;
    vec3 lightDirection = vec3(0.0, 1.0, 0.0);
    vec3 mouseIntersect = vec3(0.0,1.0,0.0);
    #ifdef USE_PBR
    Material material = Material(vec3(1.0),0.5,0.7,1.0);
    Material selectedMaterial = Material(vec3(1.0),0.5,0.7,1.0);
    #else
    float light = 1.0;
    float occ = 1.0;
    vec3 color = vec3(1.0,1.0,1.0);
    vec3 selectedColor = vec3(1.0,1.0,1.0);
    #endif
{body}
{unlit}
    #ifdef USE_PBR
    return pbrLighting(
        worldPos.xyz,
        normal,
        lightDirection,
        scope_0_material
        );
    #else
    return scope_0_material.albedo*simpleLighting(p, normal, lightDirection)*occ;
    #endif
}}"""

UNLIT_RETURN = "    return scope_0_material.albedo;"


def _join(lines: Iterable[str]) -> str:
    return "\n".join(lines)


def build_geometry_source(geometry: List[str]) -> str:
    """Wrap geometry statements in the surfaceDistance() template."""
    return GEOMETRY_TEMPLATE.format(body=_join(geometry))


def build_shading_source(color: List[str], use_lighting: bool = True) -> str:
    """
    Wrap color statements in the shade() template.

    With lighting disabled the function returns the base scope's albedo
    before any lighting model runs.
    """
    return SHADING_TEMPLATE.format(
        body=_join(color),
        unlit="" if use_lighting else UNLIT_RETURN,
    )


def uniforms_to_glsl(uniforms: List[Uniform]) -> str:
    """Uniform declarations, one per line, in declaration order."""
    return "".join(f"{u.to_glsl()}\n" for u in uniforms)
