"""
Tests for the sculpt interpreter, builtins and statement emitters.
"""

import math
import textwrap

import pytest

from sculpt import (
    normalize_source,
    TypeError as SculptTypeError,
    UnboundIdentifierError, DimensionError, DimensionMismatchError, SemanticError,
)
from sculpt.runtime import (
    CompilerState, Interpreter, BuiltinRegistry, get_builtin_registry, global_values,
    GlslType, Number, Boolean, String, Var, CsgMode, float_var, vec3_var,
)
from sculpt.runtime.builtins import binary_op


def run(source: str) -> CompilerState:
    """Normalize and run a program, returning the compiler state."""
    source = textwrap.dedent(source)
    state = CompilerState(source, global_values())
    Interpreter(state).run(normalize_source(source))
    return state


def geometry_body(state):
    """Geometry statements after the base scope declarations, unindented."""
    return [line.strip() for line in state.geometry[2:]]


def color_body(state):
    """Color statements after the base scope declarations, unindented."""
    return [line.strip() for line in state.color[4:]]


def lookup(state, name):
    return state.global_env.lookup(name)


# --- Operators ---

class TestConstantFolding:
    """Constants are evaluated at compile time with native semantics."""

    @pytest.mark.parametrize("op, a, b, expected", [
        ('+', 2, 3, 5),
        ('-', 2, 3, -1),
        ('*', 2, 3, 6),
        ('/', 3, 2, 1.5),
        ('%', 7, 3, 1),
        ('%', -7, 3, -1),
    ])
    def test_arithmetic(self, op, a, b, expected):
        assert binary_op(None, Number(a), Number(b), String(op)) == Number(expected)

    @pytest.mark.parametrize("op, expected", [
        ('<', True), ('<=', True), ('>', False), ('>=', False), ('==', False), ('!=', True),
    ])
    def test_comparison(self, op, expected):
        assert binary_op(None, Number(1), Number(2), String(op)) == Boolean(expected)

    def test_boolean_logic(self):
        assert binary_op(None, Boolean(True), Boolean(False), String('&&')) == Boolean(False)
        assert binary_op(None, Boolean(True), Boolean(False), String('||')) == Boolean(True)
        assert binary_op(None, Boolean(True), Boolean(True), String('==')) == Boolean(True)

    def test_string_concatenation(self):
        assert binary_op(None, String("a"), String("b"), String('+')) == String("ab")

    def test_division_by_zero(self):
        with pytest.raises(SemanticError) as exc_info:
            binary_op(None, Number(1), Number(0), String('/'))
        assert exc_info.value.code == "E302"

    def test_non_finite_operand(self):
        with pytest.raises(SemanticError) as exc_info:
            binary_op(None, Number(math.inf), Number(2), String('%'))
        assert exc_info.value.code == "E306"

    def test_overflow(self):
        with pytest.raises(SemanticError) as exc_info:
            binary_op(None, Number(1e308), Number(10), String('*'))
        assert exc_info.value.code == "E306"

    def test_program_folds_expression(self):
        state = run("let a = 2 * 3 + 1; sphere(a);")
        assert lookup(state, "a") == Number(7)
        assert geometry_body(state)[0] == "float prim_0 = sphere(scope_0_p, 7.00000000);"

    def test_constants(self):
        state = run("let a = PI; let b = TAU;")
        assert lookup(state, "a") == Number(math.pi)
        assert lookup(state, "b") == Number(2 * math.pi)


class TestSymbolicOperators:
    """Operators on Vars build GLSL text."""

    def test_arithmetic_text(self):
        result = binary_op(None, float_var("time"), Number(1), String('+'))
        assert result == Var(GlslType.FLOAT, "(time + 1.00000000)")

    def test_operand_order_is_kept(self):
        a = binary_op(None, float_var("a"), float_var("b"), String('+'))
        b = binary_op(None, float_var("b"), float_var("a"), String('+'))
        assert a.text != b.text

    def test_scalar_times_vector(self):
        result = binary_op(None, Number(2), vec3_var("p"), String('*'))
        assert result.glsl_type is GlslType.VEC3
        assert result.text == "(2.00000000 * p)"

    def test_modulo_uses_mod(self):
        result = binary_op(None, float_var("t"), Number(2), String('%'))
        assert result.text == "mod(t, 2.00000000)"

    def test_comparison_gives_bool(self):
        result = binary_op(None, float_var("t"), Number(1), String('>'))
        assert result == Var(GlslType.BOOL, "(t > 1.00000000)")

    def test_comparison_needs_scalars(self):
        with pytest.raises(DimensionError) as exc_info:
            binary_op(None, vec3_var("p"), Number(1), String('<'))
        assert exc_info.value.code == "E203"

    def test_vector_size_mismatch(self):
        with pytest.raises(DimensionMismatchError) as exc_info:
            binary_op(None, Var(GlslType.VEC2, "a"), vec3_var("b"), String('+'))
        assert exc_info.value.code == "E204"

    def test_mismatch_emits_nothing(self):
        source = "let bad = vec2(1, time) + vec3(1, 2, time);"
        state = CompilerState(source, global_values())
        before = list(state.geometry)
        with pytest.raises(DimensionMismatchError):
            Interpreter(state).run(normalize_source(source))
        assert state.geometry == before

    def test_booleans_are_not_numeric(self):
        with pytest.raises(SculptTypeError):
            binary_op(None, Var(GlslType.BOOL, "c"), Number(1), String('+'))

    def test_logical_needs_booleans(self):
        with pytest.raises(SculptTypeError):
            binary_op(None, float_var("t"), Boolean(True), String('&&'))

    def test_logical_text(self):
        result = binary_op(None, Var(GlslType.BOOL, "a"), Boolean(True), String('||'))
        assert result.text == "(a || true)"

    def test_not_and_negate(self):
        state = run("let a = !(time > 1); let b = -time; let c = -2;")
        assert "bool a = !(time > 1.00000000);" in geometry_body(state)
        assert "float b = (-time);" in geometry_body(state)
        assert lookup(state, "c") == Number(-2)

    def test_not_rejects_numbers(self):
        with pytest.raises(SculptTypeError):
            run("let a = !1;")


# --- Declarations and assignment ---

class TestBindings:
    """Declarations name their GLSL temporaries after the DSL variable."""

    def test_symbolic_declaration(self):
        state = run("let a = time + 1;")
        assert geometry_body(state) == ["float a = (time + 1.00000000);"]
        assert lookup(state, "a") == Var(GlslType.FLOAT, "a")

    def test_constants_are_not_declared(self):
        state = run("let a = 3;")
        assert geometry_body(state) == []

    def test_name_collisions_get_suffixes(self):
        state = run("""
            let p = getSpace();
            let length = 1 + time;
        """)
        assert geometry_body(state) == [
            "vec3 p_1 = scope_0_p;",
            "float length_1 = (1.00000000 + time);",
        ]

    def test_shadowed_variable_gets_new_name(self):
        state = run("""
            let a = time;
            { let a = time * 2; }
        """)
        assert geometry_body(state) == ["float a = time;", "float a_1 = (time * 2.00000000);"]

    def test_assignment_writes_through(self):
        state = run("""
            let a = time;
            a = a * 2;
            a += 1;
        """)
        assert geometry_body(state) == [
            "float a = time;",
            "a = (a * 2.00000000);",
            "a = (a + 1.00000000);",
        ]

    def test_parameter_assignment_rebinds(self):
        state = run("""
            let t = time;
            function twice(a) { a = a * 2; return a; }
            let u = twice(t);
            sphere(t);
        """)
        body = geometry_body(state)
        assert body[:3] == [
            "float t = time;",
            "float u = (t * 2.00000000);",
            "float prim_0 = sphere(scope_0_p, t);",
        ]
        assert "t = (t * 2.00000000);" not in body

    def test_alias_assignment_rebinds(self):
        state = run("""
            let x = time;
            let y;
            y = x;
            y = y + 1;
            sphere(x);
        """)
        assert geometry_body(state)[:2] == [
            "float x = time;",
            "float prim_0 = sphere(scope_0_p, x);",
        ]
        assert lookup(state, "y") == Var(GlslType.FLOAT, "(x + 1.00000000)")

    def test_inner_declaration_writes_through(self):
        state = run("""
            let t = time;
            function bump(a) { let b = a; b = b + 1; return b; }
            let u = bump(t);
        """)
        assert geometry_body(state) == [
            "float t = time;",
            "float b = t;",
            "b = (b + 1.00000000);",
            "float u = b;",
        ]

    def test_assignment_must_keep_type(self):
        with pytest.raises(DimensionMismatchError):
            run("let a = time; a = getSpace();")

    def test_constant_assignment_rebinds(self):
        state = run("let a = 1; a = 2;")
        assert lookup(state, "a") == Number(2)
        assert geometry_body(state) == []

    def test_const_cannot_be_reassigned(self):
        with pytest.raises(SculptTypeError):
            run("const a = 1; a = 2;")
        with pytest.raises(SculptTypeError):
            run("const a = time; a = 2;")

    def test_component_assignment(self):
        state = run("let v = vec3(time, 0, 0); v.y = 1; v.xz += 2;")
        assert geometry_body(state) == [
            "vec3 v = vec3(time, 0.00000000, 0.00000000);",
            "v.y = 1.00000000;",
            "v.xz = (v.xz + 2.00000000);",
        ]

    def test_component_read(self):
        state = run("let q = getSpace().xz;")
        assert geometry_body(state) == ["vec2 q = scope_0_p.xz;"]

    def test_member_of_number(self):
        with pytest.raises(SculptTypeError):
            run("let a = 1; let b = a.x;")

    def test_unbound_identifier(self):
        with pytest.raises(UnboundIdentifierError) as exc_info:
            run("sphere(radius);")
        assert exc_info.value.message == "'radius' is not defined"

    def test_declared_without_value_is_undefined(self):
        state = run("let a;")
        assert lookup(state, "a") is None


# --- Functions ---

class TestFunctions:
    """Closures, hoisting and recursion."""

    def test_function_call(self):
        state = run("""
            function double(x) { return x * 2; }
            sphere(double(0.5));
        """)
        assert geometry_body(state)[0] == "float prim_0 = sphere(scope_0_p, 1.00000000);"

    def test_declarations_are_hoisted(self):
        state = run("""
            sphere(half(4));
            function half(x) { return x / 2; }
        """)
        assert "sphere(scope_0_p, 2.00000000)" in geometry_body(state)[0]

    def test_arrow_function_and_closure(self):
        state = run("""
            let k = 3;
            let scale = x => x * k;
            let r = scale(2);
        """)
        assert lookup(state, "r") == Number(6)

    def test_missing_arguments_are_undefined(self):
        state = run("""
            function f(a, b) { return b; }
            let r = f(1);
        """)
        assert lookup(state, "r") is None

    def test_function_without_return(self):
        state = run("function f() { } let r = f();")
        assert lookup(state, "r") is None

    def test_constant_recursion(self):
        state = run("""
            function fact(n) { if (n <= 1) { return 1; } return n * fact(n - 1); }
            let r = fact(5);
        """)
        assert lookup(state, "r") == Number(120)

    def test_return_from_constant_if_leaves_function(self):
        state = run("""
            function pick(n) {
                if (n > 0) return 1;
                return 2;
            }
            let a = pick(1);
            let b = pick(-1);
        """)
        assert lookup(state, "a") == Number(1)
        assert lookup(state, "b") == Number(2)

    def test_runaway_recursion(self):
        with pytest.raises(SemanticError) as exc_info:
            run("function f(n) { return f(n + 1); } f(0);")
        assert exc_info.value.code == "E304"

    def test_calling_a_number(self):
        with pytest.raises(SculptTypeError) as exc_info:
            run("let a = 1; a();")
        assert "'a' is not a function" in exc_info.value.message

    def test_builtins_can_be_shadowed(self):
        state = run("""
            function sphere(r) { box(r, r, r); }
            sphere(1);
        """)
        assert geometry_body(state)[0].startswith("float prim_0 = box(scope_0_p")


# --- Control flow ---

class TestControlFlow:
    """Constant and symbolic conditionals, loops."""

    def test_constant_if_runs_one_branch(self):
        state = run("if (1 < 2) { sphere(1); } else { box(1, 1, 1); }")
        body = geometry_body(state)
        assert any("sphere(" in line for line in body)
        assert not any("box(" in line for line in body)

    def test_constant_else_branch(self):
        state = run("if (false) sphere(1); else box(1, 1, 1);")
        assert "box(" in geometry_body(state)[0]

    def test_symbolic_if_emits_glsl_if(self):
        state = run("""
            if (time > 1) {
                color(1, 0, 0);
            } else {
                color(0, 0, 1);
            }
        """)
        assert state.color[4:] == [
            "    if ((time > 1.00000000)) {",
            "        scope_0_currentMaterial.albedo = vec3(1.00000000, 0.00000000, 0.00000000);",
            "    } else {",
            "        scope_0_currentMaterial.albedo = vec3(0.00000000, 0.00000000, 1.00000000);",
            "    }",
        ]
        assert geometry_body(state) == ["if ((time > 1.00000000)) {", "} else {", "}"]

    def test_symbolic_if_without_else(self):
        state = run("if (time > 1) { expand(0.1); }")
        assert state.geometry[2:] == [
            "    if ((time > 1.00000000)) {",
            "        scope_0_d -= 0.10000000;",
            "    }",
        ]

    def test_number_condition_is_rejected(self):
        with pytest.raises(SculptTypeError):
            run("if (1) { sphere(1); }")

    def test_return_inside_symbolic_if(self):
        with pytest.raises(SculptTypeError):
            run("""
                function f() {
                    if (time > 1) { return 1; }
                    return 2;
                }
                f();
            """)

    def test_constant_ternary(self):
        state = run("let k = 1 > 2 ? 10 : 20;")
        assert lookup(state, "k") == Number(20)

    def test_symbolic_ternary(self):
        state = run("let k = time > 1 ? 2 : 3;")
        assert geometry_body(state) == [
            "float k = ((time > 1.00000000) ? 2.00000000 : 3.00000000);",
        ]

    def test_symbolic_ternary_branch_sizes_must_match(self):
        with pytest.raises(DimensionMismatchError):
            run("let k = time > 1 ? 2 : getSpace();")

    def test_for_loop_unrolls(self):
        state = run("for (let i = 0; i < 3; i++) { sphere(i); }")
        prims = [line for line in geometry_body(state) if line.startswith("float prim_")]
        assert prims == [
            "float prim_0 = sphere(scope_0_p, 0.00000000);",
            "float prim_1 = sphere(scope_0_p, 1.00000000);",
            "float prim_2 = sphere(scope_0_p, 2.00000000);",
        ]

    def test_loop_variable_is_scoped(self):
        state = run("for (let i = 0; i < 2; i++) {}")
        assert not state.global_env.contains("i")

    def test_while_loop(self):
        state = run("""
            let n = 0;
            while (n < 4) { n += 1; }
        """)
        assert lookup(state, "n") == Number(4)

    def test_symbolic_loop_condition(self):
        with pytest.raises(SculptTypeError) as exc_info:
            run("while (time > 1) { }")
        assert "compile time" in exc_info.value.message

    def test_return_inside_loop(self):
        state = run("""
            function first() {
                for (let i = 0; i < 10; i++) { if (i == 3) return i; }
                return -1;
            }
            let r = first();
        """)
        assert lookup(state, "r") == Number(3)


# --- Shapes and CSG ---

class TestShapes:
    """shape() scopes and combine modes."""

    def test_sphere_at_base(self):
        state = run("sphere(1);")
        assert geometry_body(state) == [
            "float prim_0 = sphere(scope_0_p, 1.00000000);",
            "scope_0_d = add(prim_0, scope_0_d);",
        ]
        assert color_body(state)[1] == (
            "if (prim_0 < scope_0_d) { scope_0_material = scope_0_currentMaterial; }"
        )

    def test_shape_opens_and_closes_scope(self):
        state = run("""
            let ball = shape(() => { sphere(1); });
            ball();
        """)
        assert geometry_body(state) == [
            "float scope_1_d = 100.0;",
            "vec3 scope_1_p = scope_0_p;",
            "float prim_0 = sphere(scope_1_p, 1.00000000);",
            "scope_1_d = add(prim_0, scope_1_d);",
            "float prim_1 = scope_1_d;",
            "scope_0_d = add(prim_1, scope_0_d);",
        ]
        assert state.csg.depth == 1
        assert state.csg.push_count == 1
        assert state.csg.pop_count == 1

    def test_shape_passes_arguments_and_result(self):
        state = run("""
            let ball = shape((r) => { sphere(r); return r * 2; });
            let out = ball(0.5);
        """)
        assert lookup(state, "out") == Number(1)
        assert "float prim_0 = sphere(scope_1_p, 0.50000000);" in geometry_body(state)

    def test_nested_shapes(self):
        state = run("""
            let inner = shape(() => sphere(1));
            let outer = shape(() => { inner(); inner(); });
            outer();
        """)
        assert state.csg.push_count == 3
        assert state.csg.pop_count == 3
        assert state.csg.scope_count == 4

    def test_shape_requires_function(self):
        with pytest.raises(SculptTypeError):
            run("shape(1);")

    def test_modes(self):
        state = run("""
            difference(); sphere(1);
            intersect(); sphere(1);
            blend(0.2); sphere(1);
            mixGeo(0.5); sphere(1);
            union(); sphere(1);
        """)
        combines = [line for line in geometry_body(state) if line.startswith("scope_0_d =")]
        assert combines == [
            "scope_0_d = subtract(prim_0, scope_0_d);",
            "scope_0_d = intersect(prim_1, scope_0_d);",
            "scope_0_d = smoothAdd(prim_2, scope_0_d, 0.20000000);",
            "scope_0_d = mix(prim_3, scope_0_d, 0.50000000);",
            "scope_0_d = add(prim_4, scope_0_d);",
        ]
        assert state.csg.current.mode is CsgMode.UNION

    def test_blend_needs_scalar(self):
        with pytest.raises(SculptTypeError):
            run("blend(getSpace());")

    def test_set_and_get_sdf(self):
        state = run("setSDF(length(getSpace()) - 1); let d = getSDF();")
        body = geometry_body(state)
        assert body[0] == "float prim_0 = (length(scope_0_p) - 1.00000000);"
        assert lookup(state, "d") == Var(GlslType.FLOAT, "d")
        assert body[-1] == "float d = scope_0_d;"


# --- Emitters ---

class TestEmitters:
    """Position, distance, material and lighting statements."""

    def test_displace(self):
        state = run("displace(1, 2, 3); displace(getSpace()); displace(0.5);")
        assert geometry_body(state) == [
            "scope_0_p -= vec3(1.00000000, 2.00000000, 3.00000000);",
            "scope_0_p -= scope_0_p;",
            "scope_0_p -= 0.50000000;",
        ]

    def test_displace_with_two_arguments(self):
        with pytest.raises(SculptTypeError):
            run("displace(1, 2);")

    def test_set_space_and_reset(self):
        state = run("setSpace(0, 0, time); reset();")
        assert geometry_body(state) == [
            "scope_0_p = vec3(0.00000000, 0.00000000, time);",
            "scope_0_p = op;",
        ]

    def test_reset_inside_shape_returns_to_parent(self):
        state = run("shape(() => { reset(); })();")
        assert "scope_1_p = scope_0_p;" in geometry_body(state)

    def test_rotations(self):
        state = run("rotateX(1); rotateY(time); rotateZ(0);")
        assert geometry_body(state) == [
            "scope_0_p.yz = scope_0_p.yz*rot2(1.00000000);",
            "scope_0_p.xz = scope_0_p.xz*rot2(time);",
            "scope_0_p.xy = scope_0_p.xy*rot2(0.00000000);",
        ]

    def test_rotation_needs_scalar(self):
        with pytest.raises(SculptTypeError) as exc_info:
            run("rotateX(getSpace());")
        assert exc_info.value.message == "rotateX accepts only a scalar. Was given: vec3"

    def test_mirror_and_flip(self):
        state = run("mirrorX(); mirrorXYZ(); flipZ();")
        assert geometry_body(state) == [
            "scope_0_p.x = abs(scope_0_p.x);",
            "scope_0_p = abs(scope_0_p);",
            "scope_0_p.z = -scope_0_p.z;",
        ]

    def test_repeat(self):
        state = run("repeat(2, 3);")
        assert geometry_body(state) == [
            "scope_0_p = scope_0_p - 2.00000000*clamp(round(scope_0_p/2.00000000), "
            "-3.00000000, 3.00000000);",
        ]

    def test_expand_and_shell(self):
        state = run("expand(0.1); shell(0.05);")
        assert geometry_body(state) == [
            "scope_0_d -= 0.10000000;",
            "scope_0_d = shell(scope_0_d, 0.05000000);",
        ]

    def test_color_goes_to_color_buffer_only(self):
        state = run("color(1, 0.5, 0);")
        assert geometry_body(state) == []
        assert color_body(state) == [
            "scope_0_currentMaterial.albedo = vec3(1.00000000, 0.50000000, 0.00000000);",
        ]

    def test_color_from_vector(self):
        state = run("color(normal);")
        assert color_body(state) == ["scope_0_currentMaterial.albedo = normal;"]

    def test_color_single_number(self):
        with pytest.raises(SculptTypeError) as exc_info:
            run("color(1);")
        assert "albedo must be a vec3" in exc_info.value.message

    def test_material_properties(self):
        state = run("metal(0.8); shine(0.3); occlusion(); occlusion(0.5);")
        assert color_body(state) == [
            "scope_0_currentMaterial.metallic = 0.80000000;",
            "scope_0_currentMaterial.roughness = 1.0 - 0.30000000;",
            "scope_0_currentMaterial.ao = mix(1.0, occlusion(op,normal), 1.0);",
            "scope_0_currentMaterial.ao = mix(1.0, occlusion(op,normal), 0.50000000);",
        ]

    def test_lighting(self):
        state = run("lightDirection(0, 1, 0); basicLighting();")
        assert color_body(state) == ["lightDirection = vec3(0.00000000, 1.00000000, 0.00000000);"]
        assert state.use_lighting
        assert not run("noLighting();").use_lighting

    def test_queries(self):
        state = run("""
            let m = mouseIntersection();
            let dir = getRayDirection();
            let s = getSpherical();
        """)
        assert color_body(state)[0] == "mouseIntersect = mouseIntersection();"
        assert "vec3 dir = getRayDirection();" in geometry_body(state)
        assert "vec3 s = toSpherical(scope_0_p);" in geometry_body(state)
        assert "vec3 m = mouseIntersect;" in geometry_body(state)
        assert lookup(state, "m") == Var(GlslType.VEC3, "m")


# --- Constructors and settings ---

class TestConstructors:
    """float and vecN."""

    def test_vec3_components(self):
        state = run("let v = vec3(1, time, 2);")
        assert geometry_body(state) == ["vec3 v = vec3(1.00000000, time, 2.00000000);"]

    def test_splat(self):
        state = run("let v = vec3(time);")
        assert geometry_body(state) == ["vec3 v = vec3(time);"]

    def test_mixed_components(self):
        state = run("let v = vec4(getSpace(), 1);")
        assert geometry_body(state) == ["vec4 v = vec4(scope_0_p, 1.00000000);"]

    def test_wrong_component_count(self):
        with pytest.raises(DimensionMismatchError):
            run("let v = vec3(getSpace(), 1);")

    def test_float(self):
        state = run("let f = float(time);")
        assert geometry_body(state) == ["float f = float(time);"]

    def test_float_of_vector(self):
        with pytest.raises(DimensionMismatchError):
            run("let f = float(getSpace());")


class TestSettings:
    """input(), step size and quality."""

    def test_input(self):
        state = run('let r = input("radius", 1, 0, 2);')
        uniform = state.uniforms[-1]
        assert (uniform.name, uniform.glsl_type, uniform.value, uniform.min, uniform.max) == (
            "radius", "float", 1.0, 0.0, 2.0,
        )
        assert geometry_body(state) == ["float r = radius;"]
        assert lookup(state, "r") == Var(GlslType.FLOAT, "r")

    def test_input_named_after_variable(self):
        state = run("let size = input(0.5);")
        assert state.uniforms[-1].name == "size"
        assert (state.uniforms[-1].min, state.uniforms[-1].max) == (0.0, 1.0)
        assert geometry_body(state) == []

    def test_input_needs_constants(self):
        with pytest.raises(SculptTypeError):
            run("let size = input(time);")

    def test_input_name_must_be_string(self):
        with pytest.raises(SculptTypeError):
            run("input(1);")

    def test_duplicate_input(self):
        with pytest.raises(SemanticError):
            run("let a = input('k'); let b = input('k');")

    def test_input_cannot_take_a_glsl_name(self):
        with pytest.raises(SemanticError) as exc_info:
            run("let p = input(0.5);")
        assert exc_info.value.message == "uniform name 'p' is already in use"
        with pytest.raises(SemanticError):
            run("let a = time; let b = input('a');")

    def test_step_size(self):
        assert run("setStepSize(0.5);").step_size == 0.5

    def test_geometry_quality(self):
        assert run("setGeometryQuality(100);").step_size == pytest.approx(0.005)

    def test_step_size_needs_constant(self):
        with pytest.raises(SculptTypeError):
            run("setStepSize(time);")


# --- Catalogue functions ---

class TestCatalogueFunctions:
    """Functions generated from bindings.yaml."""

    def test_one_to_one_keeps_size(self):
        state = run("let s = sin(time); let a = abs(getSpace());")
        assert geometry_body(state) == ["float s = sin(time);", "vec3 a = abs(scope_0_p);"]

    def test_fixed_result_size(self):
        state = run("let l = length(getSpace()); let c = hsv2rgb(vec3(time, 1, 1));")
        assert geometry_body(state) == [
            "float l = length(scope_0_p);",
            "vec3 c = hsv2rgb(vec3(time, 1.00000000, 1.00000000));",
        ]

    def test_constant_arguments_become_text(self):
        state = run("let n = noise(getSpace() * 2);")
        assert geometry_body(state) == ["float n = noise((scope_0_p * 2.00000000));"]

    def test_arity(self):
        with pytest.raises(SculptTypeError) as exc_info:
            run("sphere(1, 2);")
        assert exc_info.value.message == "sphere takes 1 argument(s), 2 given"

    def test_geometry_vector_argument(self):
        state = run("boxFrame(vec3(1, 1, 1), 0.1);")
        assert geometry_body(state)[0] == (
            "float prim_0 = boxFrame(scope_0_p, vec3(1.00000000, 1.00000000, 1.00000000), "
            "0.10000000);"
        )

    def test_geometry_vector_argument_size(self):
        with pytest.raises(DimensionMismatchError):
            run("boxFrame(vec2(1, 1), 0.1);")

    def test_geometry_scalar_argument(self):
        with pytest.raises(SculptTypeError):
            run("sphere(getSpace());")


class TestRegistry:
    """Registry contents."""

    def test_contains_all_groups(self):
        registry = get_builtin_registry()
        for name in ("_binaryOp", "_if", "_bindName", "shape", "vec3", "input",
                     "displace", "union", "sphere", "noise", "sin", "dot"):
            assert registry.get_function(name) is not None

    def test_registry_is_cached(self):
        assert get_builtin_registry() is get_builtin_registry()

    def test_builtin_names_are_reserved(self):
        state = CompilerState()
        Interpreter(state, BuiltinRegistry())
        assert state.declare_local("sphere") == "sphere_1"
