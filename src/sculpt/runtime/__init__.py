"""
sculpt runtime - staged evaluation of normalized programs into GLSL.

This module provides:
- Interpreter: Runs a program once at compile time
- CompilerState: Emission buffers, uniforms and settings of one compile
- CsgStack: Nested CSG scopes and primitive combination
- BuiltinRegistry: Operators, emitters and catalogue functions
- Values: Compile-time constants and symbolic GLSL values
"""

from .values import (
    GlslType,
    Number,
    Boolean,
    String,
    Var,
    Closure,
    BuiltinFunction,
    Value,
    SymbolicValue,
    float_var,
    bool_var,
    vec3_var,
    format_number,
    type_name,
    to_var,
    to_text,
)

from .context import (
    Environment,
    Uniform,
    CompilerState,
    default_uniforms,
)

from .csg import (
    CsgMode,
    CsgScope,
    CsgStack,
)

from .catalogue import (
    Catalogue,
    CatalogueError,
    Signature,
    load_catalogue,
    parse_catalogue,
)

from .builtins import (
    BuiltinRegistry,
    get_builtin_registry,
    global_values,
)

from .interpreter import Interpreter


__all__ = [
    # Values
    "GlslType",
    "Number",
    "Boolean",
    "String",
    "Var",
    "Closure",
    "BuiltinFunction",
    "Value",
    "SymbolicValue",
    "float_var",
    "bool_var",
    "vec3_var",
    "format_number",
    "type_name",
    "to_var",
    "to_text",
    # Context
    "Environment",
    "Uniform",
    "CompilerState",
    "default_uniforms",
    # CSG
    "CsgMode",
    "CsgScope",
    "CsgStack",
    # Catalogue
    "Catalogue",
    "CatalogueError",
    "Signature",
    "load_catalogue",
    "parse_catalogue",
    # Builtins
    "BuiltinRegistry",
    "get_builtin_registry",
    "global_values",
    # Interpreter
    "Interpreter",
]
