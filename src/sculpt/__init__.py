"""
sculpt - a compiler from a small JavaScript-like modelling language to GLSL.

A sculpt program describes a signed distance field with primitives
(sphere, box, ...), transformations of space and CSG combination modes.
The compiler runs the program once, folding everything known at compile
time and writing the rest as GLSL statements. The result is two shader
functions: `surfaceDistance()` for ray marching and `shade()` for color.

This module provides:
- Lexer: Tokenizes sculpt source code
- Parser: Builds an AST from tokens
- Transforms: Normalization passes that lower operators and control flow
- Runtime: The staged interpreter and its builtins
- compile_sculpt: The whole pipeline in one call

Usage:
    from sculpt import compile_sculpt

    result = compile_sculpt('''
        let size = input(0.5, 0.1, 1.0);
        rotateY(time);
        box(size, size, size);
    ''')
    if result.success:
        print(result.geometry_glsl)
    else:
        print(result.error)
"""

from .tokens import (
    Token,
    TokenType,
    SourceLocation,
    SourceSpan,
    KEYWORDS,
)

from .lexer import (
    Lexer,
    tokenize,
)

from .parser import (
    Parser,
    parse,
)

from .ast import (
    AstNode,
    Program,
    dump_ast,
)

from .errors import (
    ErrorSeverity,
    Diagnostic,
    DslError,
    ParseError,
    LexerError,
    TypeError,
    UnboundIdentifierError,
    DimensionError,
    DimensionMismatchError,
    SemanticError,
)

from .transforms import default_pipeline

from .assembler import (
    build_geometry_source,
    build_shading_source,
    uniforms_to_glsl,
)

from .compiler import (
    CompileResult,
    compile_sculpt,
    normalize_source,
)


__version__ = "0.1.0"

__all__ = [
    # Tokens
    "Token",
    "TokenType",
    "SourceLocation",
    "SourceSpan",
    "KEYWORDS",
    # Lexer
    "Lexer",
    "tokenize",
    # Parser
    "Parser",
    "parse",
    # AST
    "AstNode",
    "Program",
    "dump_ast",
    # Errors
    "ErrorSeverity",
    "Diagnostic",
    "DslError",
    "ParseError",
    "LexerError",
    "TypeError",
    "UnboundIdentifierError",
    "DimensionError",
    "DimensionMismatchError",
    "SemanticError",
    # Transforms
    "default_pipeline",
    # Assembler
    "build_geometry_source",
    "build_shading_source",
    "uniforms_to_glsl",
    # Compiler
    "CompileResult",
    "compile_sculpt",
    "normalize_source",
]
