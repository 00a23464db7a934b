"""
Compile sculpt source to GLSL.

The pipeline is:

    source -> tokens -> AST -> normalized AST -> interpreter run -> templates

compile_sculpt() never raises for errors in the program being compiled; the
formatted diagnostic is returned in CompileResult.error instead.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Union

from .assembler import build_geometry_source, build_shading_source, uniforms_to_glsl
from .ast import Program
from .config import DEFAULT_STEP_SIZE
from .errors import Diagnostic, DslError, error_unbalanced_scopes, error_recursion_limit
from .lexer import tokenize
from .parser import parse
from .runtime.builtins import BuiltinRegistry, get_builtin_registry, global_values
from .runtime.catalogue import Catalogue
from .runtime.context import CompilerState, Uniform
from .runtime.interpreter import Interpreter
from .transforms import default_pipeline

logger = logging.getLogger(__name__)


@dataclass
class CompileResult:
    """Output of one compile."""
    uniforms: List[Uniform] = field(default_factory=list)
    step_size: float = DEFAULT_STEP_SIZE
    geometry_glsl: str = ""
    shading_glsl: str = ""
    error: Optional[str] = None
    diagnostic: Optional[Diagnostic] = None

    @property
    def success(self) -> bool:
        return self.error is None

    @property
    def uniforms_glsl(self) -> str:
        return uniforms_to_glsl(self.uniforms)

    def to_dict(self) -> dict:
        """JSON-serializable record, keyed the way shader hosts read it."""
        return {
            "uniforms": [u.to_dict() for u in self.uniforms],
            "stepSizeConstant": self.step_size,
            "geometryGLSL": self.geometry_glsl,
            "shadingGLSL": self.shading_glsl,
            "error": self.error,
        }


def normalize_source(source: str, filename: Optional[str] = None) -> Program:
    """Lex, parse and normalize a program without running it."""
    tokens = tokenize(source, filename)
    program = parse(tokens, filename=filename, source=source)
    return default_pipeline().apply(program)


def _registry_for(catalogue: Optional[Union[Catalogue, str, Path]]) -> BuiltinRegistry:
    if isinstance(catalogue, Catalogue):
        return BuiltinRegistry(catalogue)
    return get_builtin_registry(catalogue)


def compile_sculpt(
    source: str,
    filename: Optional[str] = None,
    catalogue: Optional[Union[Catalogue, str, Path]] = None,
) -> CompileResult:
    """
    Compile a sculpt program.

    Args:
        source: Program text
        filename: Name used in diagnostics
        catalogue: A loaded Catalogue, or the path of a bindings YAML file;
            defaults to the packaged bindings

    Returns:
        CompileResult with the shader sources, or with `error` set
    """
    registry = _registry_for(catalogue)
    state = CompilerState(source, global_values())

    try:
        program = normalize_source(source, filename)
        Interpreter(state, registry).run(program)
        if state.csg.depth != 1:
            raise error_unbalanced_scopes(state.csg.depth)
    except RecursionError:
        # Raised outside the interpreter's own guard (deeply nested source)
        error = error_recursion_limit()
        logger.warning("compile failed: %s", error.message)
        return CompileResult(error=str(error), diagnostic=error.diagnostic)
    except DslError as e:
        logger.warning("compile failed: %s", e.message)
        return CompileResult(error=str(e), diagnostic=e.diagnostic)

    logger.debug("compiled %s: %d uniforms, %d scopes, %d primitives",
                 filename or "<sculpt>", len(state.uniforms),
                 state.csg.scope_count, state.csg.primitive_count)

    return CompileResult(
        uniforms=state.uniforms,
        step_size=state.step_size,
        geometry_glsl=build_geometry_source(state.geometry),
        shading_glsl=build_shading_source(state.color, state.use_lighting),
    )
