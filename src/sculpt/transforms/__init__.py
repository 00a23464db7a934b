"""
AST transformation framework and normalization passes.

Usage:
    from sculpt.transforms import default_pipeline

    normalized = default_pipeline().apply(program)
"""

from .base import (
    AstTransform,
    TreeTransform,
    TransformPipeline,
)
from .normalize import (
    CompoundAssignmentTransform,
    OperatorTransform,
    InputNamingTransform,
    ConditionalTransform,
    DeclarationTransform,
    default_pipeline,
)

__all__ = [
    'AstTransform',
    'TreeTransform',
    'TransformPipeline',
    'CompoundAssignmentTransform',
    'OperatorTransform',
    'InputNamingTransform',
    'ConditionalTransform',
    'DeclarationTransform',
    'default_pipeline',
]
