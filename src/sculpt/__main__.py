#!/usr/bin/env python3
"""
CLI for the sculpt compiler.

Usage:
    python -m sculpt compile FILE.sculpt [-o DIR] [--json] [--bindings FILE.yaml]
    python -m sculpt check FILE.sculpt
    python -m sculpt uniforms FILE.sculpt

Examples:
    # Check syntax without running the program
    python -m sculpt check examples/spheres.sculpt

    # Write geometry.glsl, shading.glsl, uniforms.glsl and uniforms.yaml
    python -m sculpt compile examples/spheres.sculpt -o build/

    # Print the full compile result as JSON
    python -m sculpt compile examples/spheres.sculpt --json
"""

import argparse
import json
import logging
import sys
from pathlib import Path

import yaml

logger = logging.getLogger(__name__)

OUTPUT_FILES = ("geometry.glsl", "shading.glsl", "uniforms.glsl", "uniforms.yaml")


def _read_source(path_str: str):
    source_path = Path(path_str)
    if not source_path.exists():
        print(f"Error: File not found: {source_path}", file=sys.stderr)
        return None, None
    return source_path, source_path.read_text(encoding="utf-8")


def _uniforms_yaml(result) -> str:
    return yaml.safe_dump([u.to_dict() for u in result.uniforms], sort_keys=False)


def cmd_check(args):
    """Check a sculpt file for syntax errors."""
    from .compiler import normalize_source
    from .errors import DslError

    source_path, source = _read_source(args.file)
    if source is None:
        return 1

    try:
        program = normalize_source(source, str(source_path))
    except DslError as e:
        print(e, file=sys.stderr)
        return 1

    print(f"OK: {source_path.name} - {len(program.body)} statement(s), no errors")
    return 0


def cmd_compile(args):
    """Compile a sculpt file and write the shader sources."""
    from .compiler import compile_sculpt

    source_path, source = _read_source(args.file)
    if source is None:
        return 1

    result = compile_sculpt(source, str(source_path), catalogue=args.bindings)
    if not result.success:
        print(result.error, file=sys.stderr)
        return 1

    if args.json:
        print(json.dumps(result.to_dict(), indent=2))
        return 0

    out_dir = Path(args.output)
    out_dir.mkdir(parents=True, exist_ok=True)
    contents = (
        result.geometry_glsl,
        result.shading_glsl,
        result.uniforms_glsl,
        _uniforms_yaml(result),
    )
    for name, text in zip(OUTPUT_FILES, contents):
        (out_dir / name).write_text(text, encoding="utf-8")
        logger.info("wrote %s", out_dir / name)

    print(f"OK: {source_path.name} -> {out_dir} "
          f"({len(result.uniforms)} uniform(s), step size {result.step_size:g})")
    return 0


def cmd_uniforms(args):
    """Print the uniforms a sculpt file declares."""
    from .compiler import compile_sculpt

    source_path, source = _read_source(args.file)
    if source is None:
        return 1

    result = compile_sculpt(source, str(source_path), catalogue=args.bindings)
    if not result.success:
        print(result.error, file=sys.stderr)
        return 1

    print(_uniforms_yaml(result), end="")
    return 0


def main(argv=None):
    parser = argparse.ArgumentParser(
        prog='sculpt',
        description='Compile sculpt programs to GLSL',
    )
    parser.add_argument('-v', '--verbose', action='store_true',
                        help='Log compiler progress to stderr')

    subparsers = parser.add_subparsers(dest='action', required=True)

    # check command
    check_parser = subparsers.add_parser('check', help='Check a sculpt file for syntax errors')
    check_parser.add_argument('file', help='sculpt source file')

    # compile command
    compile_parser = subparsers.add_parser('compile', help='Compile a sculpt file to GLSL')
    compile_parser.add_argument('file', help='sculpt source file')
    compile_parser.add_argument('-o', '--output', metavar='DIR', default='.',
                                help='Directory for the generated files (default: .)')
    compile_parser.add_argument('--json', action='store_true',
                                help='Print the compile result as JSON instead of writing files')
    compile_parser.add_argument('--bindings', metavar='FILE',
                                help='Alternate binding catalogue (YAML)')

    # uniforms command
    uniforms_parser = subparsers.add_parser('uniforms', help='List the uniforms as YAML')
    uniforms_parser.add_argument('file', help='sculpt source file')
    uniforms_parser.add_argument('--bindings', metavar='FILE',
                                 help='Alternate binding catalogue (YAML)')

    args = parser.parse_args(argv)

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")

    if args.action == 'check':
        return cmd_check(args)
    elif args.action == 'compile':
        return cmd_compile(args)
    elif args.action == 'uniforms':
        return cmd_uniforms(args)
    else:
        parser.print_help()
        return 1


if __name__ == '__main__':
    sys.exit(main())
