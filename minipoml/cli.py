"""
Command line entry point.

Usage:
    minipoml prompt.poml
    minipoml prompt.poml context.json
    minipoml prompt.poml context.json --output prompt.md --verbose
    minipoml prompt.poml --renderer debug
"""

import argparse
import json
import logging
import os
import sys
from typing import List, Optional

from minipoml.config import get_config
from minipoml.engine import FileSystemLoader, Renderer
from minipoml.errors import PomlError
from minipoml.renderers import default_registry

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='minipoml',
        description='Render a POML template to text'
    )
    parser.add_argument('template', help='Path of the POML template')
    parser.add_argument('context', nargs='?', help='Path of a JSON file holding an object of variables')
    parser.add_argument('--base-dir', '-b', help='Directory for <include> and <let src> paths (default: the template directory)')
    parser.add_argument('--output', '-o', help='Write the output to this file instead of stdout')
    parser.add_argument('--renderer', '-r', default='markdown',
                        choices=default_registry.list_renderers(), help='Output format')
    parser.add_argument('--verbose', '-v', action='store_true', help='Enable debug logging')
    return parser


def load_variables(path: Optional[str]) -> dict:
    """
    Read the variables object from a JSON file.

    Raises:
        ValueError: If the file cannot be read or does not hold a JSON object
    """
    if path is None:
        return {}

    try:
        with open(path, 'r', encoding=get_config().FILE_ENCODING) as f:
            variables = json.load(f)
    except (OSError, ValueError) as e:
        raise ValueError(f"Failed to load context {path}: {e}") from e

    if not isinstance(variables, dict):
        raise ValueError(f"Context {path} must hold a JSON object")
    return variables


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    config = get_config()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else config.LOG_LEVEL,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    try:
        variables = load_variables(args.context)
    except ValueError as e:
        print(str(e), file=sys.stderr)
        return 2

    try:
        with open(args.template, 'r', encoding=config.FILE_ENCODING) as f:
            source = f.read()
    except OSError as e:
        print(f"Failed to read template {args.template}: {e}", file=sys.stderr)
        return 1

    base_dir = args.base_dir or os.path.dirname(os.path.abspath(args.template))
    renderer = Renderer.create_from_doc_and_variables(
        source,
        variables,
        tag_renderer=default_registry.create(args.renderer),
        loader=FileSystemLoader(base_dir)
    )

    try:
        output = renderer.render()
    except PomlError as e:
        print(str(e), file=sys.stderr)
        return 1

    if args.output:
        with open(args.output, 'w', encoding=config.FILE_ENCODING) as f:
            f.write(output)
        logger.info(f"Wrote {len(output)} characters to {args.output}")
    else:
        sys.stdout.write(output)

    return 0


if __name__ == '__main__':
    sys.exit(main())
