"""Main CLI entry point for depcheck."""

import argparse
import logging
import sys
from dataclasses import dataclass
from typing import List, Optional

import click

from . import __version__
from .exceptions import DepcheckError
from .formatters import BLAME_MODES, DEPENDENT_MODES, OutputFormatter
from .parsers import FileParser
from .results import Results, analyze

logger = logging.getLogger(__name__)

FAIL_ON_CHOICES = ('any', 'direct', 'never')
COLOR_CHOICES = {'auto': None, 'always': True, 'never': False}


@dataclass
class ReportOptions:
    """Reporting choices taken from the command line."""

    blame_mode: Optional[str] = None
    dependents_mode: Optional[str] = None
    show_blame_packages: bool = False
    output_format: str = 'text'
    color: Optional[bool] = None
    fail_on: str = 'any'


def setup_logging(verbose: bool = False, log_level: Optional[str] = None):
    """Configure logging based on verbosity flags."""
    if log_level:
        level = getattr(logging, log_level.upper(), logging.WARNING)
    elif verbose:
        level = logging.INFO
    else:
        level = logging.WARNING

    logging.basicConfig(
        level=level,
        format='%(levelname)s: %(message)s'
    )


def render(results: Results, options: ReportOptions, purl_type: str = 'cargo') -> str:
    if options.output_format == 'json':
        return OutputFormatter.format_as_json(results, purl_type)
    return OutputFormatter.format_as_text(
        results,
        blame_mode=options.blame_mode,
        dependents_mode=options.dependents_mode,
        show_blame_packages=options.show_blame_packages,
        color=options.color is not False,
    )


def exit_code(results: Results, fail_on: str) -> int:
    """Non-zero when the chosen failure condition holds."""
    if fail_on == 'any' and results.has_multi_version_deps():
        return 1
    if fail_on == 'direct' and results.has_direct_blame():
        return 1
    return 0


def handle_check(args) -> int:
    """Load the manifest, analyze it and print the report."""
    setup_logging(args.verbose, args.loglevel)

    options = ReportOptions(
        blame_mode=args.blame,
        dependents_mode=args.dependents,
        show_blame_packages=args.blame_packages,
        output_format=args.output_format,
        color=COLOR_CHOICES[args.color],
        fail_on=args.fail_on,
    )

    logger.info(f"Input: {args.lock_path} (format={args.input_format or 'auto'})")

    try:
        manifest = FileParser.load(args.lock_path, args.input_format)
        results = analyze(manifest)
    except DepcheckError as e:
        logger.error(f"Analysis failed: {e}")
        print(f"Error: {e}", file=sys.stderr)
        return 1

    purl_type = 'cargo' if manifest.format == 'cargo' else 'generic'
    # None leaves it to click: styled on a terminal, plain when piped
    click.echo(render(results, options, purl_type), nl=False, color=options.color)

    return exit_code(results, options.fail_on)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='depcheck',
        description='Check for duplicate dependencies in a resolved lockfile'
    )
    parser.add_argument('--version', action='version', version=f'%(prog)s {__version__}')
    parser.add_argument('-l', '--lock-path', default='Cargo.lock',
                        help='Path or URL of the lockfile. Default: Cargo.lock')
    parser.add_argument('--input-format', choices=['cargo', 'json'],
                        help='Manifest format (cargo, json). Default: detect')
    parser.add_argument('-d', '--dependents', choices=DEPENDENT_MODES,
                        help='Display dependents of multi version dependencies '
                             '(direct: direct dependents, top-level: paths to top level packages)')
    parser.add_argument('-b', '--blame', choices=BLAME_MODES,
                        help='Display packages to blame for multi version dependencies '
                             '(top-level, all)')
    parser.add_argument('-p', '--blame-packages', action='store_true',
                        help='Display the multi version dependency names each package is responsible for')
    parser.add_argument('--format', dest='output_format', default='text', choices=['text', 'json'],
                        help='Output format (text, json). Default: text')
    parser.add_argument('--fail-on', default='any', choices=FAIL_ON_CHOICES,
                        help='Exit non-zero on any duplicate, on direct blame only, or never. Default: any')
    parser.add_argument('--color', default='auto', choices=list(COLOR_CHOICES),
                        help='Colorize text output. Default: auto')
    parser.add_argument('--no-color', action='store_true', help='Same as --color=never')
    parser.add_argument('-v', '--verbose', action='store_true', help='Verbose output')
    parser.add_argument('--loglevel', choices=['DEBUG', 'INFO', 'WARN', 'ERROR'],
                        help='Set log level')
    parser.set_defaults(func=handle_check)
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.no_color:
        args.color = 'never'

    try:
        return args.func(args)
    except Exception as e:
        logger.exception(f"Unexpected error: {e}")
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == '__main__':
    sys.exit(main())
