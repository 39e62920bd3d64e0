from __future__ import annotations
import argparse
import json
import logging
import sys
from typing import List, Optional, Sequence, Tuple

from ast_json import ast_to_json
from ast_nodes import ProgramNode
from ast_viz import write_and_render
from config import FrontendConfig
from diagnostics import Diagnostic, format_diagnostic
from lexer import Lexer, tokenize
from parser import Parser
from pretty_printer import PrettyPrinter
from tokens import Token

logger = logging.getLogger(__name__)


def lex(text: str, config: Optional[FrontendConfig] = None) -> List[Token]:
    """Tokenize input string, raising `LexError` on lexical errors."""
    return tokenize(text, config)


def parse_tokens(
    tokens: List[Token], config: Optional[FrontendConfig] = None
) -> ProgramNode:
    """Parse tokens into AST, raising `ParseError` on syntax errors."""
    parser = Parser(tokens, config)
    return parser.parse()


def parse_source(
    text: str, config: Optional[FrontendConfig] = None
) -> Tuple[List[Token], ProgramNode, List[Diagnostic]]:
    """Run lexer and parser without raising.

    Returns the token list, the (possibly partial) program and every
    diagnostic from both phases, lexical ones first.
    """
    lexer = Lexer(text, config)
    tokens = lexer.tokenize()
    diagnostics = list(lexer.diagnostics)
    if diagnostics and lexer.config.fail_fast:
        return tokens, ProgramNode(), diagnostics

    parser = Parser(tokens, config)
    program = parser.parse_program()
    diagnostics.extend(parser.diagnostics)
    return tokens, program, diagnostics


def process_program(
    text: str,
    *,
    filename: str = "<input>",
    config: Optional[FrontendConfig] = None,
    print_tokens: bool = False,
    print_ast: bool = True,
    print_surface: bool = False,
    dump_ast_path: Optional[str] = None,
    viz_path: Optional[str] = None,
    viz_format: str = "svg",
    out=None,
    err=None,
) -> int:
    """Process a single program: lex, parse and optionally print stages.

    Diagnostics go to `err`; everything else to `out`. Returns the process
    exit status (1 if any diagnostic was reported).
    """
    out = sys.stdout if out is None else out
    err = sys.stderr if err is None else err

    logger.info("processing %s (%d characters)", filename, len(text))
    tokens, program, diagnostics = parse_source(text, config)

    if print_tokens:
        print(f"Tokens ({len(tokens)}):", file=out)
        for i, token in enumerate(tokens):
            print(f"  {i:3}: {token} @ {token.span.start}", file=out)

    for diagnostic in diagnostics:
        print(format_diagnostic(diagnostic, filename), file=err)

    if diagnostics:
        logger.info("%s: %d error(s)", filename, len(diagnostics))
        return 1

    if print_ast:
        print("AST:", file=out)
        print(PrettyPrinter.print_ast(program), file=out)

    if print_surface:
        print(PrettyPrinter.print_surface(program), file=out)

    if dump_ast_path:
        with open(dump_ast_path, "w", encoding="utf-8") as fh:
            json.dump(ast_to_json(program), fh, indent=2)
        print(f"Wrote AST JSON to {dump_ast_path}", file=out)

    if viz_path:
        rendered = write_and_render(program, viz_path, fmt=viz_format)
        print(f"Wrote AST visualization to {rendered}", file=out)

    return 0


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Lex and parse a source file and report its AST or syntax errors"
    )
    parser.add_argument(
        "--file", "-f", dest="file", help="Path to source file to process"
    )
    parser.add_argument(
        "source",
        nargs="*",
        default=[],
        help="Inline source text (read from stdin when neither this nor --file is given)",
    )
    # printing options
    parser.add_argument(
        "--print-tokens", dest="print_tokens", action="store_true", help="Print tokens"
    )
    parser.add_argument(
        "--no-ast", dest="print_ast", action="store_false", help="Do not print AST"
    )
    parser.add_argument(
        "--surface",
        dest="print_surface",
        action="store_true",
        help="Print the program re-rendered as source text",
    )
    parser.add_argument(
        "--dump-ast", dest="dump_ast", help="Path to write the AST as JSON"
    )
    parser.add_argument(
        "--viz-ast",
        dest="viz_ast",
        help="Path (without extension) to write Graphviz visualization of the AST",
    )
    parser.add_argument(
        "--viz-format",
        dest="viz_format",
        default="svg",
        help="Format for Graphviz output (svg, png, pdf, etc)",
    )
    # front-end configuration
    parser.add_argument(
        "--decl-keyword",
        dest="decl_keywords",
        action="append",
        help="Accepted variable declaration keyword (repeatable; default: let, var)",
    )
    parser.add_argument(
        "--entry",
        dest="entry",
        help="Name of the entry function that may omit its return type",
    )
    parser.add_argument(
        "--fail-fast",
        dest="fail_fast",
        action="store_true",
        default=None,
        help="Stop at the first lexical or syntax error",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        dest="verbose",
        action="count",
        default=0,
        help="Increase log verbosity (-v info, -vv debug)",
    )
    return parser


def config_from_args(args: argparse.Namespace) -> FrontendConfig:
    """Layer command-line overrides on top of the environment configuration."""
    base = FrontendConfig.from_env()
    return FrontendConfig(
        declaration_keywords=(
            tuple(args.decl_keywords) if args.decl_keywords else base.declaration_keywords
        ),
        entry_function=args.entry or base.entry_function,
        fail_fast=base.fail_fast if args.fail_fast is None else args.fail_fast,
    )


def main(argv: Optional[Sequence[str]] = None) -> int:
    arg_parser = build_arg_parser()
    args = arg_parser.parse_args(argv)
    if args.file and args.source:
        arg_parser.error("--file cannot be combined with inline source")

    level = {0: logging.WARNING, 1: logging.INFO}.get(args.verbose, logging.DEBUG)
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")

    try:
        config = config_from_args(args)
    except ValueError as e:
        print(f"Invalid configuration: {e}", file=sys.stderr)
        return 2

    if args.file:
        filename = args.file
        try:
            with open(args.file, "r", encoding="utf-8") as fh:
                text = fh.read()
        except OSError as e:
            print(f"Failed to read file {args.file}: {e}", file=sys.stderr)
            return 1
    elif args.source:
        filename = "<argv>"
        text = " ".join(args.source)
    else:
        filename = "<stdin>"
        text = sys.stdin.read()

    return process_program(
        text,
        filename=filename,
        config=config,
        print_tokens=args.print_tokens,
        print_ast=args.print_ast,
        print_surface=args.print_surface,
        dump_ast_path=args.dump_ast,
        viz_path=args.viz_ast,
        viz_format=args.viz_format,
    )


if __name__ == "__main__":
    sys.exit(main())
