# generator.py
import argparse
import logging
import sys
from pathlib import Path

from . import protos_parser
from .code_gen import emitter
from .code_gen.marshal import UnsupportedTypeError
from .type_utils import build_denylist

logger = logging.getLogger(__name__)

LOG_FORMAT = '%(levelname)s: [%(filename)s:%(lineno)d] %(message)s'


def build_arg_parser():
    parser = argparse.ArgumentParser(description="Cephes JavaScript binding generator")
    parser.add_argument("input", nargs="?", default=None,
                        help="Path to the prototypes header (or JSON records). Reads stdin if omitted.")
    parser.add_argument("-o", "--output", default=None, help="File to write the generated JS to. Defaults to stdout.")
    parser.add_argument("-f", "--format", choices=["protos", "json"], default="protos",
                        help="Input format: 'protos' (C prototypes) or 'json' (list of signature records).")
    parser.add_argument("-x", "--exclude",
                        type=str,
                        default=None,
                        help="Comma-separated list of additional function names to leave out of the bindings.")
    parser.add_argument("--module-path", default=emitter.DEFAULT_MODULE_PATH,
                        help="Path of the Emscripten module required by the generated code.")
    parser.add_argument("--legacy-stack-restore", action="store_true",
                        help="Restore the stack only on the normal return path (no try/finally guard).")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging.")
    return parser


def read_signatures(text, input_format):
    if input_format == "json":
        return protos_parser.load_signature_records(text)
    return protos_parser.parse_protos(text)


def main(argv=None):
    args = build_arg_parser().parse_args(argv)

    # Logs go to stderr, stdout is reserved for the generated code
    logging.basicConfig(level=logging.DEBUG if args.debug else logging.INFO, format=LOG_FORMAT)

    try:
        if args.input:
            logger.info(f"Reading {args.format} input from: {args.input}")
            text = Path(args.input).read_text(encoding="utf-8")
        else:
            text = sys.stdin.read()
    except OSError as e:
        logger.error(f"Failed to read input: {e}")
        return 1

    try:
        signatures = read_signatures(text, args.format)
    except ValueError as e:
        # json.JSONDecodeError is a ValueError too
        logger.error(f"Failed to load signature records: {e}")
        return 1

    extra_names = [name.strip() for name in args.exclude.split(",") if name.strip()] if args.exclude else []
    denylist = build_denylist(extra_names)
    if extra_names:
        logger.info(f"Excluding {len(denylist)} functions: {', '.join(sorted(denylist))}")

    out = None
    try:
        if args.output:
            out = open(args.output, "w", encoding="utf-8")
        emitter.emit(
            signatures,
            out or sys.stdout,
            denylist=denylist,
            module_path=args.module_path,
            guard_stack=not args.legacy_stack_restore,
        )
    except UnsupportedTypeError as e:
        logger.critical(f"Generation aborted: {e}")
        return 1
    except OSError as e:
        logger.error(f"Failed to write output: {e}")
        return 1
    finally:
        if out is not None:
            out.close()

    if args.output:
        logger.info(f"Wrote bindings to {args.output}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
