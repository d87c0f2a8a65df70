# code_gen/emitter.py
import io
import logging

from .marshal import MODULE_VAR
from .wrapper import generate_wrapper
from ..type_utils import INTERNAL_CEPHES_FUNCTIONS, is_excluded

logger = logging.getLogger(__name__)

# Path of the Emscripten build, relative to the generated index.js
DEFAULT_MODULE_PATH = "./cephes.js"


def generate_preamble(module_path=DEFAULT_MODULE_PATH):
    return f"\nconst {MODULE_VAR} = require('{module_path}');\n\n"


def emit(signatures, out, denylist=INTERNAL_CEPHES_FUNCTIONS, module_path=DEFAULT_MODULE_PATH,
         guard_stack=True):
    """
    Writes the preamble followed by one wrapper per signature, in input order.
    Signatures are consumed lazily, so a generator input is streamed through.
    Returns a (written, skipped) tuple.
    """
    out.write(generate_preamble(module_path))

    written = 0
    skipped = 0
    for func_data in signatures:
        if is_excluded(func_data, denylist):
            skipped += 1
            continue
        out.write(generate_wrapper(func_data, guard_stack=guard_stack))
        written += 1

    logger.info(f"Emitted {written} wrappers ({skipped} internal functions skipped).")
    return written, skipped


def generate_index(signatures, **kwargs):
    """Same as emit(), but returns the generated source as a string."""
    buf = io.StringIO()
    emit(signatures, buf, **kwargs)
    return buf.getvalue()
