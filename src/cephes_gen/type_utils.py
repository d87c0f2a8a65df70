# type_utils.py
import logging

logger = logging.getLogger(__name__)

# Internal cephes routines that are not part of the public API
INTERNAL_CEPHES_FUNCTIONS = frozenset([
    "hyp2f0", "onef2", "threef0",
])

# Mapping from C base types to the Emscripten (LLVM) type tags used by getValue()
TYPE_TO_LLVM = {
    "double": "double",
    "int": "i32",
}


def get_full_type(base_type, is_pointer=False, is_array=False):
    """Builds the marshalling type tag: 'double', 'int*', 'double[]' etc."""
    full_type = base_type
    if is_pointer:
        full_type += "*"
    if is_array:
        full_type += "[]"
    return full_type


def make_arg(base_type, name, is_pointer=False, is_array=False):
    """Creates an argument record. is_pointer/is_array are folded into full_type."""
    return {
        "type": base_type,
        "full_type": get_full_type(base_type, is_pointer, is_array),
        "is_pointer": bool(is_pointer),
        "is_array": bool(is_array),
        "name": name,
    }


def make_signature(return_type, name, args=None):
    return {
        "return_type": return_type,
        "name": name,
        "args": list(args or []),
    }


def build_denylist(extra_names=None, base=INTERNAL_CEPHES_FUNCTIONS):
    """Returns a new frozenset; the default denylist is never mutated."""
    if not extra_names:
        return base
    return base | frozenset(extra_names)


def is_excluded(func_data, denylist=INTERNAL_CEPHES_FUNCTIONS):
    """True if no binding should be generated for this signature."""
    name = func_data["name"]
    if name in denylist:
        logger.debug(f"Skipping internal function: {name}")
        return True
    return False


def needs_stack(args):
    """Pointer and array arguments both live in stack-allocated scratch memory."""
    return any(arg["is_array"] or arg["is_pointer"] for arg in args)


def has_out_params(args):
    """Pointer arguments are written by the native call and returned alongside the result."""
    return any(arg["is_pointer"] for arg in args)


def public_args(args):
    return [arg for arg in args if not arg["is_pointer"]]


def out_params(args):
    return [arg for arg in args if arg["is_pointer"]]


def get_llvm_type(base_type):
    """Gets the getValue() type tag for reading back an out-parameter."""
    try:
        return TYPE_TO_LLVM[base_type]
    except KeyError:
        raise ValueError(f"No LLVM type tag for base type '{base_type}'") from None
