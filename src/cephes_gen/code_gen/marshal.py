# code_gen/marshal.py
import logging
from enum import Enum

from ..type_utils import get_llvm_type

logger = logging.getLogger(__name__)

# Name of the Emscripten module object in the generated JS
MODULE_VAR = "cephes"
# Emscripten exports C symbols with a leading underscore
NATIVE_PREFIX = "_cephes_"

DOUBLE_SIZE = 8
INT_SIZE = 4


class FullType(str, Enum):
    """The closed set of argument representations the generator understands."""
    DOUBLE = "double"
    INT = "int"
    DOUBLE_PTR = "double*"
    INT_PTR = "int*"
    DOUBLE_ARRAY = "double[]"


class UnsupportedTypeError(ValueError):
    """Raised at generation time when an argument has no marshaller."""

    def __init__(self, full_type, arg_name=None, func_name=None):
        self.full_type = full_type
        self.arg_name = arg_name
        self.func_name = func_name
        where = ""
        if arg_name:
            where += f" for argument '{arg_name}'"
        if func_name:
            where += f" of function '{func_name}'"
        super().__init__(f"Unsupported argument type '{full_type}'{where}")


# Key: FullType, Value: fn(name, indent) -> JS code string
ARG_GENERATORS = {}


def arg_generator(full_type):
    def register(fn):
        ARG_GENERATORS[full_type] = fn
        return fn
    return register


def carg_name(name):
    """Local JS variable holding the native-call-ready value of an argument."""
    return f"carg_{name}"


@arg_generator(FullType.DOUBLE)
def _generate_double(name, indent="  "):
    code = f"{indent}// argument: double {name}\n"
    code += f"{indent}if (typeof {name} !== 'number') {{\n"
    code += f"{indent}  throw new TypeError('{name} must be a number');\n"
    code += f"{indent}}}\n"
    code += f"{indent}const {carg_name(name)} = {name};\n"
    return code


@arg_generator(FullType.INT)
def _generate_int(name, indent="  "):
    code = f"{indent}// argument: int {name}\n"
    code += f"{indent}if (typeof {name} !== 'number') {{\n"
    code += f"{indent}  throw new TypeError('{name} must be a number');\n"
    code += f"{indent}}}\n"
    # Truncate to int32 like C would
    code += f"{indent}const {carg_name(name)} = {name} | 0;\n"
    return code


@arg_generator(FullType.DOUBLE_PTR)
def _generate_double_ptr(name, indent="  "):
    code = f"{indent}// argument: double* {name}\n"
    code += f"{indent}const {carg_name(name)} = {MODULE_VAR}.stackAlloc({DOUBLE_SIZE}); // No need to zero-set it.\n"
    return code


@arg_generator(FullType.INT_PTR)
def _generate_int_ptr(name, indent="  "):
    code = f"{indent}// argument: int* {name}\n"
    code += f"{indent}const {carg_name(name)} = {MODULE_VAR}.stackAlloc({INT_SIZE}); // No need to zero-set it.\n"
    return code


@arg_generator(FullType.DOUBLE_ARRAY)
def _generate_double_array(name, indent="  "):
    cname = carg_name(name)
    code = f"{indent}// argument: double[] {name}\n"
    code += f"{indent}if (!Array.isArray({name}) && !({name} instanceof Float64Array)) {{\n"
    code += f"{indent}  throw new TypeError('{name} must be either an Array or Float64Array');\n"
    code += f"{indent}}}\n"
    code += f"{indent}const {cname} = {MODULE_VAR}.stackAlloc({name}.length << 3);\n"
    code += f"{indent}if (Array.isArray({name})) {{\n"
    code += f"{indent}  {MODULE_VAR}.writeArrayToMemory(new Uint8Array(new Float64Array({name}).buffer), {cname});\n"
    code += f"{indent}}} else {{\n"
    # Respect the view window, the Float64Array may be a subarray of a larger buffer
    code += f"{indent}  {MODULE_VAR}.writeArrayToMemory(new Uint8Array({name}.buffer, {name}.byteOffset, {name}.byteLength), {cname});\n"
    code += f"{indent}}}\n"
    return code


def _check_registry():
    missing = [full_type.value for full_type in FullType if full_type not in ARG_GENERATORS]
    if missing:
        raise RuntimeError(f"No argument generator registered for: {', '.join(missing)}")


_check_registry()


def lookup_full_type(full_type, arg_name=None, func_name=None):
    """Maps a full type tag onto FullType, raising UnsupportedTypeError on a miss."""
    try:
        return FullType(full_type)
    except ValueError:
        raise UnsupportedTypeError(full_type, arg_name, func_name) from None


def generate_arg(arg, indent="  ", func_name=None):
    """Gets the JS fragment validating and converting one argument."""
    full_type = lookup_full_type(arg["full_type"], arg["name"], func_name)
    return ARG_GENERATORS[full_type](arg["name"], indent)


def get_value_expr(arg):
    """JS expression reading an out-parameter back from its scratch slot."""
    llvm_type = get_llvm_type(arg["type"])
    return f"{MODULE_VAR}.getValue({carg_name(arg['name'])}, '{llvm_type}')"


def native_call_expr(func_name, args, return_type):
    """JS expression calling the native entry point with every marshalled argument."""
    call_args = ", ".join(carg_name(arg["name"]) for arg in args)
    expr = f"{MODULE_VAR}.{NATIVE_PREFIX}{func_name}({call_args})"
    if return_type == "int":
        expr += " | 0"
    return expr
