# code_gen/wrapper.py
import logging

from . import marshal
from .marshal import MODULE_VAR, lookup_full_type
from ..type_utils import needs_stack, has_out_params, public_args, out_params

logger = logging.getLogger(__name__)


def _param_comment(arg):
    return f"/* {arg['type']}{'[]' if arg['is_array'] else ''} */ {arg['name']}"


def generate_header(func_data):
    """Public function header. Pointer arguments are out-only and not part of it."""
    func_name = func_data["name"]
    params = ", ".join(_param_comment(arg) for arg in public_args(func_data["args"]))
    return f"exports.{func_name} = function {func_name}({params}) {{\n"


def _generate_body(func_data, indent):
    """Argument marshalling, the native call and the return value assembly."""
    func_name = func_data["name"]
    return_type = func_data["return_type"]
    args = func_data["args"]

    code = ""
    for arg in args:
        code += marshal.generate_arg(arg, indent, func_name)
        code += "\n"

    code += f"{indent}// return: {return_type}\n"
    code += f"{indent}const fn_ret = {marshal.native_call_expr(func_name, args, return_type)};\n"
    code += "\n"

    if has_out_params(args):
        code += f"{indent}// There are pointers, so return the values of those too\n"
        code += f"{indent}const ret = [fn_ret, {{\n"
        for arg in out_params(args):
            code += f"{indent}  '{arg['name']}': {marshal.get_value_expr(arg)},\n"
        code += f"{indent}}}];\n"
    else:
        code += f"{indent}// No pointers, so just return fn_ret\n"
        code += f"{indent}const ret = fn_ret;\n"
    return code


def generate_wrapper(func_data, guard_stack=True):
    """
    Generates the JS wrapper for one cephes function.

    When stack memory is used, the arena top is saved before the first
    stackAlloc and restored before returning. With guard_stack the restore
    sits in a finally block so it also runs when argument validation throws.
    """
    func_name = func_data["name"]
    args = func_data["args"]

    # Resolve every type before emitting anything for this function
    for arg in args:
        lookup_full_type(arg["full_type"], arg["name"], func_name)

    use_stack = needs_stack(args)
    logger.debug(f"Generating wrapper for {func_name} (args: {len(args)}, stack: {use_stack}, "
                 f"out params: {[arg['name'] for arg in out_params(args)]})")

    code = generate_header(func_data)

    if not use_stack:
        code += _generate_body(func_data, "  ")
        code += "\n"
        code += "  return ret;\n"
    elif guard_stack:
        code += "  // Save the STACKTOP because the following code will do some stack allocs\n"
        code += f"  const stacktop = {MODULE_VAR}.stackSave();\n"
        code += "  try {\n"
        code += _generate_body(func_data, "    ")
        code += "\n"
        code += "    return ret;\n"
        code += "  } finally {\n"
        code += "    // Restore internal stacktop before returning\n"
        code += f"    {MODULE_VAR}.stackRestore(stacktop);\n"
        code += "  }\n"
    else:
        # Legacy layout: the restore is only reached on the normal path
        code += "  // Save the STACKTOP because the following code will do some stack allocs\n"
        code += f"  const stacktop = {MODULE_VAR}.stackSave();\n"
        code += "\n"
        code += _generate_body(func_data, "  ")
        code += "\n"
        code += "  // Restore internal stacktop before returning\n"
        code += f"  {MODULE_VAR}.stackRestore(stacktop);\n"
        code += "  return ret;\n"

    code += "};\n"
    code += "\n"
    return code

