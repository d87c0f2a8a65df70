import pytest

from cephes_gen.code_gen import marshal
from cephes_gen.code_gen.marshal import (
    ARG_GENERATORS,
    FullType,
    UnsupportedTypeError,
    generate_arg,
    get_value_expr,
    lookup_full_type,
    native_call_expr,
)
from cephes_gen.type_utils import make_arg


def test_every_full_type_has_a_generator():
    assert set(ARG_GENERATORS) == set(FullType)


def test_double_argument_is_checked_and_passed_through():
    code = generate_arg(make_arg("double", "x"))
    assert "if (typeof x !== 'number') {" in code
    assert "throw new TypeError('x must be a number');" in code
    assert "const carg_x = x;" in code
    assert "stackAlloc" not in code


def test_int_argument_is_truncated():
    code = generate_arg(make_arg("int", "n"))
    assert "throw new TypeError('n must be a number');" in code
    assert "const carg_n = n | 0;" in code


def test_pointer_arguments_allocate_scratch_memory():
    double_code = generate_arg(make_arg("double", "y", is_pointer=True))
    int_code = generate_arg(make_arg("int", "sign", is_pointer=True))
    assert "const carg_y = cephes.stackAlloc(8);" in double_code
    assert "const carg_sign = cephes.stackAlloc(4);" in int_code
    # Out-only, the host value is never read
    assert "typeof" not in double_code
    assert "typeof" not in int_code


def test_double_array_accepts_array_and_float64array():
    code = generate_arg(make_arg("double", "coef", is_array=True))
    assert "if (!Array.isArray(coef) && !(coef instanceof Float64Array)) {" in code
    assert "throw new TypeError('coef must be either an Array or Float64Array');" in code
    assert "const carg_coef = cephes.stackAlloc(coef.length << 3);" in code
    assert "cephes.writeArrayToMemory(new Uint8Array(new Float64Array(coef).buffer), carg_coef);" in code
    assert ("cephes.writeArrayToMemory(new Uint8Array(coef.buffer, coef.byteOffset, coef.byteLength), carg_coef);"
            in code)


def test_double_array_validates_before_allocating():
    code = generate_arg(make_arg("double", "coef", is_array=True))
    assert code.index("throw new TypeError") < code.index("stackAlloc")


def test_indent_is_applied_to_every_line():
    code = generate_arg(make_arg("double", "x"), indent="    ")
    for line in code.splitlines():
        assert line.startswith("    ")


def test_unknown_full_type_is_fatal():
    arg = {"type": "char", "full_type": "char*", "is_pointer": True, "is_array": False, "name": "s"}
    with pytest.raises(UnsupportedTypeError) as excinfo:
        generate_arg(arg, func_name="strtod")
    assert excinfo.value.full_type == "char*"
    assert "'s'" in str(excinfo.value)
    assert "'strtod'" in str(excinfo.value)


def test_lookup_full_type():
    assert lookup_full_type("double[]") is FullType.DOUBLE_ARRAY
    with pytest.raises(UnsupportedTypeError):
        lookup_full_type("int[]")


def test_registry_check_reports_missing_generators(monkeypatch):
    monkeypatch.delitem(ARG_GENERATORS, FullType.INT_PTR)
    with pytest.raises(RuntimeError, match="int\\*"):
        marshal._check_registry()


def test_get_value_uses_llvm_tag():
    assert get_value_expr(make_arg("double", "y", is_pointer=True)) == "cephes.getValue(carg_y, 'double')"
    assert get_value_expr(make_arg("int", "sign", is_pointer=True)) == "cephes.getValue(carg_sign, 'i32')"


def test_native_call_expression():
    args = [make_arg("double", "x"), make_arg("int", "n")]
    assert native_call_expr("expn", args, "double") == "cephes._cephes_expn(carg_x, carg_n)"
    assert native_call_expr("airy", args, "int") == "cephes._cephes_airy(carg_x, carg_n) | 0"
    assert native_call_expr("noargs", [], "double") == "cephes._cephes_noargs()"
