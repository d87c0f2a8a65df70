# protos_parser.py
import json
import logging
import re

from pyparsing import (
    DelimitedList,
    FollowedBy,
    Group,
    Keyword,
    Literal,
    Opt,
    ParseException,
    Suppress,
    Word,
    alphanums,
    alphas,
    cpp_style_comment,
    nums,
)

from .type_utils import make_arg, make_signature

logger = logging.getLogger(__name__)

# --- Grammar for cephes style prototypes ---
#   extern double ellpk ( double x );
#   extern int airy ( double x, double *ai, double *aip, double *bi, double *bip );
#   extern double polevl ( double x, double coef[], int N );

LPAR, RPAR = map(Suppress, "()")
ident = Word(alphas + "_", alphanums + "_")
EXTERN = Keyword("extern")
VOID = Keyword("void")

array_suffix = Literal("[") + Opt(Word(nums)) + Literal("]")
argument = (
    ident("type")
    + Opt(Literal("*")("pointer"))
    + ident("name")
    + Opt(array_suffix("array"))
)
arg_list = Group(
    Suppress(VOID + FollowedBy(")"))
    | Opt(DelimitedList(Group(argument)))
)("args")

prototype = Suppress(Opt(EXTERN)) + ident("return_type") + ident("name") + LPAR + arg_list + RPAR

PREPROCESSOR_LINE = re.compile(r"^\s*#.*$", re.MULTILINE)


def _strip_noise(text):
    """Drops comments and preprocessor lines, they never hold prototypes."""
    text = cpp_style_comment.suppress().transform_string(text)
    return PREPROCESSOR_LINE.sub("", text)


def parse_prototype(decl):
    """Parses a single declaration (without the trailing ';') into a signature dict."""
    result = prototype.parse_string(decl, parse_all=True)
    args = []
    for arg in result.get("args", []):
        args.append(make_arg(
            arg["type"],
            arg["name"],
            is_pointer="pointer" in arg,
            is_array="array" in arg,
        ))
    return make_signature(result["return_type"], result["name"], args)


def parse_protos(text):
    """
    Yields signature dicts for every prototype in a header-like text, in order.
    Declarations that are not function prototypes are logged and skipped.
    """
    for decl in _strip_noise(text).split(";"):
        decl = " ".join(decl.split())
        if not decl:
            continue
        try:
            func_data = parse_prototype(decl)
        except ParseException as e:
            logger.warning(f"Skipping unparsable declaration '{decl}': {e}")
            continue
        logger.debug(f"Parsed prototype: {func_data['name']} ({len(func_data['args'])} args)")
        yield func_data


def _split_full_type(full_type):
    """'double[]' -> ('double', False, True), 'int*' -> ('int', True, False)"""
    if full_type.endswith("[]"):
        return full_type[:-2], False, True
    if full_type.endswith("*"):
        return full_type[:-1], True, False
    return full_type, False, False


def _normalize_arg(record):
    if not isinstance(record, dict):
        raise ValueError(f"Argument record must be an object, got {type(record).__name__}")
    full_type = record.get("fullType")
    if full_type:
        base_type, is_pointer, is_array = _split_full_type(full_type)
    else:
        base_type = record["type"]
        is_pointer = record.get("isPointer", False)
        is_array = record.get("isArray", False)
    return make_arg(base_type, record["name"], is_pointer, is_array)


def normalize_record(record):
    """Converts a camelCase signature record into the signature dict used by the generator."""
    if not isinstance(record, dict):
        raise ValueError(f"Signature record must be an object, got {type(record).__name__}")
    # A null argument list means no arguments
    args = record.get("functionArgs") or []
    if not isinstance(args, list):
        raise ValueError(f"functionArgs must be a list, got {type(args).__name__}")
    try:
        return make_signature(
            record["returnType"],
            record["functionName"],
            [_normalize_arg(arg) for arg in args],
        )
    except KeyError as e:
        raise ValueError(f"Signature record is missing field {e}") from None


def load_signature_records(text):
    """Loads a JSON list (or single object) of signature records."""
    data = json.loads(text)
    if isinstance(data, dict):
        data = [data]
    if not isinstance(data, list):
        raise ValueError("Expected a JSON list of signature records")
    return [normalize_record(record) for record in data]
