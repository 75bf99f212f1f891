"""Evaluation of constant value expressions.

Only used in SAFE mode. The captured source text is parsed again with the
PHP grammar and the expression tree is folded into a Python value:

    PHP             Python
    int / float     int / float
    string          str
    true / false    bool
    null            None
    array           list (keys 0..n-1 in order) or dict

References to other constants go through the ``lookup`` callable, which
returns the value or raises ``KeyError``.
"""

from __future__ import annotations

import math
import operator
import re
import sys
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from phpscope.core.errors import ConstantEvaluationError
from phpscope.parsing.treesitter import PhpTokenizer

ConstantLookup = Callable[[str], Any]

# Predefined constants commonly used in constant expressions
BUILTIN_CONSTANTS: dict[str, Any] = {
    "PHP_EOL": "\n",
    "PHP_INT_MAX": 2**63 - 1,
    "PHP_INT_MIN": -(2**63),
    "PHP_INT_SIZE": 8,
    "PHP_FLOAT_EPSILON": sys.float_info.epsilon,
    "PHP_FLOAT_MAX": sys.float_info.max,
    "PHP_FLOAT_MIN": sys.float_info.min,
    "DIRECTORY_SEPARATOR": "/",
    "M_PI": math.pi,
    "M_E": math.e,
    "NAN": math.nan,
    "INF": math.inf,
}

_SINGLE_QUOTED_ESCAPE = re.compile(r"\\([\\'])")
_DOUBLE_QUOTED_ESCAPE = re.compile(
    r"\\(?:([nrtvef\\$\"])|([0-7]{1,3})|x([0-9A-Fa-f]{1,2})|u\{([0-9A-Fa-f]+)\})"
)
_INTERPOLATION = re.compile(r"(?<!\\)(?:\\\\)*\$[A-Za-z_{]")
_SIMPLE_ESCAPES = {
    "n": "\n",
    "r": "\r",
    "t": "\t",
    "v": "\v",
    "e": "\x1b",
    "f": "\f",
    "\\": "\\",
    "$": "$",
    '"': '"',
}


class _EvaluationFailure(Exception):
    """Raised inside the evaluator, converted to ConstantEvaluationError."""


def php_truthy(value: Any) -> bool:
    """PHP boolean conversion."""
    if isinstance(value, str):
        return value not in ("", "0")
    return bool(value)


def php_string(value: Any) -> str:
    """PHP string conversion of a scalar."""
    if value is None or value is False:
        return ""
    if value is True:
        return "1"
    if isinstance(value, float):
        if math.isinf(value):
            return "INF" if value > 0 else "-INF"
        if math.isnan(value):
            return "NAN"
        if value.is_integer() and abs(value) < 1e15:
            return str(int(value))
        return repr(value)
    if isinstance(value, (list, dict)):
        raise _EvaluationFailure("array to string conversion")
    return str(value)


def _number(value: Any) -> int | float:
    if isinstance(value, bool) or value is None:
        return int(bool(value))
    if isinstance(value, (int, float)):
        return value
    if isinstance(value, str):
        text = value.strip()
        try:
            return int(text)
        except ValueError:
            pass
        try:
            return float(text)
        except ValueError:
            raise _EvaluationFailure(f"non-numeric value '{value}'") from None
    raise _EvaluationFailure("unsupported operand type array")


def _add(left: Any, right: Any) -> Any:
    if isinstance(left, (list, dict)) and isinstance(right, (list, dict)):
        # Union: left keys first, right only adds missing keys
        merged = _as_dict(left)
        for key, item in _as_dict(right).items():
            merged.setdefault(key, item)
        return _from_dict(merged)
    return _number(left) + _number(right)


def _divide(left: Any, right: Any) -> int | float:
    numerator, denominator = _number(left), _number(right)
    if denominator == 0:
        raise _EvaluationFailure("division by zero")
    if isinstance(numerator, int) and isinstance(denominator, int) and numerator % denominator == 0:
        return numerator // denominator
    return numerator / denominator


def _modulo(left: Any, right: Any) -> int:
    numerator, denominator = int(_number(left)), int(_number(right))
    if denominator == 0:
        raise _EvaluationFailure("modulo by zero")
    # Result takes the sign of the dividend
    return int(math.fmod(numerator, denominator))


def _power(left: Any, right: Any) -> int | float:
    base, exponent = _number(left), _number(right)
    if isinstance(base, int) and isinstance(exponent, int) and exponent >= 0:
        return base**exponent
    return float(base) ** exponent


def _int_op(fn: Callable[[int, int], int]) -> Callable[[Any, Any], int]:
    def apply(left: Any, right: Any) -> int:
        return fn(int(_number(left)), int(_number(right)))

    return apply


def _loose_equal(left: Any, right: Any) -> bool:
    if type(left) is type(right):
        return bool(left == right)
    if isinstance(left, bool) or isinstance(right, bool) or left is None or right is None:
        return php_truthy(left) == php_truthy(right)
    try:
        return _number(left) == _number(right)
    except _EvaluationFailure:
        return php_string(left) == php_string(right)


def _compare(fn: Callable[[Any, Any], bool]) -> Callable[[Any, Any], bool]:
    def apply(left: Any, right: Any) -> bool:
        if isinstance(left, str) and isinstance(right, str):
            return fn(left, right)
        return fn(_number(left), _number(right))

    return apply


_BINARY_OPERATORS: dict[str, Callable[[Any, Any], Any]] = {
    "+": _add,
    "-": lambda a, b: _number(a) - _number(b),
    "*": lambda a, b: _number(a) * _number(b),
    "/": _divide,
    "%": _modulo,
    "**": _power,
    ".": lambda a, b: php_string(a) + php_string(b),
    "&": _int_op(operator.and_),
    "|": _int_op(operator.or_),
    "^": _int_op(operator.xor),
    "<<": _int_op(operator.lshift),
    ">>": _int_op(operator.rshift),
    "==": _loose_equal,
    "!=": lambda a, b: not _loose_equal(a, b),
    "<>": lambda a, b: not _loose_equal(a, b),
    "===": lambda a, b: type(a) is type(b) and a == b,
    "!==": lambda a, b: not (type(a) is type(b) and a == b),
    "<": _compare(operator.lt),
    ">": _compare(operator.gt),
    "<=": _compare(operator.le),
    ">=": _compare(operator.ge),
    "&&": lambda a, b: php_truthy(a) and php_truthy(b),
    "and": lambda a, b: php_truthy(a) and php_truthy(b),
    "||": lambda a, b: php_truthy(a) or php_truthy(b),
    "or": lambda a, b: php_truthy(a) or php_truthy(b),
    "xor": lambda a, b: php_truthy(a) != php_truthy(b),
    "??": lambda a, b: b if a is None else a,
}

_UNARY_OPERATORS: dict[str, Callable[[Any], Any]] = {
    "-": lambda v: -_number(v),
    "+": _number,
    "!": lambda v: not php_truthy(v),
    "~": lambda v: ~int(_number(v)),
}


def _as_dict(value: Any) -> dict[Any, Any]:
    if isinstance(value, dict):
        return dict(value)
    return dict(enumerate(value))


def _from_dict(items: dict[Any, Any]) -> list[Any] | dict[Any, Any]:
    if list(items.keys()) == list(range(len(items))):
        return list(items.values())
    return items


def _parse_integer(text: str) -> int:
    digits = text.replace("_", "")
    lowered = digits.lower()
    if lowered.startswith(("0x", "0b", "0o")):
        return int(digits, 0)
    if len(digits) > 1 and digits.startswith("0"):
        return int(digits, 8)
    return int(digits)


def _unquote_single(text: str) -> str:
    body = text[text.index("'") + 1 : -1]
    return _SINGLE_QUOTED_ESCAPE.sub(r"\1", body)


def _unescape_double(match: re.Match[str]) -> str:
    simple, octal, hexa, codepoint = match.groups()
    if simple is not None:
        return _SIMPLE_ESCAPES[simple]
    if octal is not None:
        return chr(int(octal, 8) & 0xFF)
    if hexa is not None:
        return chr(int(hexa, 16))
    return chr(int(codepoint, 16))


def _unquote_double(text: str) -> str:
    body = text[text.index('"') + 1 : -1]
    return _DOUBLE_QUOTED_ESCAPE.sub(_unescape_double, body)


def _child(node: Any, name: str, position: int) -> Any:
    found = node.child_by_field_name(name)
    if found is not None:
        return found
    return node.children[position]


@dataclass
class ConstantEvaluator:
    """Folds PHP constant expressions into Python values.

    Args:
        tokenizer: Grammar holder used to parse expressions.
        lookup: Resolves constant names not in BUILTIN_CONSTANTS.
    """

    tokenizer: PhpTokenizer = field(default_factory=PhpTokenizer)
    lookup: ConstantLookup | None = None

    def evaluate(self, expression: str) -> Any:
        """Evaluate a constant expression.

        Raises:
            ConstantEvaluationError: Syntax error or unsupported construct.
        """
        source = f"<?php {expression};".encode()
        tree = self.tokenizer.parse(source)
        root = tree.root_node
        if root.has_error:
            raise ConstantEvaluationError.unsupported(expression, "syntax error")

        statement = next(
            (child for child in root.named_children if child.type == "expression_statement"),
            None,
        )
        if statement is None or not statement.named_children:
            raise ConstantEvaluationError.unsupported(expression, "not an expression")

        try:
            return self._eval(statement.named_children[0])
        except _EvaluationFailure as err:
            raise ConstantEvaluationError.unsupported(expression, str(err)) from err

    def _eval(self, node: Any) -> Any:
        kind = node.type
        text = node.text.decode("utf-8") if node.text else ""

        if kind == "integer":
            return _parse_integer(text)
        if kind == "float":
            return float(text.replace("_", ""))
        if kind == "boolean":
            return text.lower() == "true"
        if kind == "null":
            return None
        if kind in ("string", "encapsed_string"):
            if text.lstrip("bB").startswith("'"):
                return _unquote_single(text)
            if _INTERPOLATION.search(text):
                raise _EvaluationFailure("string interpolation")
            return _unquote_double(text)
        if kind == "parenthesized_expression":
            return self._eval(node.named_children[0])
        if kind == "unary_op_expression":
            return self._eval_unary(node)
        if kind == "binary_expression":
            return self._eval_binary(node)
        if kind == "conditional_expression":
            return self._eval_conditional(node)
        if kind == "array_creation_expression":
            return self._eval_array(node)
        if kind in ("name", "qualified_name"):
            return self._eval_name(text)
        raise _EvaluationFailure(f"unsupported expression {kind}")

    def _eval_unary(self, node: Any) -> Any:
        op = node.children[0].type
        fn = _UNARY_OPERATORS.get(op)
        if fn is None:
            raise _EvaluationFailure(f"unsupported operator {op}")
        return fn(self._eval(node.named_children[-1]))

    def _eval_binary(self, node: Any) -> Any:
        op = _child(node, "operator", 1).type.lower()
        fn = _BINARY_OPERATORS.get(op)
        if fn is None:
            raise _EvaluationFailure(f"unsupported operator {op}")
        left = self._eval(_child(node, "left", 0))
        right = self._eval(_child(node, "right", -1))
        return fn(left, right)

    def _eval_conditional(self, node: Any) -> Any:
        condition = self._eval(_child(node, "condition", 0))
        body = node.child_by_field_name("body")
        alternative = _child(node, "alternative", -1)
        if php_truthy(condition):
            return condition if body is None else self._eval(body)
        return self._eval(alternative)

    def _eval_array(self, node: Any) -> list[Any] | dict[Any, Any]:
        items: dict[Any, Any] = {}
        next_key = 0
        for element in node.named_children:
            if element.type != "array_element_initializer":
                raise _EvaluationFailure(f"unsupported array element {element.type}")
            parts = element.named_children
            if len(parts) == 2:
                key = self._eval(parts[0])
                if isinstance(key, bool) or isinstance(key, float):
                    key = int(key)
                elif isinstance(key, str) and key.lstrip("-").isdigit():
                    key = int(key)
                elif key is None:
                    key = ""
                value = self._eval(parts[1])
            elif len(parts) == 1:
                key = next_key
                value = self._eval(parts[0])
            else:
                raise _EvaluationFailure("unsupported array element")
            items[key] = value
            if isinstance(key, int) and key >= next_key:
                next_key = key + 1
        return _from_dict(items)

    def _eval_name(self, name: str) -> Any:
        lowered = name.lower()
        if lowered == "true":
            return True
        if lowered == "false":
            return False
        if lowered == "null":
            return None
        if name in BUILTIN_CONSTANTS:
            return BUILTIN_CONSTANTS[name]
        if self.lookup is None:
            raise _EvaluationFailure(f"unknown constant {name}")
        try:
            return self.lookup(name)
        except KeyError:
            raise _EvaluationFailure(f"unknown constant {name}") from None
