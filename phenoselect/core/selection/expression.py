"""Boolean threshold expressions over table columns.

Expressions are written as strings starting with ``~``::

    "~E2 == 1"
    "~`Membrane CD8 (Opal 520) Mean` > 3 and Nucleus_Area < 40"
    "~Tissue in ('tumor', 'stroma')"

The body uses Python syntax. Column names are bare identifiers or
back-quoted when they contain spaces or punctuation. Evaluation is
vectorized over ``pandas`` nullable dtypes, so a missing operand makes the
comparison missing, and missing results select nothing.
"""

from __future__ import annotations

import ast
import operator
import re
from dataclasses import dataclass
from typing import Any, Dict, List, Tuple

import numpy as np
import pandas as pd

from .validator import SelectorError

EXPRESSION_MARKER = "~"

_BACKTICK_RE = re.compile(r"`([^`]*)`")
_ALIAS_TEMPLATE = "__column_{}__"

_BINARY_OPS = {
    ast.Add: operator.add,
    ast.Sub: operator.sub,
    ast.Mult: operator.mul,
    ast.Div: operator.truediv,
    ast.FloorDiv: operator.floordiv,
    ast.Mod: operator.mod,
    ast.Pow: operator.pow,
    ast.BitAnd: operator.and_,
    ast.BitOr: operator.or_,
}

_COMPARE_OPS = {
    ast.Eq: operator.eq,
    ast.NotEq: operator.ne,
    ast.Lt: operator.lt,
    ast.LtE: operator.le,
    ast.Gt: operator.gt,
    ast.GtE: operator.ge,
}

_ALLOWED_NODES = (
    ast.Expression,
    ast.BoolOp,
    ast.And,
    ast.Or,
    ast.UnaryOp,
    ast.Not,
    ast.Invert,
    ast.USub,
    ast.UAdd,
    ast.BinOp,
    ast.Compare,
    ast.In,
    ast.NotIn,
    ast.Name,
    ast.Load,
    ast.Constant,
    ast.List,
    ast.Tuple,
    *_BINARY_OPS,
    *_COMPARE_OPS,
)


def invalid_expression(text: str, reason: str) -> SelectorError:
    """Build the error raised for a bad expression, quoting its original text."""
    return SelectorError(f"Invalid selector expression {text}: {reason}")


@dataclass(frozen=True)
class ParsedExpression:
    """A parsed expression ready for evaluation.

    Attributes
    ----------
    text : str
        Original text, including the leading marker.
    tree : ast.Expression
        Parsed body with back-quoted names replaced by aliases.
    aliases : Dict[str, str]
        Alias identifier -> original back-quoted column name.
    columns : Tuple[str, ...]
        Referenced column names in first-use order.
    canonical : str
        Normalized source of the body, used as the display name.
    """

    text: str
    tree: ast.Expression
    aliases: Dict[str, str]
    columns: Tuple[str, ...]
    canonical: str

    def column_for(self, identifier: str) -> str:
        return self.aliases.get(identifier, identifier)


def _strip_marker(text: str) -> str:
    if text.startswith(EXPRESSION_MARKER):
        return text[len(EXPRESSION_MARKER):]
    return text


def _check_nodes(tree: ast.AST, text: str) -> None:
    for node in ast.walk(tree):
        if not isinstance(node, _ALLOWED_NODES):
            raise invalid_expression(text, f"unsupported syntax '{type(node).__name__}'")
        if isinstance(node, ast.Compare):
            for op, comparator in zip(node.ops, node.comparators):
                if isinstance(op, (ast.In, ast.NotIn)):
                    if not isinstance(comparator, (ast.List, ast.Tuple)):
                        raise invalid_expression(
                            text, "'in' needs a literal list or tuple of values"
                        )
                elif isinstance(comparator, (ast.List, ast.Tuple)):
                    raise invalid_expression(text, "lists are only allowed after 'in'")
        if isinstance(node, (ast.List, ast.Tuple)):
            for element in node.elts:
                if not isinstance(element, ast.Constant):
                    raise invalid_expression(text, "'in' values must be constants")


def parse_expression(text: str) -> ParsedExpression:
    """Parse expression text into a ``ParsedExpression``.

    Raises
    ------
    SelectorError
        If the body is empty, malformed, or uses unsupported syntax. The
        message contains ``text`` verbatim.
    """
    body = _strip_marker(text)
    aliases: Dict[str, str] = {}
    by_column: Dict[str, str] = {}

    def _alias(match: "re.Match[str]") -> str:
        column = match.group(1)
        if not column:
            raise invalid_expression(text, "empty back-quoted column name")
        if column not in by_column:
            alias = _ALIAS_TEMPLATE.format(len(by_column))
            by_column[column] = alias
            aliases[alias] = column
        return by_column[column]

    source = _BACKTICK_RE.sub(_alias, body).strip()
    if "`" in source:
        raise invalid_expression(text, "unbalanced back-quote")
    if not source:
        raise invalid_expression(text, "empty expression")

    try:
        tree = ast.parse(source, mode="eval")
    except SyntaxError as e:
        raise invalid_expression(text, f"syntax error ({e.msg})") from e

    _check_nodes(tree, text)

    columns: List[str] = []
    for node in ast.walk(tree):
        if isinstance(node, ast.Name):
            column = aliases.get(node.id, node.id)
            if column not in columns:
                columns.append(column)

    canonical = ast.unparse(tree.body)
    for alias, column in aliases.items():
        canonical = canonical.replace(alias, f"`{column}`")

    return ParsedExpression(
        text=text,
        tree=tree,
        aliases=aliases,
        columns=tuple(columns),
        canonical=canonical,
    )


class _FrameEvaluator(ast.NodeVisitor):
    """Evaluates a parsed expression column-wise against a DataFrame."""

    def __init__(self, parsed: ParsedExpression, frame: pd.DataFrame):
        self.parsed = parsed
        self.frame = frame
        self._columns: Dict[str, pd.Series] = {}

    def generic_visit(self, node: ast.AST) -> Any:
        raise invalid_expression(
            self.parsed.text, f"unsupported syntax '{type(node).__name__}'"
        )

    def visit_Expression(self, node: ast.Expression) -> Any:
        return self.visit(node.body)

    def visit_Constant(self, node: ast.Constant) -> Any:
        return node.value

    def visit_Name(self, node: ast.Name) -> pd.Series:
        column = self.parsed.column_for(node.id)
        if column not in self.frame.columns:
            raise invalid_expression(self.parsed.text, f"unknown column '{column}'")
        if column not in self._columns:
            # Nullable dtypes carry missing values through comparisons
            self._columns[column] = self.frame[column].convert_dtypes()
        return self._columns[column]

    def visit_UnaryOp(self, node: ast.UnaryOp) -> Any:
        operand = self.visit(node.operand)
        if isinstance(node.op, ast.USub):
            return -operand
        if isinstance(node.op, ast.UAdd):
            return +operand
        if isinstance(operand, pd.Series):
            return ~operand
        if isinstance(node.op, ast.Not) or isinstance(operand, (bool, np.bool_)):
            return not operand
        return ~operand

    def visit_BoolOp(self, node: ast.BoolOp) -> Any:
        combine = operator.and_ if isinstance(node.op, ast.And) else operator.or_
        result = self.visit(node.values[0])
        for value in node.values[1:]:
            result = combine(result, self.visit(value))
        return result

    def visit_BinOp(self, node: ast.BinOp) -> Any:
        op = _BINARY_OPS[type(node.op)]
        return op(self.visit(node.left), self.visit(node.right))

    def visit_Compare(self, node: ast.Compare) -> Any:
        result = None
        left = self.visit(node.left)
        for op, comparator in zip(node.ops, node.comparators):
            if isinstance(op, (ast.In, ast.NotIn)):
                values = [element.value for element in comparator.elts]
                if isinstance(left, pd.Series):
                    outcome = left.isin(values).astype("boolean").mask(left.isna())
                else:
                    outcome = left in values
                if isinstance(op, ast.NotIn):
                    outcome = ~outcome if isinstance(outcome, pd.Series) else not outcome
                right = None
            else:
                right = self.visit(comparator)
                outcome = _COMPARE_OPS[type(op)](left, right)
            result = outcome if result is None else result & outcome
            left = right
        return result


def evaluate_expression(parsed: ParsedExpression, frame: pd.DataFrame) -> np.ndarray:
    """Evaluate ``parsed`` against every row of ``frame``.

    Returns
    -------
    np.ndarray
        Boolean mask of length ``len(frame)``. Rows where the expression is
        missing are ``False``.

    Raises
    ------
    SelectorError
        On an unknown column, an operation the column types do not support,
        or a result that is not boolean.
    """
    try:
        result = _FrameEvaluator(parsed, frame).visit(parsed.tree)
    except SelectorError:
        raise
    except (TypeError, ValueError, ZeroDivisionError) as e:
        raise invalid_expression(parsed.text, str(e)) from e

    if isinstance(result, pd.Series):
        if not pd.api.types.is_bool_dtype(result.dtype):
            raise invalid_expression(
                parsed.text, f"result has type {result.dtype}, not boolean"
            )
        return result.to_numpy(dtype=bool, na_value=False)

    if result is pd.NA:
        return np.zeros(len(frame), dtype=bool)
    if isinstance(result, (bool, np.bool_)):
        return np.full(len(frame), bool(result), dtype=bool)
    raise invalid_expression(parsed.text, f"result {result!r} is not boolean")
