"""
Sandboxed boolean expression language for advanced note searches.

Advanced queries are small expressions written by the user, for example::

    $("meeting") && !$("cancelled") && future(ts, 7)

They are tokenized, parsed with a Pratt parser and evaluated by walking the
resulting tree against an explicit scope. Nothing outside that scope is
reachable: the only names an expression can see are the content query
(``$`` / ``contains``), the extracted timestamp ``ts`` and the ``past``,
``future`` and ``today`` predicates.
"""

import re
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Tuple

from . import time_util


class ExpressionError(Exception):
    """Base class for advanced expression failures."""
    pass


class ExpressionSyntaxError(ExpressionError):
    """Raised when an expression cannot be tokenized or parsed."""
    pass


class ExpressionEvaluationError(ExpressionError):
    """Raised when a well-formed expression fails while being evaluated."""
    pass


class ContentSearcher:
    """
    Case-insensitive substring tester bound to one content string.

    Every successful ``contains`` call adds the number of non-overlapping
    occurrences of its argument to a running total, which becomes the match
    count of the surrounding expression.
    """

    def __init__(self, content: str):
        self._content_lower = content.lower()
        self._match_count = 0

    @property
    def match_count(self) -> int:
        return self._match_count

    def contains(self, text: str) -> bool:
        if not isinstance(text, str):
            raise TypeError(f"contains() expects a string, got {type(text).__name__}")

        text_lower = text.lower()
        if text_lower not in self._content_lower:
            return False

        self._match_count += count_occurrences_lower(self._content_lower, text_lower)
        return True


def count_occurrences_lower(haystack: str, needle: str) -> int:
    """Count non-overlapping occurrences of an already lower-cased needle."""
    if not needle:
        return 0

    count = 0
    index = haystack.find(needle)
    while index != -1:
        count += 1
        index = haystack.find(needle, index + len(needle))
    return count


def build_scope(searcher: ContentSearcher, timestamp: int) -> Dict[str, Any]:
    """Build the only bindings an advanced expression may reference."""
    return {
        '$': searcher.contains,
        'contains': searcher.contains,
        'ts': timestamp,
        'past': time_util.past,
        'future': time_util.future,
        'today': time_util.today,
    }


# ---------------------------------------------------------------------------
# Tokenizer

@dataclass(frozen=True)
class Token:
    kind: str  # NUMBER, STRING, NAME, OP, EOF
    value: Any
    pos: int


_TOKEN_REGEX = re.compile(r'''
    (?P<ws>\s+)
  | (?P<number>(?:\d+\.\d*|\.\d+|\d+)(?:[eE][+-]?\d+)?)
  | (?P<string>"(?:[^"\\]|\\.)*"|'(?:[^'\\]|\\.)*')
  | (?P<name>[A-Za-z_$][A-Za-z0-9_$]*)
  | (?P<op>===|!==|==|!=|<=|>=|&&|\|\||[-+*/%<>!(),?:])
''', re.VERBOSE | re.DOTALL)

_ESCAPES = {'n': '\n', 't': '\t', 'r': '\r', '0': '\0', 'b': '\b', 'f': '\f', 'v': '\v'}

_WORD_OPERATORS = {'and': '&&', 'or': '||', 'not': '!'}

_CONSTANTS = {
    'true': True, 'True': True,
    'false': False, 'False': False,
    'null': None, 'None': None,
}


def _unescape(body: str) -> str:
    return re.sub(r'\\(.)', lambda m: _ESCAPES.get(m.group(1), m.group(1)), body, flags=re.DOTALL)


def tokenize(text: str) -> List[Token]:
    """Split expression text into tokens, ending with an EOF token."""
    tokens = []
    pos = 0
    while pos < len(text):
        match = _TOKEN_REGEX.match(text, pos)
        if not match:
            raise ExpressionSyntaxError(f"Unexpected character {text[pos]!r} at position {pos}")

        kind = match.lastgroup
        lexeme = match.group()
        if kind == 'number':
            try:
                value = float(lexeme) if any(c in lexeme for c in '.eE') else int(lexeme)
            except ValueError as e:
                raise ExpressionSyntaxError(f"Invalid number literal at position {pos}: {e}") from e
            tokens.append(Token('NUMBER', value, pos))
        elif kind == 'string':
            tokens.append(Token('STRING', _unescape(lexeme[1:-1]), pos))
        elif kind == 'name':
            if lexeme in _WORD_OPERATORS:
                tokens.append(Token('OP', _WORD_OPERATORS[lexeme], pos))
            else:
                tokens.append(Token('NAME', lexeme, pos))
        elif kind == 'op':
            tokens.append(Token('OP', lexeme, pos))
        pos = match.end()

    tokens.append(Token('EOF', None, pos))
    return tokens


# ---------------------------------------------------------------------------
# Syntax tree

@dataclass(frozen=True)
class Literal:
    value: Any


@dataclass(frozen=True)
class Name:
    name: str


@dataclass(frozen=True)
class Call:
    callee: Any
    args: Tuple[Any, ...]


@dataclass(frozen=True)
class Unary:
    op: str
    operand: Any


@dataclass(frozen=True)
class Binary:
    op: str
    left: Any
    right: Any


@dataclass(frozen=True)
class Logical:
    op: str
    left: Any
    right: Any


@dataclass(frozen=True)
class Conditional:
    test: Any
    if_true: Any
    if_false: Any


# ---------------------------------------------------------------------------
# Parser

_BINARY_PRECEDENCE = {
    '?': 1,
    '||': 2,
    '&&': 3,
    '==': 4, '!=': 4, '===': 4, '!==': 4,
    '<': 5, '<=': 5, '>': 5, '>=': 5,
    '+': 6, '-': 6,
    '*': 7, '/': 7, '%': 7,
    '(': 9,
}

_PREFIX_PRECEDENCE = 8


class Parser:
    """Pratt parser producing the syntax tree for one expression."""

    def __init__(self, tokens: List[Token]):
        self.tokens = tokens
        self.index = 0

    def parse(self):
        node = self._expression(0)
        token = self._peek()
        if token.kind != 'EOF':
            raise ExpressionSyntaxError(f"Unexpected {token.value!r} at position {token.pos}")
        return node

    def _peek(self) -> Token:
        return self.tokens[self.index]

    def _advance(self) -> Token:
        token = self.tokens[self.index]
        self.index += 1
        return token

    def _expect(self, op: str) -> Token:
        token = self._advance()
        if token.kind != 'OP' or token.value != op:
            found = 'end of expression' if token.kind == 'EOF' else repr(token.value)
            raise ExpressionSyntaxError(f"Expected {op!r} but found {found} at position {token.pos}")
        return token

    def _expression(self, min_precedence: int):
        left = self._prefix()

        while True:
            token = self._peek()
            if token.kind != 'OP':
                break
            precedence = _BINARY_PRECEDENCE.get(token.value)
            if precedence is None or precedence <= min_precedence:
                break

            self._advance()
            op = token.value
            if op == '(':
                left = Call(left, self._arguments())
            elif op == '?':
                if_true = self._expression(0)
                self._expect(':')
                # Right associative
                if_false = self._expression(precedence - 1)
                left = Conditional(left, if_true, if_false)
            elif op in ('&&', '||'):
                left = Logical(op, left, self._expression(precedence))
            else:
                left = Binary(op, left, self._expression(precedence))

        return left

    def _prefix(self):
        token = self._advance()

        if token.kind in ('NUMBER', 'STRING'):
            return Literal(token.value)

        if token.kind == 'NAME':
            if token.value in _CONSTANTS:
                return Literal(_CONSTANTS[token.value])
            return Name(token.value)

        if token.kind == 'OP':
            if token.value == '(':
                node = self._expression(0)
                self._expect(')')
                return node
            if token.value in ('!', '-', '+'):
                return Unary(token.value, self._expression(_PREFIX_PRECEDENCE - 1))

        if token.kind == 'EOF':
            raise ExpressionSyntaxError("Unexpected end of expression")
        raise ExpressionSyntaxError(f"Unexpected {token.value!r} at position {token.pos}")

    def _arguments(self) -> Tuple[Any, ...]:
        args = []
        if self._peek().kind == 'OP' and self._peek().value == ')':
            self._advance()
            return tuple(args)

        while True:
            args.append(self._expression(0))
            token = self._advance()
            if token.kind == 'OP' and token.value == ')':
                return tuple(args)
            if not (token.kind == 'OP' and token.value == ','):
                found = 'end of expression' if token.kind == 'EOF' else repr(token.value)
                raise ExpressionSyntaxError(f"Expected ',' or ')' but found {found} at position {token.pos}")


# ---------------------------------------------------------------------------
# Evaluator

_ARITHMETIC: Dict[str, Callable[[Any, Any], Any]] = {
    '+': lambda a, b: a + b,
    '-': lambda a, b: a - b,
    '*': lambda a, b: a * b,
    '/': lambda a, b: a / b,
    '%': lambda a, b: a % b,
    '<': lambda a, b: a < b,
    '<=': lambda a, b: a <= b,
    '>': lambda a, b: a > b,
    '>=': lambda a, b: a >= b,
    '==': lambda a, b: a == b,
    '===': lambda a, b: a == b,
    '!=': lambda a, b: a != b,
    '!==': lambda a, b: a != b,
}


def _check_operands(op: str, left: Any, right: Any) -> None:
    """Reject operand combinations outside the language's value model."""
    if op in ('==', '===', '!=', '!=='):
        return
    if op == '+' and isinstance(left, str) and isinstance(right, str):
        return
    if op in ('<', '<=', '>', '>=') and isinstance(left, str) and isinstance(right, str):
        return
    for value in (left, right):
        if not isinstance(value, (int, float)):
            raise ExpressionEvaluationError(
                f"Operator {op!r} does not support {type(value).__name__} operands"
            )


def evaluate(node, scope: Dict[str, Any]) -> Any:
    """Evaluate a syntax tree against the given bindings."""
    if isinstance(node, Literal):
        return node.value

    if isinstance(node, Name):
        if node.name not in scope:
            raise ExpressionEvaluationError(f"Unknown name: {node.name}")
        return scope[node.name]

    if isinstance(node, Logical):
        left = evaluate(node.left, scope)
        if node.op == '&&':
            return evaluate(node.right, scope) if left else left
        return left if left else evaluate(node.right, scope)

    if isinstance(node, Conditional):
        if evaluate(node.test, scope):
            return evaluate(node.if_true, scope)
        return evaluate(node.if_false, scope)

    if isinstance(node, Unary):
        operand = evaluate(node.operand, scope)
        if node.op == '!':
            return not operand
        if not isinstance(operand, (int, float)):
            raise ExpressionEvaluationError(f"Unary {node.op!r} expects a number")
        return -operand if node.op == '-' else +operand

    if isinstance(node, Binary):
        left = evaluate(node.left, scope)
        right = evaluate(node.right, scope)
        _check_operands(node.op, left, right)
        try:
            return _ARITHMETIC[node.op](left, right)
        except ArithmeticError as e:
            raise ExpressionEvaluationError(f"Arithmetic error in {node.op!r}: {e}") from e

    if isinstance(node, Call):
        function = evaluate(node.callee, scope)
        if not callable(function):
            raise ExpressionEvaluationError("Attempted to call a value that is not a function")
        args = [evaluate(arg, scope) for arg in node.args]
        try:
            return function(*args)
        except (TypeError, ValueError, ArithmeticError) as e:
            raise ExpressionEvaluationError(f"Function call failed: {e}") from e

    raise ExpressionEvaluationError(f"Unsupported expression node: {type(node).__name__}")


class CompiledExpression:
    """A parsed advanced expression that can be evaluated many times."""

    def __init__(self, source: str, tree):
        self.source = source
        self.tree = tree

    def evaluate(self, scope: Dict[str, Any]) -> Any:
        try:
            return evaluate(self.tree, scope)
        except RecursionError as e:
            raise ExpressionEvaluationError("Expression is nested too deeply") from e

    def __repr__(self) -> str:
        return f"CompiledExpression({self.source!r})"


def compile_expression(source: str) -> CompiledExpression:
    """
    Parse expression text once for repeated evaluation.

    Raises:
        ExpressionSyntaxError: If the text is not a valid expression
    """
    try:
        tree = Parser(tokenize(source)).parse()
    except RecursionError as e:
        raise ExpressionSyntaxError("Expression is nested too deeply") from e
    return CompiledExpression(source, tree)


def evaluate_expression(source: str, content: str, timestamp: Optional[int] = None) -> Tuple[Any, int]:
    """
    Evaluate expression text against one content string.

    Returns:
        Tuple of (raw expression value, accumulated content match count)
    """
    if timestamp is None:
        timestamp = time_util.extract_timestamp(content)
    searcher = ContentSearcher(content)
    value = compile_expression(source).evaluate(build_scope(searcher, timestamp))
    return value, searcher.match_count
