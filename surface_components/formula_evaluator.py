"""
Sandboxed compiler for the user-authored radius and vertical formulas.

Formulas are parsed with ``ast`` and only a small numeric subset is
accepted: float literals, the scope variables, arithmetic operators and a
fixed table of math functions. The accepted tree is turned into nested
closures once, so evaluating a formula at a grid point never touches
``eval`` or any name outside the scope.
"""
import ast
import logging
import math
import operator
from dataclasses import dataclass
from typing import Callable, Dict, Optional, Tuple

from vase_params import DEFAULT_RADIUS_FORMULA, DEFAULT_VERTICAL_FORMULA

logger = logging.getLogger(__name__)

MAX_SOURCE_LENGTH = 512
MAX_NODE_COUNT = 200

SCOPE_VARIABLES = ("r", "y", "height", "angle", "pi")
CONSTANTS = {"e": math.e}

VALIDATION_SCOPE = {"r": 1.0, "y": 1.0, "height": 1.0, "angle": 1.0, "pi": math.pi}


def _sign(x):
    return math.copysign(1.0, x) if x != 0 else 0.0


def _log(x, base=None):
    return math.log(x) if base is None else math.log(x, base)


FUNCTIONS: Dict[str, Callable] = {
    'sin': math.sin,
    'cos': math.cos,
    'tan': math.tan,
    'asin': math.asin,
    'acos': math.acos,
    'atan': math.atan,
    'atan2': math.atan2,
    'sinh': math.sinh,
    'cosh': math.cosh,
    'tanh': math.tanh,
    'sqrt': math.sqrt,
    'cbrt': lambda x: math.copysign(abs(x) ** (1.0 / 3.0), x),
    'exp': math.exp,
    'log': _log,
    'log10': math.log10,
    'log2': math.log2,
    'abs': abs,
    'floor': lambda x: float(math.floor(x)),
    'ceil': lambda x: float(math.ceil(x)),
    'round': lambda x: float(round(x)),
    'sign': _sign,
    'min': min,
    'max': max,
    'pow': math.pow,
    'mod': math.fmod,
    'hypot': math.hypot,
}

_BINARY_OPS = {
    ast.Add: operator.add,
    ast.Sub: operator.sub,
    ast.Mult: operator.mul,
    ast.Div: operator.truediv,
    ast.Mod: operator.mod,
    ast.Pow: math.pow,
}

_UNARY_OPS = {
    ast.UAdd: operator.pos,
    ast.USub: operator.neg,
}


class FormulaCompileError(ValueError):
    """Formula text outside the supported expression language."""


class FormulaEvaluationError(ArithmeticError):
    """A valid formula failed at a specific scope."""


def _compile_node(node: ast.AST) -> Callable[[Dict[str, float]], float]:
    if isinstance(node, ast.Constant):
        if isinstance(node.value, bool) or not isinstance(node.value, (int, float)):
            raise FormulaCompileError(f"Unsupported literal: {node.value!r}")
        try:
            value = float(node.value)
        except OverflowError as e:
            raise FormulaCompileError(f"Literal too large: {str(node.value)[:20]}...") from e
        return lambda scope: value

    if isinstance(node, ast.Name):
        name = node.id
        if name in SCOPE_VARIABLES:
            return lambda scope: scope[name]
        if name in CONSTANTS:
            value = CONSTANTS[name]
            return lambda scope: value
        raise FormulaCompileError(f"Undefined symbol: {name}")

    if isinstance(node, ast.BinOp):
        op = _BINARY_OPS.get(type(node.op))
        if op is None:
            raise FormulaCompileError(f"Unsupported operator: {type(node.op).__name__}")
        left = _compile_node(node.left)
        right = _compile_node(node.right)
        return lambda scope: op(left(scope), right(scope))

    if isinstance(node, ast.UnaryOp):
        op = _UNARY_OPS.get(type(node.op))
        if op is None:
            raise FormulaCompileError(f"Unsupported operator: {type(node.op).__name__}")
        operand = _compile_node(node.operand)
        return lambda scope: op(operand(scope))

    if isinstance(node, ast.Call):
        if not isinstance(node.func, ast.Name) or node.keywords:
            raise FormulaCompileError("Only plain function calls are supported")
        fn = FUNCTIONS.get(node.func.id)
        if fn is None:
            raise FormulaCompileError(f"Unknown function: {node.func.id}")
        args = [_compile_node(arg) for arg in node.args]
        return lambda scope: fn(*[arg(scope) for arg in args])

    raise FormulaCompileError(f"Unsupported syntax: {type(node).__name__}")


def parse_formula(source: str) -> Callable[[Dict[str, float]], float]:
    """Parse and compile formula text, raising FormulaCompileError on anything unsupported"""
    if not isinstance(source, str) or not source.strip():
        raise FormulaCompileError("Formula is empty")
    if len(source) > MAX_SOURCE_LENGTH:
        raise FormulaCompileError(f"Formula longer than {MAX_SOURCE_LENGTH} characters")

    # math notation uses ^ for powers
    text = source.strip().replace("^", "**")
    try:
        tree = ast.parse(text, mode="eval")
    except SyntaxError as e:
        raise FormulaCompileError(f"Syntax error in {source!r}: {e.msg}") from e
    except (ValueError, RecursionError, MemoryError) as e:
        # null bytes and parser depth limits on older interpreters
        raise FormulaCompileError(f"Cannot parse {source!r}: {type(e).__name__}") from e

    if sum(1 for _ in ast.walk(tree)) > MAX_NODE_COUNT:
        raise FormulaCompileError(f"Formula has more than {MAX_NODE_COUNT} syntax nodes")

    return _compile_node(tree.body)


def _run(executable, scope) -> float:
    try:
        result = float(executable(scope))
    except (ArithmeticError, ValueError, TypeError, KeyError) as e:
        raise FormulaEvaluationError(f"{type(e).__name__}: {e}") from e
    if not math.isfinite(result):
        raise FormulaEvaluationError(f"Non-finite result: {result}")
    return result


@dataclass(frozen=True)
class CompiledFormula:
    source: str
    fallback_source: str
    executable: Callable[[Dict[str, float]], float]
    fallback: Callable[[Dict[str, float]], float]
    used_fallback: bool = False

    def evaluate(self, scope: Dict[str, float]) -> float:
        return _run(self.executable, scope)


def compile_formula(source: str, fallback_source: str) -> CompiledFormula:
    """
    Compile a formula, substituting the fallback when the source does not
    compile or does not evaluate on the validation scope.
    """
    fallback = parse_formula(fallback_source)

    try:
        executable = parse_formula(source)
        _run(executable, VALIDATION_SCOPE)
    except (FormulaCompileError, FormulaEvaluationError) as e:
        logger.warning(f"Invalid formula {source!r}, using {fallback_source!r} instead: {e}")
        return CompiledFormula(source, fallback_source, fallback, fallback, used_fallback=True)

    return CompiledFormula(source, fallback_source, executable, fallback)


class FormulaCache:
    """Keeps the compiled pair for the last (radius, vertical) formula sources"""

    def __init__(self, radius_default: str = DEFAULT_RADIUS_FORMULA,
                 vertical_default: str = DEFAULT_VERTICAL_FORMULA):
        self.radius_default = radius_default
        self.vertical_default = vertical_default
        self._key: Optional[Tuple[str, str]] = None
        self._compiled: Optional[Tuple[CompiledFormula, CompiledFormula]] = None
        self.hits = 0
        self.misses = 0

    def get(self, radius_source: str, vertical_source: str) -> Tuple[CompiledFormula, CompiledFormula]:
        key = (radius_source, vertical_source)
        if self._compiled is not None and self._key == key:
            self.hits += 1
            return self._compiled

        self.misses += 1
        compiled = (compile_formula(radius_source, self.radius_default),
                    compile_formula(vertical_source, self.vertical_default))
        self._key, self._compiled = key, compiled
        return compiled

    def clear(self):
        self._key = None
        self._compiled = None
