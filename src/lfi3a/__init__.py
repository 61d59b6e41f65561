from .lexer import Lexer, Token, TokenKind, tokenize
from .parser import Parser, ParseError, parse
from .interpreter import (
    DivisionByZeroError,
    Interpreter,
    InterpreterError,
    NumericConversionError,
    RecursionDepthError,
    UndefinedFunctionError,
    UndefinedVariableError,
    run,
)

__all__ = [
    "Lexer",
    "Token",
    "TokenKind",
    "tokenize",
    "Parser",
    "ParseError",
    "parse",
    "Interpreter",
    "InterpreterError",
    "UndefinedVariableError",
    "UndefinedFunctionError",
    "DivisionByZeroError",
    "NumericConversionError",
    "RecursionDepthError",
    "run",
]
