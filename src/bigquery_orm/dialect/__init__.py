from .translator import DialectTranslator, translate, RESERVED_WORDS
from .inliner import ParameterInliner, inline, render_literal
from .compiler import BigQuerySQLDialect, compile_statement

__all__ = [
    "DialectTranslator",
    "translate",
    "RESERVED_WORDS",
    "ParameterInliner",
    "inline",
    "render_literal",
    "BigQuerySQLDialect",
    "compile_statement",
]
