"""Lexical helpers shared by the translator and the parameter inliner.

Both rewrite SQL text, and both must leave string literals and quoted
identifiers alone. The sqlglot BigQuery tokenizer supplies token spans;
everything between tokens (whitespace, comments) is kept verbatim.
"""
from typing import List, Tuple

import sqlglot
from sqlglot.errors import TokenError
from sqlglot.tokens import Token, TokenType

DIALECT = "bigquery"

LITERAL_TOKEN_TYPES = frozenset({
    TokenType.STRING,
    TokenType.NATIONAL_STRING,
    TokenType.RAW_STRING,
    TokenType.BYTE_STRING,
    TokenType.HEX_STRING,
    TokenType.BIT_STRING,
    TokenType.HEREDOC_STRING,
})

__all__ = ["DIALECT", "Token", "TokenError", "TokenType", "tokenize", "is_literal", "is_quoted", "split_quoted"]


def tokenize(sql: str, dialect: str = DIALECT) -> List[Token]:
    """Tokenizes ``sql``; raises ``TokenError`` on unterminated literals."""
    return sqlglot.tokenize(sql, read=dialect)


def is_literal(token: Token) -> bool:
    return token.token_type in LITERAL_TOKEN_TYPES


def is_quoted(token: Token) -> bool:
    """True for string literals and backtick-quoted identifiers."""
    return is_literal(token) or token.token_type == TokenType.IDENTIFIER


def splice(sql: str, replacements: List[Tuple[int, int, str]]) -> str:
    """Applies ``(start, end_inclusive, text)`` replacements in one pass."""
    if not replacements:
        return sql
    parts = []
    cursor = 0
    for start, end, text in sorted(replacements):
        parts.append(sql[cursor:start])
        parts.append(text)
        cursor = end + 1
    parts.append(sql[cursor:])
    return "".join(parts)


def split_quoted(sql: str, dialect: str = DIALECT) -> List[Tuple[str, bool]]:
    """Splits ``sql`` into ``(segment, is_quoted)`` pieces covering the whole text.

    Raises:
        TokenError: If the SQL cannot be tokenized.
    """
    segments: List[Tuple[str, bool]] = []
    cursor = 0
    for token in tokenize(sql, dialect):
        if not is_quoted(token):
            continue
        if token.start > cursor:
            segments.append((sql[cursor:token.start], False))
        segments.append((sql[token.start:token.end + 1], True))
        cursor = token.end + 1
    if cursor < len(sql):
        segments.append((sql[cursor:], False))
    return segments
