"""
Dialect Translator: rewrites generic relational SQL into warehouse SQL.

Two rewrites are applied, both on lexical tokens so that string literals and
quoted identifiers are never touched:

1. Table qualification. The bare table name following FROM, JOIN, UPDATE or
   INTO becomes the three-part `` `project.dataset.table` `` reference.
2. Reserved-word quoting. Identifiers colliding with warehouse reserved words
   are wrapped in backticks.

Both rewrites are idempotent. Input that cannot be tokenized is returned
unchanged.
"""
import logging
import re
from typing import List, Tuple

from bigquery_orm.dialect import lexer
from bigquery_orm.models import QualifiedTableRef

logger = logging.getLogger(__name__)

RESERVED_WORDS = ("key", "ignore", "lock", "index", "unique", "primary")

QUALIFYING_KEYWORDS = frozenset({"FROM", "JOIN", "UPDATE", "INTO"})

_RESERVED_PATTERN = re.compile(r"\b(" + "|".join(RESERVED_WORDS) + r")\b", re.IGNORECASE)


class DialectTranslator:
    """Translates SQL for a single warehouse table."""

    def __init__(self, table_ref: QualifiedTableRef):
        self.table_ref = table_ref

    def translate(self, sql: str) -> str:
        """Qualifies the table and quotes reserved words.

        Args:
            sql: Generic SQL produced by the query builder or the gateway.

        Returns:
            str: Warehouse SQL. Malformed input comes back unchanged.
        """
        if not sql:
            return sql
        try:
            tokens = lexer.tokenize(sql)
        except lexer.TokenError as e:
            logger.warning(f"Could not tokenize SQL, passing it through unchanged: {e}")
            return sql

        replacements: List[Tuple[int, int, str]] = []
        for index, token in enumerate(tokens):
            if lexer.is_literal(token):
                continue
            if self._is_table_target(tokens, index):
                replacements.append((token.start, token.end, self.table_ref.quoted))
                continue
            if token.token_type == lexer.TokenType.IDENTIFIER:
                continue
            if token.start > 0 and sql[token.start - 1] == ":":
                # bound placeholder name
                continue
            original = sql[token.start:token.end + 1]
            quoted = _RESERVED_PATTERN.sub(r"`\1`", original)
            if quoted != original:
                replacements.append((token.start, token.end, quoted))

        return lexer.splice(sql, replacements)

    def _is_table_target(self, tokens, index: int) -> bool:
        if index == 0:
            return False
        token = tokens[index]
        # Table names such as `comment` or `date` lex as keywords.
        if lexer.is_literal(token):
            return False
        if token.text.lower() != self.table_ref.table_name.lower():
            return False
        previous_words = tokens[index - 1].text.split()
        if not previous_words or previous_words[-1].upper() not in QUALIFYING_KEYWORDS:
            return False
        if tokens[index - 1].token_type == lexer.TokenType.IDENTIFIER:
            return False
        following = tokens[index + 1] if index + 1 < len(tokens) else None
        return following is None or following.token_type != lexer.TokenType.DOT


def translate(sql: str, table_ref: QualifiedTableRef) -> str:
    """Module-level shortcut for ``DialectTranslator(table_ref).translate(sql)``."""
    return DialectTranslator(table_ref).translate(sql)
