"""
Parameter Inliner: substitutes ``:name`` placeholders with typed SQL literals.

The warehouse path offers no server-side parameter binding, so escaping here is
the only injection defense. Placeholders are only recognized outside string
literals and quoted identifiers; ``::`` casts are never placeholders.
"""
import logging
import math
import re
from typing import Any, Dict, Iterable, Mapping, Union

from bigquery_orm.common.errors import TypeCoercionError
from bigquery_orm.dialect import lexer
from bigquery_orm.models import Binding, BindingType

logger = logging.getLogger(__name__)

PLACEHOLDER_PATTERN = re.compile(r"(?<![:\w]):([A-Za-z0-9_]+)")

_ESCAPES = str.maketrans({
    "\\": "\\\\",
    "'": "\\'",
    '"': '\\"',
    "\n": "\\n",
    "\r": "\\r",
    "\x00": "\\000",
})

BindingsArg = Union[Mapping[str, Binding], Iterable[Binding]]


def quote_string(value: Any) -> str:
    """Renders ``value`` as a single-quoted, backslash-escaped string literal."""
    return "'" + str(value).translate(_ESCAPES) + "'"


def render_literal(value: Any, type_: BindingType = BindingType.OTHER) -> str:
    """Renders one bound value as a warehouse SQL literal.

    Raises:
        TypeCoercionError: If an integer or float binding is not numeric.
    """
    if value is None:
        return "NULL"

    type_ = BindingType(type_)
    if type_ == BindingType.BOOLEAN:
        return "TRUE" if value else "FALSE"
    try:
        if type_ == BindingType.INTEGER:
            return str(int(value))
        if type_ == BindingType.FLOAT:
            number = float(value)
            if math.isnan(number) or math.isinf(number):
                return f"CAST('{number!r}' AS FLOAT64)"
            return repr(number)
    except (TypeError, ValueError, OverflowError) as e:
        raise TypeCoercionError(
            f"Binding value {value!r} is not a valid {type_.value}",
            cause=e,
            details={"type": type_.value},
        ) from e
    return quote_string(value)


def _as_mapping(bindings: BindingsArg) -> Dict[str, Binding]:
    if isinstance(bindings, Mapping):
        return dict(bindings)
    return {binding.placeholder: binding for binding in bindings}


class ParameterInliner:
    """Inlines a set of bindings into SQL text."""

    def __init__(self, bindings: BindingsArg):
        self.bindings = _as_mapping(bindings)

    def _replace(self, match: "re.Match") -> str:
        binding = self.bindings.get(match.group(1))
        if binding is None:
            return match.group(0)
        return render_literal(binding.value, binding.type)

    def inline(self, sql: str) -> str:
        """Returns ``sql`` with every bound placeholder replaced.

        Placeholders without a binding are left verbatim.
        """
        if not sql or not self.bindings:
            return sql
        try:
            segments = lexer.split_quoted(sql)
        except lexer.TokenError as e:
            logger.warning(f"Could not tokenize SQL, leaving placeholders unbound: {e}")
            return sql

        return "".join(
            segment if quoted else PLACEHOLDER_PATTERN.sub(self._replace, segment)
            for segment, quoted in segments
        )


def inline(sql: str, bindings: BindingsArg) -> str:
    return ParameterInliner(bindings).inline(sql)
