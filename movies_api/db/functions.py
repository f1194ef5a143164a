"""
Dialect-aware SQL functions.

`genre_list(column)` aggregates genre names per group into one comma-joined
string: `string_agg(name, ',')` on PostgreSQL, `group_concat(name, ',')`
elsewhere (SQLite). The Result Assembler splits it back on `,`.
"""

from sqlalchemy import Text
from sqlalchemy.ext.compiler import compiles
from sqlalchemy.sql.expression import FunctionElement

GENRE_SEPARATOR = ","


class genre_list(FunctionElement):
    type = Text()
    inherit_cache = True


@compiles(genre_list)
def _genre_list_default(element, compiler, **kw):
    return "group_concat(%s, '%s')" % (compiler.process(element.clauses, **kw), GENRE_SEPARATOR)


@compiles(genre_list, "postgresql")
def _genre_list_postgresql(element, compiler, **kw):
    return "string_agg(%s, '%s')" % (compiler.process(element.clauses, **kw), GENRE_SEPARATOR)


__all__ = ["genre_list", "GENRE_SEPARATOR"]
