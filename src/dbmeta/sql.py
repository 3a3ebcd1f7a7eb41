"""
SQL text helpers for catalog queries.

Catalog statements are written with positional ``?`` placeholders. Before
execution they are rewritten to SQLAlchemy named binds (``:p1``, ``:p2`` ...)
so the driver paramstyle never leaks into the query text:

    SQL → Tokenize → Rewrite placeholders → sqlalchemy.text()

String literals, quoted identifiers and comments are preserved untouched.
"""
import re
from dataclasses import dataclass
from enum import Enum, auto


class TokenType(Enum):
    """Token types identified during SQL parsing."""
    SQL_TEXT = auto()
    STRING_LITERAL = auto()
    COMMENT = auto()
    POSITIONAL_PH = auto()      # ?
    COLON = auto()
    KEYWORD = auto()
    OPEN_PAREN = auto()
    CLOSE_PAREN = auto()


@dataclass(slots=True)
class Token:
    """Token from SQL parsing."""
    type: TokenType
    text: str
    start: int
    end: int


_TOKENIZE = re.compile(r"""
    (?P<string>'(?:[^']|'')*'|"(?:[^"]|"")*")
    |(?P<comment>--[^\n]*|/\*.*?\*/)
    |(?P<qmark>\?)
    |(?P<colon>:)
    |(?P<keyword>\b(?:SELECT|WITH|LIMIT|OFFSET|FROM)\b)
    |(?P<open_paren>\()
    |(?P<close_paren>\))
""", re.IGNORECASE | re.VERBOSE | re.DOTALL)

_GROUP_TYPES = {
    'string': TokenType.STRING_LITERAL,
    'comment': TokenType.COMMENT,
    'qmark': TokenType.POSITIONAL_PH,
    'colon': TokenType.COLON,
    'keyword': TokenType.KEYWORD,
    'open_paren': TokenType.OPEN_PAREN,
    'close_paren': TokenType.CLOSE_PAREN,
}


def tokenize_sql(sql: str) -> list[Token]:
    """Parse SQL into tokens in a single pass.

    Parameters
        sql: SQL query string

    Returns
        List of tokens preserving all SQL text
    """
    tokens = []
    last_end = 0

    for match in _TOKENIZE.finditer(sql):
        start, end = match.span()
        if start > last_end:
            tokens.append(Token(TokenType.SQL_TEXT, sql[last_end:start], last_end, start))
        tokens.append(Token(_GROUP_TYPES[match.lastgroup], match.group(0), start, end))
        last_end = end

    if last_end < len(sql):
        tokens.append(Token(TokenType.SQL_TEXT, sql[last_end:], last_end, len(sql)))

    return tokens


def bind_positional(sql: str) -> tuple[str, list[str]]:
    """Rewrite ``?`` placeholders into SQLAlchemy named binds.

    Literal colons outside strings are escaped so ``sqlalchemy.text`` does
    not mistake them for bind parameters (e.g. ``::int`` casts).

    Returns
        Tuple of rewritten SQL and the bind names in positional order
    """
    names: list[str] = []
    result = []
    for token in tokenize_sql(sql):
        if token.type == TokenType.POSITIONAL_PH:
            names.append(f'p{len(names) + 1}')
            result.append(f':{names[-1]}')
        elif token.type == TokenType.COLON:
            result.append('\\:')
        else:
            result.append(token.text)
    return ''.join(result), names


def first_keyword(sql: str) -> str | None:
    """Return the leading statement keyword (upper-cased) or None."""
    for token in tokenize_sql(sql):
        if token.type == TokenType.COMMENT:
            continue
        if token.type == TokenType.SQL_TEXT and not token.text.strip():
            continue
        if token.type == TokenType.OPEN_PAREN:
            continue
        if token.type == TokenType.KEYWORD:
            return token.text.upper()
        return token.text.strip().split(None, 1)[0].upper()
    return None


def has_outer_limit(sql: str) -> bool:
    """Check if the outermost query already carries a LIMIT clause."""
    depth = 0
    for token in tokenize_sql(sql):
        if token.type == TokenType.OPEN_PAREN:
            depth += 1
        elif token.type == TokenType.CLOSE_PAREN:
            depth -= 1
        elif token.type == TokenType.KEYWORD and depth == 0 and token.text.upper() == 'LIMIT':
            return True
    return False


def strip_statement(sql: str) -> str:
    """Remove trailing comments, whitespace and statement terminators.

    Anything appended to the result lands after the last SQL token, never
    inside a trailing ``--`` or ``/* */`` comment.
    """
    end = len(sql)
    for token in reversed(tokenize_sql(sql)):
        if token.type == TokenType.COMMENT:
            end = token.start
        elif token.type == TokenType.SQL_TEXT and not token.text.strip().strip(';').strip():
            end = token.start
        else:
            break
    return sql[:end].rstrip().rstrip(';').rstrip()


def like_to_regex(pattern: str) -> re.Pattern:
    """Compile a SQL LIKE pattern (``%`` and ``_`` wildcards, ``\\`` escape).
    """
    parts = []
    escaped = False
    for ch in pattern:
        if escaped:
            parts.append(re.escape(ch))
            escaped = False
        elif ch == '\\':
            escaped = True
        elif ch == '%':
            parts.append('.*')
        elif ch == '_':
            parts.append('.')
        else:
            parts.append(re.escape(ch))
    return re.compile(''.join(parts) + r'\Z', re.DOTALL)


def like_match(value: str, pattern: str) -> bool:
    """Match a value against a SQL LIKE pattern."""
    return like_to_regex(pattern).match(value) is not None
