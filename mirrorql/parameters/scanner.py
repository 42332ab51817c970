"""Placeholder scanning and rendering.

Clauses are compiled with ``?`` placeholders. The scanner finds them while
skipping string literals, comments and PostgreSQL operators that contain a
question mark, so fragment builders can be checked against the number of
values they return, and finished queries can be rendered to ``$n`` style.
"""

import re
from typing import Final

from mirrorql.parameters.types import PlaceholderInfo, PlaceholderStyle

__all__ = ("PlaceholderScanner", "convert_qmark_to_numeric", "count_qmark_placeholders")


_PLACEHOLDER_REGEX: Final = re.compile(
    r"""
    # Literals and comments, matched first and skipped
    (?P<dquote>"(?:[^"\\]|\\.)*") |
    (?P<squote>'(?:[^'\\]|\\.)*') |
    (?P<line_comment>--[^\r\n]*) |
    (?P<block_comment>/\*(?:[^*]|\*(?!/))*\*/) |
    # PostgreSQL JSON operators ??, ?|, ?&
    (?P<pg_q_operator>\?\?|\?\||\?&) |
    (?P<named_qmark>\?(?P<qmark_name>[A-Za-z_]\w*)) |
    (?P<qmark>\?) |
    (?P<numeric>\$(?P<numeric_index>\d+))
    """,
    re.VERBOSE | re.MULTILINE | re.DOTALL,
)


class PlaceholderScanner:
    """Extracts placeholder information from SQL text."""

    __slots__ = ()

    def extract_placeholders(self, sql: str) -> list[PlaceholderInfo]:
        """Extract placeholders from a SQL string.

        Args:
            sql: SQL string to analyze

        Returns:
            List of PlaceholderInfo objects, sorted by position
        """
        placeholders: list[PlaceholderInfo] = []
        ordinal = 0

        for match in _PLACEHOLDER_REGEX.finditer(sql):
            if match.group("dquote") or match.group("squote"):
                continue
            if match.group("line_comment") or match.group("block_comment") or match.group("pg_q_operator"):
                continue

            if match.group("named_qmark"):
                name = match.group("qmark_name")
                style = PlaceholderStyle.NAMED_QMARK
                group = "named_qmark"
            elif match.group("qmark"):
                name = None
                style = PlaceholderStyle.QMARK
                group = "qmark"
            else:
                name = match.group("numeric_index")
                style = PlaceholderStyle.NUMERIC
                group = "numeric"

            placeholders.append(
                PlaceholderInfo(
                    name=name,
                    style=style,
                    position=match.start(group),
                    ordinal=ordinal,
                    placeholder_text=match.group(group),
                )
            )
            ordinal += 1

        return placeholders

    def count_qmark_placeholders(self, sql: str) -> int:
        """Count the ``?`` and ``?name`` placeholders in the SQL.

        Args:
            sql: SQL string to analyze

        Returns:
            Number of question-mark placeholders found
        """
        return sum(
            1
            for info in self.extract_placeholders(sql)
            if info.style in {PlaceholderStyle.QMARK, PlaceholderStyle.NAMED_QMARK}
        )

    def convert_qmark_to_numeric(self, sql: str) -> str:
        """Render question-mark placeholders as PostgreSQL ``$n`` placeholders.

        Every anonymous ``?`` gets the next number. A named ``?name`` gets a
        number the first time the name is seen and reuses it afterwards.

        Args:
            sql: SQL string with question-mark placeholders

        Returns:
            The SQL string with numeric placeholders
        """
        parts: list[str] = []
        named: dict[str, int] = {}
        last_end = 0
        index = 0

        for info in self.extract_placeholders(sql):
            if info.style is PlaceholderStyle.NUMERIC:
                continue
            if info.style is PlaceholderStyle.NAMED_QMARK:
                number = named.get(info.name)  # type: ignore[arg-type]
                if number is None:
                    index += 1
                    number = named[info.name] = index  # type: ignore[index]
            else:
                index += 1
                number = index
            parts.append(sql[last_end : info.position])
            parts.append(f"${number}")
            last_end = info.position + len(info.placeholder_text)

        parts.append(sql[last_end:])
        return "".join(parts)


_scanner: Final = PlaceholderScanner()


def count_qmark_placeholders(sql: str) -> int:
    return _scanner.count_qmark_placeholders(sql)


def convert_qmark_to_numeric(sql: str) -> str:
    return _scanner.convert_qmark_to_numeric(sql)
