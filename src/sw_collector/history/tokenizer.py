"""Split a log line into its keyword and payload."""

from typing import Optional

from ..exceptions import MalformedLineError

DELIMITER = ":"


def extract_token(
    line: str, delimiter: str = DELIMITER, line_number: Optional[int] = None
) -> tuple[str, str]:
    """Split ``line`` at the first ``delimiter`` into (keyword, remainder).

    The keyword is stripped of surrounding whitespace; the remainder is
    returned verbatim so extractors can apply their own grammar.

    Raises:
        MalformedLineError: If the delimiter does not occur in the line.
    """
    keyword, sep, remainder = line.partition(delimiter)
    if not sep:
        raise MalformedLineError(line, delimiter, line_number)
    return keyword.strip(), remainder
