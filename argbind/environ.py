r"""
Command-line splitting that keeps trailing path separators.

Shell-style splitters treat a backslash before a closing quote as an escape,
so a quoted directory such as "C:\build\" loses its trailing separator and
swallows the rest of the line. split() never escapes: quotes only group
whitespace into a token and are removed, everything else is kept verbatim.

    >>> split(r'tool.exe --out:"C:\build dir\" -v')
    ['--out:C:\\build dir\\', '-v']
"""
import shlex


def split(line, /, skip=True):
    """
    Split a raw command line into its non-empty tokens.

    Parameters
    - line: str
      the full command line, program path included.
    - skip: bool
      drop the first token (the program path).

    Rules
    - whitespace separates tokens; a quoted run ("..." or '...') may appear
      anywhere inside a token and its quotes are removed.
    - backslashes are ordinary characters, '#' does not start a comment.

    Raises
    - TypeError: line is not a string.
    - ValueError: a quote is left open.
    """
    if not isinstance(line, str):
        raise TypeError("split() argument must be a string")

    lexer = shlex.shlex(line, posix=True)
    lexer.whitespace_split = True
    lexer.commenters = ""
    lexer.escape = ""

    tokens = [token for token in lexer if token]
    return tokens[1:] if skip else tokens


__all__ = ("split",)
