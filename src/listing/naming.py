"""Logical path formatting for source names found in FILEID records.

A FILEID record names its source either as a qualified object
(``LIB/FILE(MEMBER)``) or as a stream file path. Both are turned into a
slash separated logical path that diagnostics are keyed by.

The listing format guarantees well-formed names, so these helpers do not
validate their input. A malformed name yields a garbled path, never an
exception.
"""


def format_name(name: str) -> str:
    """Convert a qualified object name to a logical member path.

    Precondition: ``name`` has the form ``LIB/FILE(MEMBER)``.

    Example:
        >>> format_name("MYLIB/QRPGLESRC(HELLO)")
        'MYLIB/QRPGLESRC/HELLO'
    """
    library, _, rest = name.partition("/")
    source_file, _, member = rest[:-1].partition("(")
    return "/".join([library, source_file, member])


def format_ifs(path: str) -> str:
    """Remove ``.`` segments from a stream file path.

    Example:
        >>> format_ifs("/home/me/./src/hello.rpgle")
        '/home/me/src/hello.rpgle'
    """
    return "/".join(piece for piece in path.split("/") if piece != ".")


def logical_path(name: str) -> str:
    """Pick the qualified or stream file form based on the name's shape."""
    if name.endswith(")"):
        return format_name(name)
    return format_ifs(name)
