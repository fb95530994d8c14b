def build_pattern(directory: str, prefix: str, suffix: str) -> str:
    """Glob for `<directory>/<prefix>*<suffix>`.

    Doubled separators are collapsed in a single left-to-right pass, so a
    directory given with a trailing slash still yields a clean pattern while
    `///` only shrinks to `//`.
    """
    pattern = directory + '/' + prefix + '*' + suffix
    return pattern.replace('//', '/')
