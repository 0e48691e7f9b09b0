"""Parsing of the single extra request header option."""


def parse_extra_header(extra_header: str | None) -> tuple[str, str] | None:
    """Split a ``"Name: Value"`` string into a header name and value.

    The string is split on the first ``:`` only, so values may contain
    colons. Strings without a separator, or with an empty name, yield None.
    """
    if not extra_header or ":" not in extra_header:
        return None

    name, _, value = extra_header.partition(":")
    name = name.strip()
    if not name:
        return None
    return name, value.strip()
