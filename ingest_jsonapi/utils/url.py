"""URL construction from a template and a document field value."""

from urllib.parse import quote_plus


PLACEHOLDER = "{}"


def encode_value(value: str) -> str:
    """Form-encode ``value`` with spaces written as ``%20`` instead of ``+``.

    A literal ``+`` in the value is already encoded as ``%2B`` by
    ``quote_plus``, so every remaining ``+`` stands for a space. ``~`` is
    always left alone by ``quote_plus`` and is encoded explicitly so only
    ``*``, ``-``, ``.`` and ``_`` pass through unescaped.
    """
    return quote_plus(value, safe="*").replace("+", "%20").replace("~", "%7E")


def build_url(template: str, value: str) -> str:
    """Substitute the encoded ``value`` for the ``{}`` placeholder in ``template``.

    Only the first placeholder is replaced. A template without a placeholder
    is returned unchanged.
    """
    return template.replace(PLACEHOLDER, encode_value(value), 1)


def has_placeholder(template: str) -> bool:
    return PLACEHOLDER in template
