"""Cache key normalization for (prefix, id) configuration scopes."""

DEFAULT_KEY = "rpcenv."
SEPARATOR = "."


def is_blank(value: str | None) -> bool:
    """None and the empty string are both blank."""
    return not value


def to_key(prefix: str | None, id: str | None) -> str:
    """Turn a (prefix, id) pair into a canonical cache key.

    Non-blank parts are concatenated prefix first and the result is made to
    end with a separator. When both parts are blank the shared
    ``DEFAULT_KEY`` is returned, so ``to_key(None, None)`` and
    ``to_key("", "")`` address the same scope.

    Args:
        prefix: Namespace prefix, e.g. ``"rpcenv.service."``
        id: Identifier within the namespace

    Returns:
        Cache key string ending with a separator
    """
    if is_blank(prefix) and is_blank(id):
        return DEFAULT_KEY
    key = "".join(part for part in (prefix, id) if not is_blank(part))
    if not key.endswith(SEPARATOR):
        key += SEPARATOR
    return key
