"""Escaping for text embedded in Elasticsearch regexp patterns."""

import re

# https://www.elastic.co/guide/en/elasticsearch/reference/current/regexp-syntax.html
_RESERVED = re.compile(r'[.?+*|{}\[\]()"\\#@&<>~]')


def escape(text: str | None) -> str:
    """Backslash-escape every regexp operator character in ``text``.

    Not safe to apply twice: existing backslashes get escaped again.
    """
    if text is None:
        return ""
    return _RESERVED.sub(lambda m: "\\" + m.group(0), text)
