"""
Identifier inflection helpers: singular/plural forms and case transforms.

Only the last underscore-separated word of an identifier is inflected, so
``video_tags`` singularizes to ``video_tag``.
"""
from __future__ import annotations

import re
from functools import lru_cache
from typing import FrozenSet

import inflect

_engine = inflect.engine()
_classical = inflect.engine()
_classical.classical(all=True)

# Already-singular words whose trailing "s" the inflect engine would strip
SINGULAR_S_WORDS: FrozenSet[str] = frozenset({
    "alias", "atlas", "bias", "bonus", "bus", "campus", "canvas", "census",
    "corpus", "gas", "genus", "lens", "news", "radius", "series", "species",
    "status", "virus",
})
SINGULAR_S_ENDINGS = ("ss", "sis", "xis", "itis")

# Words rendered fully upper-case in TitleCase/camelCase identifiers
UPPERCASE_WORDS: FrozenSet[str] = frozenset({
    "acl", "api", "ascii", "cpu", "css", "dns", "eof", "guid", "html", "http",
    "https", "id", "ip", "json", "lhs", "qps", "ram", "rhs", "rpc", "sla",
    "smtp", "sql", "ssh", "tcp", "tls", "ttl", "udp", "ui", "uid", "uuid",
    "uri", "url", "utf8", "vm", "xml", "xmpp", "xsrf", "xss",
})

_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])")


def _split_last(identifier: str):
    head, sep, last = identifier.rpartition("_")
    return head + sep, last


@lru_cache(maxsize=4096)
def singular(identifier: str) -> str:
    """Singular form of an identifier's last word"""
    head, last = _split_last(identifier)
    if not last or _is_singular_s_word(last):
        return identifier
    result = _engine.singular_noun(last)
    if not result:
        return identifier
    # Reject forms that do not pluralize back to the input, e.g. address -> addres
    if last not in (_engine.plural_noun(result), _classical.plural_noun(result)):
        return identifier
    return head + result


def _is_singular_s_word(word: str) -> bool:
    lowered = word.lower()
    return lowered in SINGULAR_S_WORDS or lowered.endswith(SINGULAR_S_ENDINGS)


@lru_cache(maxsize=4096)
def plural(identifier: str) -> str:
    """Plural form of an identifier's last word"""
    head, last = _split_last(singular(identifier))
    if not last:
        return identifier
    return head + _engine.plural_noun(last)


def _title_word(word: str) -> str:
    if word.lower() in UPPERCASE_WORDS:
        return word.upper()
    return word[:1].upper() + word[1:]


def title_case(identifier: str) -> str:
    """``billing_customer_id`` -> ``BillingCustomerID``"""
    return "".join(_title_word(word) for word in identifier.split("_") if word)


def camel_case(identifier: str) -> str:
    """``billing_customer_id`` -> ``billingCustomerID``"""
    words = [word for word in identifier.split("_") if word]
    if not words:
        return ""
    return words[0].lower() + "".join(_title_word(word) for word in words[1:])


def snake_case(identifier: str) -> str:
    """``BillingCustomers`` -> ``billing_customers``"""
    return _CAMEL_BOUNDARY.sub("_", identifier).lower()


def trim_suffix(value: str, suffix: str) -> str:
    if suffix and value.endswith(suffix):
        return value[: -len(suffix)]
    return value
