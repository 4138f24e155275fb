"""Precedence order between URL mappings.

When several mappings could match the same path, the one that sorts first
wins. Rules, applied until one decides:

1. Fewer double wildcards.

       /foo/(*)/bar      <- wins
       /foo/(**)

2. Fewer single wildcards.

       /foo/(*)/bar      <- wins
       /foo/(*)/(*)

3. A mapping with no static tokens loses to one that has any.
4. More static tokens.

       /foo/(*)/bar      <- wins
       /foo/(*)

5. At the first position where one token is static and the other a
   single wildcard, the static one wins.
"""

from __future__ import annotations

import functools
from typing import TYPE_CHECKING

from antroute.patterns import is_double_wildcard, is_single_wildcard

if TYPE_CHECKING:
    from antroute.mapping import UrlMapping


def double_wildcard_count(mapping: UrlMapping) -> int:
    return sum(1 for token in mapping.tokens if is_double_wildcard(token))


def single_wildcard_count(mapping: UrlMapping) -> int:
    return sum(1 for token in mapping.tokens if is_single_wildcard(token))


def static_token_count(mapping: UrlMapping) -> int:
    return sum(
        1
        for token in mapping.tokens
        if token and not is_single_wildcard(token) and not is_double_wildcard(token)
    )


def compare_mappings(this: UrlMapping, other: UrlMapping) -> int:
    """Compare two mappings by precedence.

    Returns a positive number when *this* should be tried before *other*,
    a negative number when after, and ``0`` when they rank the same.
    """
    if this == other:
        return 0

    diff = double_wildcard_count(other) - double_wildcard_count(this)
    if diff:
        return diff

    diff = single_wildcard_count(other) - single_wildcard_count(this)
    if diff:
        return diff

    this_static = static_token_count(this)
    other_static = static_token_count(other)
    if other_static == 0 and this_static > 0:
        return 1
    if this_static == 0 and other_static > 0:
        return -1

    diff = this_static - other_static
    if diff:
        return diff

    for this_token, other_token in zip(this.tokens, other.tokens):
        this_wild = is_single_wildcard(this_token)
        other_wild = is_single_wildcard(other_token)
        if this_wild and not other_wild:
            return -1
        if other_wild and not this_wild:
            return 1
    return 0


#: Sort key; sort with ``reverse=True`` to put the winning mapping first.
precedence_key = functools.cmp_to_key(compare_mappings)
