"""Slug generation for categories and room types."""

import re

_NON_ALNUM = re.compile(r"[^a-z0-9]+")


def slugify(value: str) -> str:
    """Lower-case ``value`` and collapse every run of non-alphanumerics into one hyphen.

    >>> slugify("  Shower Cabins & Parts ")
    'shower-cabins-parts'
    """
    return _NON_ALNUM.sub("-", value.lower()).strip("-")
