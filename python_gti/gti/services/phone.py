"""
Phone number normalization for GTI call correlation.
"""
import logging
import re
from typing import Any, List

logger = logging.getLogger(__name__)

NON_DIGITS = re.compile(r'\D')


def strip_to_digits(value: Any) -> str:
    """
    Remove every non-digit character.

    Empty or missing input yields an empty string.
    """
    if not value:
        return ''
    return NON_DIGITS.sub('', str(value))


def normalize_to_e164(value: Any) -> str:
    """
    Normalize a North American number to +1XXXXXXXXXX.

    - 10 digits: prefixed with +1
    - 11 digits starting with 1: prefixed with +
    - Anything else: empty string, meaning the number could not be normalized

    Callers must treat the empty string as failure.
    """
    digits = strip_to_digits(value)
    if not digits:
        return ''

    if len(digits) == 10:
        return f'+1{digits}'

    if len(digits) == 11 and digits.startswith('1'):
        return f'+{digits}'

    return ''


def build_phone_variants(raw_number: Any) -> List[str]:
    """
    Build the string variants a lead's phone may have been stored as.

    Lead phones were saved in inconsistent formats over time, so duplicate
    checks match against all of: the trimmed input, its digits, and the
    +1 / 1 prefixed forms. No canonical stored format is assumed.

    Returns:
        De-duplicated list, in insertion order
    """
    variants = []

    def add(value: str) -> None:
        if value and value not in variants:
            variants.append(value)

    trimmed = str(raw_number).strip() if raw_number else ''
    add(trimmed)

    digits = strip_to_digits(trimmed)
    if digits:
        add(digits)

        if len(digits) == 10:
            add(f'+1{digits}')
            add(f'1{digits}')

        if len(digits) == 11 and digits.startswith('1'):
            add(f'+{digits}')

    return variants


def build_lookup_variants(*numbers: Any) -> List[str]:
    """Union of the variants of several numbers, without duplicates."""
    merged = []
    for number in numbers:
        for variant in build_phone_variants(number):
            if variant not in merged:
                merged.append(variant)
    logger.debug(f"Phone lookup variants: {merged}")
    return merged
