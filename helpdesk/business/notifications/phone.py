"""
WhatsApp phone number helpers
"""

import re
from typing import List

DEFAULT_COUNTRY_CODE = '62'


def format_phone_number(phone: str, country_code: str = DEFAULT_COUNTRY_CODE) -> str:
    """
    Normalise a phone number to international digits without '+'.

    0812-3456-789 -> 628123456789, 8123456789 -> 628123456789,
    +62 812 3456 789 -> 628123456789
    """
    cleaned = re.sub(r'\D', '', phone or '')

    if cleaned.startswith('0'):
        cleaned = country_code + cleaned[1:]

    if not cleaned.startswith(country_code):
        cleaned = country_code + cleaned

    return cleaned


def phone_variants(sender: str, country_code: str = DEFAULT_COUNTRY_CODE) -> List[str]:
    """
    Spellings a stored whatsapp_phone may use for the same sender, most likely first:
    normalised, local with leading 0, without country code, and the raw sender.
    """
    normalized = format_phone_number(sender, country_code)
    local = normalized[len(country_code):]
    variants = [normalized, '0' + local, local, sender]

    unique = []
    for variant in variants:
        if variant and variant not in unique:
            unique.append(variant)
    return unique
