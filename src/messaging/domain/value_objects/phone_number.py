# src/messaging/domain/value_objects/phone_number.py
"""
Phone number validation.
WhatsApp addresses are E.164 digits; the leading + is optional.
"""
from __future__ import annotations

import re

E164_PATTERN = re.compile(r"^\+?[1-9]\d{1,14}$")


def is_valid_phone_number(value: str) -> bool:
    """
    Examples:
        +14155552671 -> True
        15551234567  -> True
        0123         -> False
    """
    return bool(E164_PATTERN.match(value.strip())) if value else False
