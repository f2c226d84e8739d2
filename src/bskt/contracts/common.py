"""Field validators shared by the request contracts."""

import re
from decimal import Decimal, InvalidOperation
from typing import Annotated
from urllib.parse import urlparse

from pydantic import AfterValidator, StringConstraints

ADDRESS_PATTERN = r"^0x[a-fA-F0-9]{40}$"
TRANSACTION_ID_PATTERN = r"^[A-Za-z0-9_-]{1,64}$"
# Keeps amount * 10**18 within the raw amount context and the stored column
MAX_AMOUNT_DIGITS = 60

_AMOUNT_RE = re.compile(r"^\d+(\.\d+)?$")


def validate_url(v: str) -> str:
    """Require an absolute http(s) URL."""
    v = v.strip()
    parsed = urlparse(v)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise ValueError(f"Invalid URL: {v}")
    return v


def validate_amount(v: str) -> str:
    """Validate amount is a positive decimal number string."""
    v = v.strip()
    if not _AMOUNT_RE.match(v):
        raise ValueError("Amount must be a valid number string")
    try:
        amount = Decimal(v)
    except InvalidOperation:
        raise ValueError(f"Invalid amount format: {v}")
    if amount <= 0:
        raise ValueError("Amount must be positive")
    if len(amount.as_tuple().digits) > MAX_AMOUNT_DIGITS:
        raise ValueError(f"Amount must have at most {MAX_AMOUNT_DIGITS} significant digits")
    return str(amount)


UrlStr = Annotated[str, AfterValidator(validate_url)]
AmountStr = Annotated[str, AfterValidator(validate_amount)]
AddressStr = Annotated[str, StringConstraints(pattern=ADDRESS_PATTERN)]
