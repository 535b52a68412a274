from __future__ import annotations

import random
import string
from datetime import datetime
from typing import Optional

from ..core.constants import RECEIPT_PREFIX, RECEIPT_SUFFIX_LENGTH

_ALPHABET = string.digits + string.ascii_uppercase


class ReceiptNumberGenerator:
    """``RCP`` + YYMMDD + 4 random base-36 characters, e.g. ``RCP240610XJ3K``.

    Receipts are human references only; there is no collision check.
    """

    def __init__(self, rng: Optional[random.Random] = None):
        self._rng = rng or random.SystemRandom()

    def generate(self, now: datetime) -> str:
        suffix = "".join(self._rng.choice(_ALPHABET) for _ in range(RECEIPT_SUFFIX_LENGTH))
        return f"{RECEIPT_PREFIX}{now.strftime('%y%m%d')}{suffix}"
