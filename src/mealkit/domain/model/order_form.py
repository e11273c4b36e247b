"""OrderForm: the contact and delivery details typed in at checkout."""

from __future__ import annotations

import re
from dataclasses import dataclass

from mealkit.domain.exceptions import InvalidEmail, MissingAddress, MissingName

EMAIL_PATTERN = re.compile(
    r"^[A-Z0-9._%+-]+@[A-Z0-9.-]+\.[A-Z]{2,}$",
    re.IGNORECASE | re.ASCII,
)


def is_valid_email(value: str) -> bool:
    return EMAIL_PATTERN.fullmatch(value.strip()) is not None


@dataclass(frozen=True)
class OrderForm:
    """Free text as entered.  Nothing here is trusted until ``validate()``."""

    full_name: str = ""
    email: str = ""
    address: str = ""

    def validate(self) -> None:
        """Check the fields in a fixed order and raise the first failure.

        Name, then email, then address, so the same input always reports
        the same error.
        """
        if not self.full_name or not self.full_name.strip():
            raise MissingName()
        if not self.email or not is_valid_email(self.email):
            raise InvalidEmail()
        if not self.address or not self.address.strip():
            raise MissingAddress()

    def normalized(self) -> OrderForm:
        """Return a copy with surrounding whitespace trimmed."""
        return OrderForm(
            full_name=self.full_name.strip(),
            email=self.email.strip(),
            address=self.address.strip(),
        )
