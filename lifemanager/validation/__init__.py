"""Form validation package."""

from lifemanager.validation.validator import FormValidator, parse_amount

__all__ = ["FormValidator", "parse_amount"]
