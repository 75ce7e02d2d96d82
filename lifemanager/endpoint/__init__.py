"""Remote endpoint package: action dispatch over the spreadsheet store."""

from lifemanager.endpoint.dispatcher import ActionDispatcher, PayloadError

__all__ = ["ActionDispatcher", "PayloadError"]
