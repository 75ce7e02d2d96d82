"""
Life Manager - Source Package

A small personal finance and todo manager. Records live either in a
local JSON store or in a Google Sheet behind an HTTP endpoint.

DESIGN PRINCIPLES:
1. One data service, two interchangeable backends
2. Fail visibly: every operation returns a success flag and a message
3. No silent corrections of user input
4. Every mutation is auditable
"""

__version__ = "1.0.0"
__author__ = "Life Manager Team"
