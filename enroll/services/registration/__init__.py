"""
License server registration against the account service.
"""

from .flow import RegistrationFlow, build_callback_url

__all__ = [
    "RegistrationFlow",
    "build_callback_url",
]
