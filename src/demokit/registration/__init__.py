"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Registration/discovery service client.
"""

from .client import RegisteredNode, RegistrationClient, RegistrationError

__all__ = ["RegisteredNode", "RegistrationClient", "RegistrationError"]
