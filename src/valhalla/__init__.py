"""
Valhalla console core.

Framework-free authorization and session model for the Valhalla
residential-complex administration console:

- security: roles, permission sets, the feature registry, access and
  navigation resolvers, and route-guard decisions
- session: the session provider and token handling
"""

__version__ = '1.0.0'
