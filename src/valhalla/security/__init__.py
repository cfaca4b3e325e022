"""
Authorization model.

- roles: canonical role enumeration
- permissions: view/create/edit/delete permission sets
- features: the feature registry and default landing path
- access: per-feature access resolver
- navigation: sidebar / dashboard / quick-access resolver
- guards: route guard decisions
"""
