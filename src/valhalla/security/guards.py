"""
Route guard decisions.

Pure functions deciding whether a protected screen renders or where the
user is sent instead. Redirects are the normal outcome of a denied route,
not errors. Web-framework decorators wrap these (see webapp.utils.guards).
"""

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Optional

from valhalla.security.access import resolve_access
from valhalla.security.features import ROOT_PATH, resolve_default_path_for_role
from valhalla.security.roles import coerce_role_id
from valhalla.session.models import AuthSnapshot

LOGIN_PATH = '/login'


class GuardOutcome(Enum):
    RENDER = 'render'
    REDIRECT = 'redirect'
    # session still restoring; caller shows a loading indicator
    WAIT = 'wait'


@dataclass(frozen=True)
class GuardDecision:
    outcome: GuardOutcome
    location: Optional[str] = None

    @property
    def allowed(self) -> bool:
        return self.outcome is GuardOutcome.RENDER


RENDER = GuardDecision(GuardOutcome.RENDER)
WAIT = GuardDecision(GuardOutcome.WAIT)


def redirect_to(location: Optional[str]) -> GuardDecision:
    return GuardDecision(GuardOutcome.REDIRECT, location or ROOT_PATH)


def require_authenticated(snapshot: AuthSnapshot) -> GuardDecision:
    """Any authenticated session may pass; others go to the login page."""
    if snapshot.is_loading:
        return WAIT
    if not snapshot.is_authenticated:
        return redirect_to(LOGIN_PATH)
    return RENDER


def require_role(snapshot: AuthSnapshot, allowed_roles: Iterable = ()) -> GuardDecision:
    """
    Only the listed roles may pass.

    An empty list allows any authenticated role. A role outside the list is
    sent to its own default path, or to the root path when it has none.
    """
    decision = require_authenticated(snapshot)
    if not decision.allowed:
        return decision

    allowed = {coerce_role_id(role) for role in allowed_roles}
    allowed.discard(None)
    if allowed and snapshot.role_id not in allowed:
        return redirect_to(resolve_default_path_for_role(snapshot.role_id))
    return RENDER


def require_feature(role_id, feature_key) -> GuardDecision:
    """
    The role must be able to view the feature.

    Exactly two outcomes: render when can_view, otherwise a redirect to the
    role's default path (root path fallback).
    """
    if resolve_access(feature_key, role_id).can.can_view:
        return RENDER
    return redirect_to(resolve_default_path_for_role(role_id))
