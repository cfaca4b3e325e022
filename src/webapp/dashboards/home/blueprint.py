"""
Landing page, console entry point and the role dashboard.

The dashboard shows the role's feature cards, quick access links and a few
statistics; each statistic is only fetched when the role can view the
feature it comes from.
"""

import logging
from datetime import date
from typing import Callable, Dict, List, Optional

from flask import Blueprint, redirect, render_template

from valhalla.exceptions import APIAuthError, APIError
from valhalla.security.access import resolve_access
from valhalla.security.features import ROOT_PATH
from valhalla.security.navigation import resolve_navigation
from webapp.auth.session_store import current_snapshot, get_api_client
from webapp.clients import get_resource_api
from webapp.utils.guards import login_required, require_feature

logger = logging.getLogger(__name__)

bp = Blueprint('home', __name__)

PENDING_PAYMENT_STATUSES = ('pend',)
CLOSED_PQRS_STATUSES = ('cerrad', 'resuelt', 'closed', 'resolved')


def _status_of(record) -> str:
    return str(record.get('status') or '').strip().lower()


def count_owners(records: List[dict]) -> int:
    return len(records)


def count_pending_payments(records: List[dict]) -> int:
    return sum(1 for r in records if _status_of(r).startswith(PENDING_PAYMENT_STATUSES))


def count_open_pqrs(records: List[dict]) -> int:
    return sum(1 for r in records if not _status_of(r).startswith(CLOSED_PQRS_STATUSES))


def count_reservations_on(records: List[dict], day: date) -> int:
    prefix = day.isoformat()
    return sum(1 for r in records if str(r.get('start_time') or '').startswith(prefix))


# statistic key -> (feature it is read from, label, counter)
DASHBOARD_STATS: Dict[str, tuple] = {
    'owners': ('owners', 'Propietarios registrados', count_owners),
    'pending_payments': ('payments', 'Pagos pendientes', count_pending_payments),
    'open_pqrs': ('pqrs', 'PQRS abiertas', count_open_pqrs),
    'reservations_today': ('reservations', 'Reservas de hoy',
                           lambda records: count_reservations_on(records, date.today())),
}


def _fetch_stat(resource: str, counter: Callable[[List[dict]], int]) -> Optional[int]:
    try:
        return counter(get_resource_api(get_api_client(), resource).list())
    except APIAuthError:
        raise
    except APIError as e:
        logger.warning(f"Dashboard statistic for {resource} unavailable: {e}")
        return None


def collect_stats(role_id) -> List[dict]:
    """
    Dashboard statistics visible to a role.

    Returns:
        List of {key, label, value, path}; value is None when the backend
        call failed.
    """
    stats = []
    for key, (feature_key, label, counter) in DASHBOARD_STATS.items():
        access = resolve_access(feature_key, role_id)
        if not access.can.can_view:
            continue
        stats.append({
            'key': key,
            'label': label,
            'value': _fetch_stat(access.feature.resource, counter),
            'path': access.feature.app_path,
        })
    return stats


@bp.route('/')
def index():
    """Public landing page; signed-in users go to their console."""
    snapshot = current_snapshot()
    if snapshot.is_authenticated:
        default_path = resolve_navigation(snapshot.role_id).default_path
        if default_path != ROOT_PATH:
            return redirect(default_path)
    return render_template('home.html')


@bp.route('/app')
@bp.route('/app/')
@login_required
def console():
    """Console root: the role's default landing page."""
    return redirect(resolve_navigation(current_snapshot().role_id).default_path)


@bp.route('/app/dashboard')
@require_feature('dashboard')
def dashboard():
    """Role dashboard with feature cards, quick access and statistics."""
    snapshot = current_snapshot()
    navigation = resolve_navigation(snapshot.role_id)
    return render_template(
        'app/dashboard.html',
        user=snapshot.session,
        cards=navigation.dashboard_cards,
        quick_access=navigation.quick_access,
        stats=collect_stats(snapshot.role_id),
    )
