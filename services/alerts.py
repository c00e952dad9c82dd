import hashlib
import logging
from collections import defaultdict

from models import db, transaction
from models.password_entry import PasswordEntry
from models.security_alert import SecurityAlert, WEAK_PASSWORD, REUSED_PASSWORD
from utils.strength import WEAK_MAX

logger = logging.getLogger(__name__)


def fingerprint(payload: str) -> str:
    return hashlib.sha256((payload or '').encode('utf-8')).hexdigest()


def _condition_key(*parts) -> str:
    return hashlib.sha256(':'.join(str(p) for p in parts).encode('utf-8')).hexdigest()


class AlertDeriver:
    """
    Derives security alerts from the current state of a user's vault.

    Conditions:
    - weak: an entry scoring at or below WEAK_MAX, one condition per entry.
    - reused: two or more entries sharing one payload, one condition per
      payload fingerprint.

    Each condition has at most one open alert. Re-evaluating refreshes the
    open alert in place (message, entry, state) instead of adding a row.
    A resolved alert silences its condition only for the vault state it was
    resolved in; once the weak payload or the reuse group changes, a new
    alert is raised.
    """

    def conditions(self, user_id: int) -> list:
        entries = PasswordEntry.query.filter_by(user_id=user_id).order_by(PasswordEntry.id).all()
        found = []
        groups = defaultdict(list)
        for e in entries:
            fp = fingerprint(e.encrypted_password)
            groups[fp].append(e)
            if e.strength <= WEAK_MAX:
                found.append({
                    'condition_key': _condition_key('weak', e.id),
                    'state_key': _condition_key('weak', e.id, fp),
                    'alert_type': WEAK_PASSWORD,
                    'severity': 'medium',
                    'entry_id': e.id,
                    'message': f'Weak password for "{e.title}" (strength {e.strength}).',
                })
        for fp, members in groups.items():
            if len(members) < 2:
                continue
            ids = [m.id for m in members]
            titles = ', '.join(f'"{m.title}"' for m in members)
            found.append({
                'condition_key': _condition_key('reused', fp),
                'state_key': _condition_key('reused', fp, *ids),
                'alert_type': REUSED_PASSWORD,
                'severity': 'high',
                'entry_id': ids[-1],
                'message': f'The same password is reused by {len(members)} entries: {titles}.',
            })
        return found

    def evaluate(self, user_id: int) -> list:
        """Raise or refresh alerts in the session and return the new ones. Caller commits."""
        alerts = SecurityAlert.query.filter_by(user_id=user_id).all()
        open_alerts = {a.condition_key: a for a in alerts if not a.resolved}
        resolved_states = {(a.condition_key, a.state_key) for a in alerts if a.resolved}
        created = []
        for cond in self.conditions(user_id):
            key = cond['condition_key']
            alert = open_alerts.get(key)
            if alert is not None:
                if alert.state_key != cond['state_key']:
                    alert.state_key = cond['state_key']
                    alert.message = cond['message']
                    alert.entry_id = cond['entry_id']
                continue
            if (key, cond['state_key']) in resolved_states:
                continue
            alert = SecurityAlert(user_id=user_id, **cond)
            db.session.add(alert)
            open_alerts[key] = alert
            created.append(alert)
        db.session.flush()
        if created:
            logger.info('raised %d alert(s) for user %s', len(created), user_id)
        return created

    def list_all(self, user_id: int) -> list:
        return (SecurityAlert.query.filter_by(user_id=user_id)
                .order_by(SecurityAlert.created_at.desc(), SecurityAlert.id.desc())
                .all())

    def list_unresolved(self, user_id: int) -> list:
        return (SecurityAlert.query.filter_by(user_id=user_id, resolved=False)
                .order_by(SecurityAlert.created_at.desc(), SecurityAlert.id.desc())
                .all())

    def resolve(self, alert_id: int, user_id: int) -> bool:
        with transaction():
            # Conditional update: only an unresolved alert owned by user_id flips
            changed = (SecurityAlert.query
                       .filter_by(id=alert_id, user_id=user_id, resolved=False)
                       .update({'resolved': True}, synchronize_session='fetch'))
        if changed:
            logger.info('alert %s resolved by user %s', alert_id, user_id)
        return bool(changed)
