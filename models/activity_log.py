from datetime import datetime

from . import db

CREATE_PASSWORD = 'create_password'
UPDATE_PASSWORD = 'update_password'
DELETE_PASSWORD = 'delete_password'


class ActivityLog(db.Model):
    __tablename__ = 'activity_logs'
    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, index=True)
    action = db.Column(db.String(64), nullable=False)
    details = db.Column(db.String(512))
    ip_address = db.Column(db.String(64), default='')
    user_agent = db.Column(db.String(512), default='')
    created_at = db.Column(db.DateTime, default=datetime.utcnow, index=True)

    @staticmethod
    def record(user_id: int, action: str, details: str, ip_address: str = '', user_agent: str = ''):
        # Added to the current session only; the caller owns the commit
        entry = ActivityLog(user_id=user_id, action=action, details=details,
                            ip_address=ip_address or '', user_agent=(user_agent or '')[:512])
        db.session.add(entry)
        return entry

    @staticmethod
    def recent(user_id: int, limit: int):
        return (ActivityLog.query
                .filter_by(user_id=user_id)
                .order_by(ActivityLog.created_at.desc(), ActivityLog.id.desc())
                .limit(limit)
                .all())

    def to_dict(self) -> dict:
        return {
            'id': self.id,
            'action': self.action,
            'details': self.details,
            'ip_address': self.ip_address,
            'user_agent': self.user_agent,
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }
