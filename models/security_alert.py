from datetime import datetime

from . import db

WEAK_PASSWORD = 'weak_password'
REUSED_PASSWORD = 'reused_password'


class SecurityAlert(db.Model):
    __tablename__ = 'security_alerts'
    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, index=True)
    alert_type = db.Column(db.String(32), nullable=False)
    severity = db.Column(db.String(16), nullable=False, default='medium')
    message = db.Column(db.String(512), nullable=False)
    # No FK: alerts outlive the entry they were raised for
    entry_id = db.Column(db.Integer, nullable=True)
    # What is wrong: one weak entry, or one reused payload
    condition_key = db.Column(db.String(64), nullable=False)
    # The vault state it was last seen in; a resolve covers only this state
    state_key = db.Column(db.String(64), nullable=False)
    resolved = db.Column(db.Boolean, nullable=False, default=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    # At most one open alert per condition
    __table_args__ = (
        db.Index('uq_open_alert_condition', 'user_id', 'condition_key', unique=True,
                 sqlite_where=db.text('resolved = 0'),
                 postgresql_where=db.text('NOT resolved')),
    )

    def to_dict(self) -> dict:
        return {
            'id': self.id,
            'alert_type': self.alert_type,
            'severity': self.severity,
            'message': self.message,
            'entry_id': self.entry_id,
            'resolved': self.resolved,
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }
