from datetime import datetime

from . import db


class PasswordEntry(db.Model):
    __tablename__ = 'password_entries'
    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, index=True)
    title = db.Column(db.String(255), nullable=False)
    username = db.Column(db.String(255))
    url = db.Column(db.String(2048))
    notes = db.Column(db.Text)
    category = db.Column(db.String(32), nullable=False, default='login')
    # Opaque to the server, never decrypted here
    encrypted_password = db.Column(db.Text, nullable=False)
    strength = db.Column(db.Integer, nullable=False, default=0)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def to_dict(self) -> dict:
        return {
            'id': self.id,
            'user_id': self.user_id,
            'title': self.title,
            'username': self.username,
            'url': self.url,
            'notes': self.notes,
            'category': self.category,
            'encrypted_password': self.encrypted_password,
            'strength': self.strength,
            'created_at': self.created_at.isoformat() if self.created_at else None,
            'updated_at': self.updated_at.isoformat() if self.updated_at else None,
        }
