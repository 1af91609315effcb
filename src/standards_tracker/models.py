"""Database models for the standards tracker."""

from datetime import datetime

from flask_sqlalchemy import SQLAlchemy

db = SQLAlchemy()


class StoredValue(db.Model):
    """A JSON document persisted under a string key (e.g. 'standards', 'groups')."""

    __tablename__ = "stored_value"

    key = db.Column(db.String(100), primary_key=True)
    value = db.Column(db.JSON, nullable=True)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
