from datetime import datetime
from flask_sqlalchemy import SQLAlchemy
from flask_login import UserMixin
from werkzeug.security import generate_password_hash, check_password_hash

db = SQLAlchemy()

# Stored for accounts created through Google sign in; never matches a hash
UNUSABLE_PASSWORD = '!'

class User(UserMixin, db.Model):
    id = db.Column(db.Integer, primary_key=True)
    display_name = db.Column(db.String(150), nullable=False, default='User')
    email = db.Column(db.String(150), unique=True, nullable=False)
    password_hash = db.Column(db.String(200), nullable=False)
    join_date = db.Column(db.DateTime, default=datetime.utcnow)

    # Profile
    setup_completed = db.Column(db.Boolean, default=False)
    revision_cycle = db.Column(db.Integer, default=7) # days, always > 0

    # Preferences
    language = db.Column(db.String(5), default='en') # 'en', 'ar'
    date_format = db.Column(db.String(10), default='gregorian') # 'gregorian', 'hijri'
    sound_enabled = db.Column(db.Boolean, default=True)
    theme = db.Column(db.String(10), default='system') # 'light', 'dark', 'system'

    # Relationships
    juz_progress = db.relationship('JuzProgress', backref='owner', lazy=True, cascade="all, delete-orphan")
    surah_progress = db.relationship('SurahProgress', backref='owner', lazy=True, cascade="all, delete-orphan")

    def set_password(self, password):
        self.password_hash = generate_password_hash(password)

    def set_unusable_password(self):
        self.password_hash = UNUSABLE_PASSWORD

    def has_usable_password(self):
        return self.password_hash != UNUSABLE_PASSWORD

    def check_password(self, password):
        if not self.has_usable_password():
            return False
        return check_password_hash(self.password_hash, password)

class JuzProgress(db.Model):
    # One row per memorized Juz: the rows are the memorized set
    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('user.id'), nullable=False)
    juz_number = db.Column(db.Integer, nullable=False) # 1-30
    last_revised = db.Column(db.DateTime, nullable=True) # local time
    strength = db.Column(db.String(10), default='Medium', nullable=False)

    __table_args__ = (db.UniqueConstraint('user_id', 'juz_number', name='uq_user_juz'),)

class SurahProgress(db.Model):
    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('user.id'), nullable=False)
    surah_number = db.Column(db.Integer, nullable=False) # 1-114
    last_revised = db.Column(db.DateTime, nullable=True)
    strength = db.Column(db.String(10), default='Medium', nullable=False)

    __table_args__ = (db.UniqueConstraint('user_id', 'surah_number', name='uq_user_surah'),)
