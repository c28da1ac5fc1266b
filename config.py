import os

class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'dev-key-please-change'
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL')
    if SQLALCHEMY_DATABASE_URI:
        if SQLALCHEMY_DATABASE_URI.startswith("postgres://"):
            SQLALCHEMY_DATABASE_URI = SQLALCHEMY_DATABASE_URI.replace("postgres://", "postgresql://", 1)
    else:
        SQLALCHEMY_DATABASE_URI = 'sqlite:///db.sqlite3'

    SQLALCHEMY_TRACK_MODIFICATIONS = False

    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO').upper()

    # Local day boundary used for "revised today" and days-since counts
    UTC_OFFSET_HOURS = int(os.environ.get('UTC_OFFSET_HOURS', '0'))

    DEFAULT_REVISION_CYCLE = int(os.environ.get('DEFAULT_REVISION_CYCLE', '7'))
    REVISION_CYCLE_CHOICES = [3, 5, 7, 10, 14, 30]
    MAX_REVISION_CYCLE = 365

    # Hosted keep-alive (Render free instances sleep after inactivity)
    RENDER = bool(os.environ.get('RENDER'))
    RENDER_EXTERNAL_URL = os.environ.get('RENDER_EXTERNAL_URL')
    KEEP_ALIVE_INTERVAL = int(os.environ.get('KEEP_ALIVE_INTERVAL', '600'))

    # Google sign in; Authlib reads these by client name
    GOOGLE_CLIENT_ID = os.environ.get('GOOGLE_CLIENT_ID')
    GOOGLE_CLIENT_SECRET = os.environ.get('GOOGLE_CLIENT_SECRET')
