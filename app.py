from flask import Flask, render_template, redirect, url_for, request, flash, jsonify, abort
from flask_login import LoginManager, login_user, login_required, logout_user, current_user
from werkzeug.middleware.proxy_fix import ProxyFix
import logging
import threading
import time
from datetime import datetime, timedelta
from functools import wraps

import requests
from authlib.integrations.base_client import OAuthError
from authlib.integrations.flask_client import OAuth
from hijri_converter import Gregorian
from sqlalchemy.exc import SQLAlchemyError

from config import Config
from logging_config import setup_logging
from models import db, User
import progress
from progress import ProfileValidationError, StorageWriteError, UnknownUnitError
from surahs import JUZ_COUNT
from revision import SortKey
from views import DashboardState, build_dashboard, build_juz_detail, juz_card, surah_card

app = Flask(__name__)
app.config.from_object(Config)

setup_logging(app.config['LOG_LEVEL'])
logger = logging.getLogger(__name__)

# Correctly handle proxy headers (Client -> Cloudflare -> Render -> App)
# We trust 2 proxies: Render and Cloudflare
app.wsgi_app = ProxyFix(app.wsgi_app, x_for=2, x_proto=2, x_host=2, x_port=2, x_prefix=2)

db.init_app(app)
login_manager = LoginManager(app)
login_manager.login_view = 'login'

oauth = OAuth(app)
oauth.register(
    name='google',
    server_metadata_url='https://accounts.google.com/.well-known/openid-configuration',
    client_kwargs={'scope': 'openid email profile'},
)

AUTH_ERROR = 'Failed to authenticate. Please check your credentials.'
THEMES = ('light', 'dark', 'system')

@login_manager.user_loader
def load_user(user_id):
    return db.session.get(User, int(user_id))

def google_enabled():
    return bool(app.config.get('GOOGLE_CLIENT_ID'))

# Helper for Local Time
def get_local_now():
    """Returns the current time shifted to the configured local offset."""
    return datetime.utcnow() + timedelta(hours=app.config['UTC_OFFSET_HOURS'])

@app.context_processor
def inject_now():
    return {
        'now': get_local_now(),
        'cycle_choices': app.config['REVISION_CYCLE_CHOICES'],
        'juz_count': JUZ_COUNT,
        'google_enabled': google_enabled(),
    }

@app.template_filter('revision_date')
def revision_date_filter(value):
    """Formats a revision timestamp in the user's preferred calendar."""
    if value is None:
        return 'Never'
    if current_user.is_authenticated and current_user.date_format == 'hijri':
        try:
            hijri = Gregorian(value.year, value.month, value.day).to_hijri()
            return f"{hijri.day} {hijri.month_name()} {hijri.year} AH"
        except OverflowError:
            logger.debug("Date %s outside Hijri conversion range", value)
    return value.strftime('%d %b %Y')

def setup_required(f):
    @wraps(f)
    def decorated_function(*args, **kwargs):
        if not current_user.setup_completed:
            return redirect(url_for('profile_setup'))
        return f(*args, **kwargs)
    return decorated_function

def json_error(message, status):
    return jsonify({'success': False, 'error': message}), status

def requested_strength():
    """Strength from the JSON body; a missing body or key means rotate."""
    data = request.get_json(silent=True)
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ProfileValidationError('Invalid request body.')
    return progress.parse_strength(data.get('strength'))

def redirect_after_login(user):
    if user.setup_completed:
        return redirect(url_for('dashboard'))
    return redirect(url_for('profile_setup'))

# --- Auth Routes ---
@app.route('/register', methods=['GET', 'POST'])
def register():
    if request.method == 'POST':
        name = request.form.get('name', '').strip()
        email = request.form.get('email', '').strip().lower()
        password = request.form.get('password') or ''

        if not request.form.get('accept_terms') or not request.form.get('accept_privacy'):
            flash('Please accept both the Terms of Service and Privacy Policy', 'danger')
            return render_template('register.html', name=name, email=email), 400

        if not email or len(password) < 6:
            flash('Enter an email and a password of at least 6 characters.', 'danger')
            return render_template('register.html', name=name, email=email), 400

        if User.query.filter_by(email=email).first():
            flash('Email already registered. Please login or use a different email.', 'danger')
            return redirect(url_for('register'))

        user = User(display_name=name or 'User', email=email,
                    revision_cycle=app.config['DEFAULT_REVISION_CYCLE'])
        user.set_password(password)
        try:
            db.session.add(user)
            db.session.commit()
        except SQLAlchemyError:
            db.session.rollback()
            logger.exception("Failed to create account for %s", email)
            flash('Could not create your account. Please try again.', 'danger')
            return redirect(url_for('register'))

        logger.info("New user %s registered", user.id)
        login_user(user)
        return redirect(url_for('profile_setup'))
    return render_template('register.html')

@app.route('/login', methods=['GET', 'POST'])
def login():
    if request.method == 'POST':
        email = request.form.get('email', '').strip().lower()
        password = request.form.get('password') or ''
        user = User.query.filter_by(email=email).first()

        if user and user.check_password(password):
            login_user(user)
            return redirect_after_login(user)

        logger.info("Failed login attempt for %s", email)
        flash(AUTH_ERROR, 'danger')
    return render_template('login.html')

@app.route('/login/google')
def login_google():
    if not google_enabled():
        abort(404)
    return oauth.google.authorize_redirect(url_for('google_callback', _external=True))

@app.route('/login/google/callback')
def google_callback():
    if not google_enabled():
        abort(404)
    try:
        token = oauth.google.authorize_access_token()
    except OAuthError as e:
        logger.warning("Google sign in failed: %s", e.error)
        flash(AUTH_ERROR, 'danger')
        return redirect(url_for('login'))

    info = token.get('userinfo') or {}
    email = (info.get('email') or '').strip().lower()
    if not email or not info.get('email_verified'):
        logger.info("Google sign in refused for unverified email %s", email)
        flash(AUTH_ERROR, 'danger')
        return redirect(url_for('login'))

    user = User.query.filter_by(email=email).first()
    if user is None:
        user = User(display_name=info.get('name') or 'User', email=email,
                    revision_cycle=app.config['DEFAULT_REVISION_CYCLE'])
        user.set_unusable_password()
        try:
            db.session.add(user)
            db.session.commit()
        except SQLAlchemyError:
            db.session.rollback()
            logger.exception("Failed to create Google account for %s", email)
            flash('Could not create your account. Please try again.', 'danger')
            return redirect(url_for('login'))
        logger.info("New user %s registered with Google", user.id)

    login_user(user)
    return redirect_after_login(user)

@app.route('/logout')
@login_required
def logout():
    logout_user()
    return redirect(url_for('login'))

# --- Main Routes ---
@app.route('/ping')
def ping():
    return "PONG", 200

def keep_alive():
    """
    Pings the app to prevent Render free instance from sleeping.
    """
    # Wait for app to boot
    time.sleep(10)
    url = app.config.get('RENDER_EXTERNAL_URL')
    if not url:
        logger.warning("Keep-alive: RENDER_EXTERNAL_URL not found, skipping internal ping.")
        return

    logger.info("Keep-alive: Monitoring %s", url)
    while True:
        try:
            requests.get(f"{url}/ping", timeout=30)
            logger.debug("Keep-alive: Ping successful")
        except requests.RequestException as e:
            logger.warning("Keep-alive: Ping failed: %s", e)
        time.sleep(app.config['KEEP_ALIVE_INTERVAL'])

# Start the keep-alive thread
if app.config['RENDER']:
    threading.Thread(target=keep_alive, daemon=True).start()

@app.route('/')
def index():
    if current_user.is_authenticated:
        return redirect(url_for('dashboard'))
    return redirect(url_for('login'))

@app.route('/terms')
def terms():
    return render_template('terms.html')

@app.route('/privacy')
def privacy():
    return render_template('privacy.html')

# --- Profile Routes ---
@app.route('/profile-setup', methods=['GET', 'POST'])
@login_required
def profile_setup():
    if request.method == 'POST':
        selected = request.form.getlist('juz')
        cycle = request.form.get('revision_cycle', app.config['DEFAULT_REVISION_CYCLE'])
        try:
            progress.complete_setup(current_user, selected, cycle, app.config['MAX_REVISION_CYCLE'])
        except ProfileValidationError as e:
            flash(str(e), 'danger')
            kept = [int(n) for n in selected if str(n).isdigit()]
            return render_template('profile_setup.html', selected=kept, cycle=cycle), 400
        except StorageWriteError as e:
            flash(str(e), 'danger')
            return redirect(url_for('profile_setup'))
        return redirect(url_for('dashboard'))

    profile = progress.load_profile(current_user)
    return render_template('profile_setup.html',
                           selected=sorted(profile.memorized_juz),
                           cycle=current_user.revision_cycle)

@app.route('/profile', methods=['GET', 'POST'])
@login_required
@setup_required
def profile_view():
    if request.method == 'POST':
        selected = request.form.getlist('juz')
        cycle = request.form.get('revision_cycle')
        try:
            progress.update_profile(current_user, selected, cycle, app.config['MAX_REVISION_CYCLE'])
            flash('Profile updated successfully', 'success')
        except (ProfileValidationError, StorageWriteError) as e:
            flash(str(e), 'danger')
        return redirect(url_for('profile_view'))

    profile = progress.load_profile(current_user)
    return render_template('profile.html',
                           selected=sorted(profile.memorized_juz),
                           cycle=profile.revision_cycle_days)

@app.route('/settings', methods=['GET', 'POST'])
@login_required
def settings_view():
    if request.method == 'POST':
        section = request.form.get('section')
        if section == 'profile':
            name = request.form.get('display_name', '').strip()
            email = request.form.get('email', '').strip().lower()
            if not name or not email:
                flash('Name and email are required.', 'danger')
                return redirect(url_for('settings_view'))
            taken = User.query.filter(User.email == email, User.id != current_user.id).first()
            if taken:
                flash('That email is already in use.', 'danger')
                return redirect(url_for('settings_view'))
            current_user.display_name = name
            current_user.email = email
            message = 'Profile updated successfully'
        elif section == 'password':
            current_password = request.form.get('current_password') or ''
            new_password = request.form.get('new_password') or ''
            if current_user.has_usable_password() and not current_user.check_password(current_password):
                flash('Failed to update password', 'danger')
                return redirect(url_for('settings_view'))
            if len(new_password) < 6:
                flash('New password must be at least 6 characters.', 'danger')
                return redirect(url_for('settings_view'))
            current_user.set_password(new_password)
            message = 'Password updated successfully'
        elif section == 'preferences':
            language = request.form.get('language', current_user.language)
            date_format = request.form.get('date_format', current_user.date_format)
            theme = request.form.get('theme', current_user.theme)
            if (language not in ('en', 'ar') or date_format not in ('gregorian', 'hijri')
                    or theme not in THEMES):
                flash('Failed to update settings', 'danger')
                return redirect(url_for('settings_view'))
            current_user.language = language
            current_user.date_format = date_format
            current_user.theme = theme
            current_user.sound_enabled = request.form.get('sound_enabled') == 'on'
            message = 'Settings updated successfully'
        else:
            abort(400)

        try:
            db.session.commit()
        except SQLAlchemyError:
            db.session.rollback()
            logger.exception("Failed to save %s settings for user %s", section, current_user.id)
            flash('Failed to update settings', 'danger')
            return redirect(url_for('settings_view'))
        flash(message, 'success')
        return redirect(url_for('settings_view'))

    return render_template('settings.html')

# --- Dashboard Routes ---
@app.route('/dashboard')
@login_required
@setup_required
def dashboard():
    state = DashboardState.from_args(request.args)
    profile = progress.load_profile(current_user)
    view = build_dashboard(profile, state, get_local_now())
    return render_template('dashboard.html', view=view, sort_keys=list(SortKey))

@app.route('/juz/<int:juz_number>')
@login_required
@setup_required
def juz_detail(juz_number):
    profile = progress.load_profile(current_user)
    if juz_number not in profile.memorized_juz:
        abort(404)
    header, cards = build_juz_detail(profile, juz_number, get_local_now())
    return render_template('juz_detail.html', juz=header, cards=cards)

# --- Revision API ---
@app.route('/api/juz/<int:juz_number>/revise', methods=['POST'])
@login_required
def revise_juz(juz_number):
    now = get_local_now()
    try:
        profile = progress.mark_juz_revised(current_user, juz_number, now)
    except UnknownUnitError as e:
        return json_error(str(e), 404)
    except StorageWriteError as e:
        return json_error(str(e), 500)
    return jsonify({'success': True, **juz_card(profile, juz_number, now).as_json()})

@app.route('/api/juz/<int:juz_number>/strength', methods=['POST'])
@login_required
def change_juz_strength(juz_number):
    try:
        strength = requested_strength()
        profile = progress.set_juz_strength(current_user, juz_number, strength)
    except ProfileValidationError as e:
        return json_error(str(e), 400)
    except UnknownUnitError as e:
        return json_error(str(e), 404)
    except StorageWriteError as e:
        return json_error(str(e), 500)
    return jsonify({'success': True, **juz_card(profile, juz_number, get_local_now()).as_json()})

@app.route('/api/surah/<int:surah_number>/revise', methods=['POST'])
@login_required
def revise_surah(surah_number):
    now = get_local_now()
    try:
        profile = progress.mark_surah_revised(current_user, surah_number, now)
    except UnknownUnitError as e:
        return json_error(str(e), 404)
    except StorageWriteError as e:
        return json_error(str(e), 500)
    return jsonify({'success': True, **surah_card(profile, surah_number, now).as_json()})

@app.route('/api/surah/<int:surah_number>/strength', methods=['POST'])
@login_required
def change_surah_strength(surah_number):
    try:
        strength = requested_strength()
        profile = progress.set_surah_strength(current_user, surah_number, strength)
    except ProfileValidationError as e:
        return json_error(str(e), 400)
    except UnknownUnitError as e:
        return json_error(str(e), 404)
    except StorageWriteError as e:
        return json_error(str(e), 500)
    return jsonify({'success': True, **surah_card(profile, surah_number, get_local_now()).as_json()})

if __name__ == '__main__':
    with app.app_context():
        db.create_all()
    app.run(debug=True)
