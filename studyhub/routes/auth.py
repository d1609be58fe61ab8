import logging

from flask import Blueprint, redirect, url_for, flash, request, session, jsonify
from firebase_admin import exceptions as firebase_exceptions

from studyhub.decorators import SESSION_KEY, get_store
from studyhub.events import end_session

logger = logging.getLogger(__name__)

bp = Blueprint('auth', __name__, url_prefix='/auth')


@bp.route('/session', methods=['POST'])
def create_session():
    """Exchange the ID token from the Google popup for a session cookie."""
    payload = request.get_json(silent=True) or {}
    id_token = payload.get('idToken')
    if not id_token:
        return jsonify({'error': 'idToken is required'}), 400

    channel = get_store().open_session()
    try:
        session_cookie = channel.sign_in_interactive(id_token)
    except (ValueError, firebase_exceptions.FirebaseError) as e:
        logger.warning('Sign-in rejected: %s', e)
        return jsonify({'error': 'Đăng nhập thất bại.'}), 401

    session[SESSION_KEY] = session_cookie
    return jsonify({'user': channel.identity.to_payload()})


@bp.route('/logout', methods=['POST'])
def logout():
    session_cookie = session.pop(SESSION_KEY, None)
    if session_cookie:
        # Live tabs drop their question watch right away.
        end_session(session_cookie)
    flash('Đã đăng xuất.', 'success')
    return redirect(url_for('main.index'))
