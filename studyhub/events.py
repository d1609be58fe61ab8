import logging

from flask import request, session
from flask_socketio import emit
from studyhub import socketio
from studyhub.decorators import SESSION_KEY, get_store
from studyhub.errors import StudyHubError
from studyhub.services.workspace import Workspace

logger = logging.getLogger(__name__)

# sid -> Workspace, one per connected browser
workspaces = {}


def _emitter(sid):
    def emit_to_client(event, payload):
        socketio.emit(event, payload, to=sid)
    return emit_to_client


def _get_workspace():
    workspace = workspaces.get(request.sid)
    if workspace is None:
        emit('error', {'message': 'Not connected'})
    return workspace


@socketio.on('connect')
def handle_connect():
    sid = request.sid
    workspace = Workspace(get_store(), session.get(SESSION_KEY), _emitter(sid))
    workspaces[sid] = workspace
    try:
        workspace.open()
    except Exception:
        logger.exception('Opening workspace for %s failed', sid)
        emit('error', {'message': 'Không tải được dữ liệu, vui lòng thử lại.'})


def end_session(session_cookie):
    """Sign out every live workspace opened with `session_cookie`."""
    for sid, workspace in list(workspaces.items()):
        if workspace.session.session_cookie == session_cookie:
            logger.info('Signing out workspace %s', sid)
            workspace.session.sign_out()


@socketio.on('disconnect')
def handle_disconnect(reason=None):
    workspace = workspaces.pop(request.sid, None)
    if workspace is not None:
        workspace.close()


@socketio.on('search_documents')
def handle_search_documents(data):
    workspace = _get_workspace()
    if not workspace:
        return
    term = (data or {}).get('term', '')
    emit('search_results', {'term': term, 'documents': workspace.search(term)})


@socketio.on('refresh_documents')
def handle_refresh_documents(data=None):
    workspace = _get_workspace()
    if not workspace or not workspace.identity:
        return
    try:
        workspace.catalog.load()
    except Exception:
        logger.exception('Refreshing documents for %s failed', request.sid)
        emit('error', {'message': 'Không tải được dữ liệu, vui lòng thử lại.'})


@socketio.on('post_answer')
def handle_post_answer(data):
    workspace = _get_workspace()
    if not workspace:
        return
    data = data or {}
    question_id = data.get('question_id')
    if not question_id:
        emit('error', {'message': 'question_id is required'})
        return
    try:
        workspace.board.answer(question_id, (data.get('text') or '').strip(), workspace.identity)
    except StudyHubError as e:
        emit('error', {'message': e.message})
        return
    except Exception:
        logger.exception('Answer to %s failed', question_id)
        emit('error', {'message': 'Gửi câu trả lời thất bại, vui lòng thử lại.'})
        return
    return {'ok': True}
