import logging

from flask import Blueprint, render_template, jsonify, request, flash
from studyhub.decorators import get_current_user, get_store
from studyhub.forms import DocumentUploadForm, QuestionForm, AnswerForm
from studyhub.services.catalog import DocumentCatalog
from studyhub.services.questions import QuestionBoard

logger = logging.getLogger(__name__)

bp = Blueprint('main', __name__)

TABS = ('docs', 'qa')


@bp.route('/health')
def health():
    return jsonify({'status': 'ok'}), 200


@bp.route('/')
def index():
    tab = request.args.get('tab', 'docs')
    if tab not in TABS:
        tab = 'docs'
    search = request.args.get('q', '').strip()
    view_id = request.args.get('view')
    reply_to = request.args.get('reply')

    user = get_current_user()
    catalog = DocumentCatalog(get_store())
    board = QuestionBoard(get_store())

    # Anonymous visitors see empty lists until they sign in.
    if user.is_authenticated:
        try:
            if tab == 'docs':
                catalog.load()
            else:
                board.load()
        except Exception:
            logger.exception('Initial load of %s tab failed', tab)
            flash('Không tải được dữ liệu, vui lòng thử lại.', 'danger')

    return render_template(
        'index.html',
        tab=tab,
        search=search,
        documents=catalog.search(search),
        selected_doc=catalog.get(view_id) if view_id else None,
        questions=board.questions,
        reply_to=reply_to,
        upload_form=DocumentUploadForm(),
        question_form=QuestionForm(),
        answer_form=AnswerForm(),
    )
