import logging

from flask import Blueprint, redirect, url_for, flash
from studyhub.decorators import auth_required, get_current_user, get_store
from studyhub.errors import StudyHubError
from studyhub.forms import QuestionForm, AnswerForm
from studyhub.services.questions import QuestionBoard

logger = logging.getLogger(__name__)

bp = Blueprint('qna', __name__, url_prefix='/questions')


@bp.route('', methods=['POST'])
@auth_required
def ask():
    form = QuestionForm()
    if not form.validate_on_submit():
        flash('Phiên làm việc đã hết hạn, vui lòng thử lại.', 'danger')
        return redirect(url_for('main.index', tab='qa'))

    user = get_current_user()
    board = QuestionBoard(get_store())
    try:
        board.ask((form.question.data or '').strip(), form.image.data, user.identity)
    except StudyHubError as e:
        flash(e.message, 'danger')
    except Exception:
        logger.exception('Question by %s failed', user.uid)
        flash('Gửi câu hỏi thất bại, vui lòng thử lại.', 'danger')
    return redirect(url_for('main.index', tab='qa'))


@bp.route('/<question_id>/answers', methods=['POST'])
@auth_required
def answer(question_id):
    form = AnswerForm()
    if not form.validate_on_submit():
        flash('Phiên làm việc đã hết hạn, vui lòng thử lại.', 'danger')
        return redirect(url_for('main.index', tab='qa', reply=question_id))

    user = get_current_user()
    board = QuestionBoard(get_store())
    try:
        board.answer(question_id, (form.text.data or '').strip(), user.identity)
    except StudyHubError as e:
        flash(e.message, 'danger')
        return redirect(url_for('main.index', tab='qa', reply=question_id))
    except Exception:
        logger.exception('Answer by %s to %s failed', user.uid, question_id)
        flash('Gửi câu trả lời thất bại, vui lòng thử lại.', 'danger')
        return redirect(url_for('main.index', tab='qa', reply=question_id))
    return redirect(url_for('main.index', tab='qa'))
