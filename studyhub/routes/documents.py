import logging

from flask import Blueprint, redirect, url_for, flash
from studyhub.decorators import auth_required, get_current_user, get_store
from studyhub.errors import StudyHubError
from studyhub.forms import DocumentUploadForm
from studyhub.services.catalog import DocumentCatalog

logger = logging.getLogger(__name__)

bp = Blueprint('documents', __name__, url_prefix='/documents')


@bp.route('', methods=['POST'])
@auth_required
def upload():
    form = DocumentUploadForm()
    if not form.validate_on_submit():
        flash('Phiên làm việc đã hết hạn, vui lòng thử lại.', 'danger')
        return redirect(url_for('main.index', tab='docs'))

    user = get_current_user()
    catalog = DocumentCatalog(get_store())
    try:
        catalog.upload(form.title.data, form.subject.data, form.file.data, user.identity)
    except StudyHubError as e:
        flash(e.message, 'danger')
    except Exception:
        logger.exception('Document upload by %s failed', user.uid)
        flash('Đăng tài liệu thất bại, vui lòng thử lại.', 'danger')
    else:
        flash('Đăng tài liệu thành công!', 'success')
    return redirect(url_for('main.index', tab='docs'))
