from flask_wtf import FlaskForm
from flask_wtf.file import FileField
from wtforms import StringField, TextAreaField, SubmitField
from wtforms.validators import Optional


# Presence checks live in the controllers so HTTP and Socket.IO share them.

class DocumentUploadForm(FlaskForm):
    title = StringField('Tên tài liệu', validators=[Optional()])
    subject = StringField('Môn học (VD: Toán, Lý)', validators=[Optional()])
    file = FileField('Tệp', validators=[Optional()])
    submit = SubmitField('Đăng tài liệu')

class QuestionForm(FlaskForm):
    question = TextAreaField('Câu hỏi', validators=[Optional()])
    image = FileField('Ảnh', validators=[Optional()])
    submit = SubmitField('Gửi câu hỏi')

class AnswerForm(FlaskForm):
    text = StringField('Viết câu trả lời...', validators=[Optional()])
    submit = SubmitField('Gửi')
