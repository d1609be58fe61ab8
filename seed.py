import io
from werkzeug.datastructures import FileStorage
from studyhub import create_app
from studyhub.decorators import get_store
from studyhub.firestore_models import Identity
from studyhub.services.catalog import DocumentCatalog
from studyhub.services.questions import QuestionBoard


def seed_database():
    app = create_app()
    with app.app_context():
        store = get_store()
        catalog = DocumentCatalog(store)
        board = QuestionBoard(store)

        lan = Identity(uid='seed-lan', display_name='Nguyễn Thị Lan')
        minh = Identity(uid='seed-minh', display_name='Trần Văn Minh')

        print("Uploading documents...")
        samples = [
            ('Đề cương ôn tập Toán HK1', 'Toán', 'de-cuong-toan.pdf'),
            ('Tóm tắt công thức Vật lý 11', 'Lý', 'cong-thuc-ly-11.pdf'),
            ('Sơ đồ tư duy Hóa hữu cơ', 'Hóa', 'hoa-huu-co.pptx'),
        ]
        for title, subject, filename in samples:
            file = FileStorage(
                stream=io.BytesIO(f'{title}\n'.encode('utf-8')),
                filename=filename,
                content_type='application/octet-stream',
            )
            catalog.upload(title, subject, file, lan)

        print("Posting questions...")
        question_id = board.ask('Quang hợp là gì?', None, lan)
        board.answer(question_id, 'Là quá trình cây xanh chuyển quang năng thành hóa năng.', minh)
        board.ask('Cho mình đáp án câu 5 đề thi Toán HK1 với', None, minh)

        print(f"Done: {len(catalog.documents)} documents in catalog.")


if __name__ == '__main__':
    seed_database()
