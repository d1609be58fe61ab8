# tests/test_catalog.py
"""
Tests for the document catalog: full-replace loads, upload-then-insert,
and the local title/subject search.
"""

import pytest

from studyhub.errors import SignInRequired, ValidationError
from studyhub.services.catalog import DocumentCatalog


def _seed(store, *rows):
    for title, subject in rows:
        store.insert('documents', {
            'title': title, 'subject': subject, 'url': 'https://files.example.test/x',
            'fileName': 'x.pdf', 'uploadedBy': 'Seed', 'userId': 'uid-seed',
            'timestamp': store.SERVER_TIMESTAMP,
        })


class TestLoad:

    def test_empty_until_first_load(self, store):
        catalog = DocumentCatalog(store)
        assert catalog.documents == []
        assert store.count('query_all') == 0

    def test_load_orders_newest_first(self, store):
        _seed(store, ('Old', 'Toán'), ('Mid', 'Lý'), ('New', 'Hóa'))
        catalog = DocumentCatalog(store)

        catalog.load()

        assert [d.title for d in catalog.documents] == ['New', 'Mid', 'Old']

    def test_load_replaces_instead_of_merging(self, store):
        _seed(store, ('First', 'Toán'))
        catalog = DocumentCatalog(store)
        catalog.load()
        catalog.load()

        assert len(catalog.documents) == 1

        store.collections['documents'].clear()
        catalog.load()
        assert catalog.documents == []

    def test_load_notifies_listener(self, store):
        _seed(store, ('First', 'Toán'))
        seen = []
        catalog = DocumentCatalog(store, on_change=seen.append)

        catalog.load()

        assert len(seen) == 1
        assert seen[0][0].title == 'First'


class TestUpload:

    def test_valid_upload_creates_exactly_one_record(self, store, alice, make_file):
        _seed(store, ('Existing', 'Toán'))
        catalog = DocumentCatalog(store)
        catalog.load()
        before = {d.id for d in catalog.documents}

        doc_id = catalog.upload('Đề cương', 'Toán', make_file('de-cuong.pdf'), alice)

        after = {d.id for d in catalog.documents}
        assert after - before == {doc_id}
        newest = catalog.documents[0]
        assert newest.id == doc_id
        assert all(newest.timestamp >= d.timestamp for d in catalog.documents)

    def test_upload_record_fields(self, store, alice, make_file):
        catalog = DocumentCatalog(store)

        doc_id = catalog.upload('Đề cương', 'Toán', make_file('de-cuong.pdf', b'data'), alice)

        stored = store.collections['documents'][doc_id]
        assert stored['title'] == 'Đề cương'
        assert stored['subject'] == 'Toán'
        assert stored['fileName'] == 'de-cuong.pdf'
        assert stored['uploadedBy'] == 'Alice Nguyen'
        assert stored['userId'] == 'uid-alice'
        (path,) = store.blobs
        assert path.startswith('docs/') and path.endswith('_de-cuong.pdf')
        assert store.blobs[path] == b'data'
        assert stored['url'] == f'https://files.example.test/{path}'

    def test_upload_stores_blob_before_insert_then_reloads(self, store, alice, make_file):
        catalog = DocumentCatalog(store)

        catalog.upload('Đề cương', 'Toán', make_file(), alice)

        ops = [call[0] for call in store.calls]
        assert ops.index('store') < ops.index('insert') < ops.index('query_all')

    @pytest.mark.parametrize('title,subject,has_file', [
        ('', 'Toán', True),
        ('Đề cương', '', True),
        ('   ', 'Toán', True),
        ('Đề cương', 'Toán', False),
    ])
    def test_missing_field_makes_no_remote_call(self, store, alice, make_file, title, subject, has_file):
        catalog = DocumentCatalog(store)

        with pytest.raises(ValidationError) as exc:
            catalog.upload(title, subject, make_file() if has_file else None, alice)

        assert exc.value.message == 'Vui lòng điền đủ thông tin!'
        assert store.calls == []

    def test_empty_file_field_counts_as_missing(self, store, alice, make_file):
        catalog = DocumentCatalog(store)

        with pytest.raises(ValidationError):
            catalog.upload('Đề cương', 'Toán', make_file(filename=''), alice)

        assert store.count('store') == 0
        assert store.count('insert') == 0

    def test_upload_requires_identity(self, store, make_file):
        catalog = DocumentCatalog(store)

        with pytest.raises(SignInRequired):
            catalog.upload('Đề cương', 'Toán', make_file(), None)

        assert store.calls == []

    def test_failed_insert_leaves_orphaned_blob(self, store, alice, make_file):
        store.fail_insert = True
        catalog = DocumentCatalog(store)

        with pytest.raises(RuntimeError):
            catalog.upload('Đề cương', 'Toán', make_file(), alice)

        assert len(store.blobs) == 1
        assert store.collections['documents'] == {}
        assert store.count('query_all') == 0


class TestSearch:

    @pytest.fixture
    def catalog(self, store):
        _seed(store,
              ('Đề cương Toán HK1', 'Toán'),
              ('Công thức', 'Vật lý'),
              ('Sơ đồ tư duy', 'Hóa học'),
              ('Bài tập Lý nâng cao', 'Vật lý'))
        catalog = DocumentCatalog(store)
        catalog.load()
        return catalog

    def test_matches_title_or_subject_case_insensitively(self, catalog):
        results = catalog.search('VẬT LÝ')
        assert {d.title for d in results} == {'Công thức', 'Bài tập Lý nâng cao'}

        results = catalog.search('toán')
        assert [d.title for d in results] == ['Đề cương Toán HK1']

    def test_returns_exact_matching_subset(self, catalog):
        term = 'lý'
        expected = [d for d in catalog.documents
                    if term in d.title.lower() or term in d.subject.lower()]
        assert catalog.search(term) == expected

    def test_empty_term_returns_everything(self, catalog):
        assert catalog.search('') == catalog.documents

    def test_surrounding_whitespace_is_ignored(self, catalog):
        assert catalog.search(' toán ') == catalog.search('toán')
        assert catalog.search('   ') == catalog.documents

    def test_search_is_pure(self, catalog, store):
        snapshot = list(catalog.documents)
        calls = list(store.calls)

        first = catalog.search('lý')
        second = catalog.search('lý')

        assert first == second
        assert catalog.documents == snapshot
        assert store.calls == calls
        first.clear()
        assert catalog.documents == snapshot

    def test_no_match(self, catalog):
        assert catalog.search('sinh học') == []
