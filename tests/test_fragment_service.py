"""Tests for the fragment lifecycle service."""

import pytest

from fragments.exceptions import (
    ConversionNotSupportedError,
    FragmentNotFoundError,
    StorageError,
    TypeImmutableError,
    UnsupportedMediaTypeError,
    ValidationError,
)
from fragments.repositories import MemoryFragmentStore
from fragments.services.fragment_service import FragmentService
from fragments.types import Fragment


class FailingPayloadStore(MemoryFragmentStore):
    """Store whose payload writes always fail."""

    def put_payload(self, owner_id, fragment_id, data):
        raise RuntimeError("disk unavailable")


class FailingMetadataStore(MemoryFragmentStore):
    """Store whose metadata writes always fail."""

    def put_metadata(self, owner_id, fragment_id, record):
        raise RuntimeError("table locked")


class RecordingStore(MemoryFragmentStore):
    """Store that records the order of write calls."""

    def __init__(self):
        super().__init__()
        self.calls = []

    def put_metadata(self, owner_id, fragment_id, record):
        self.calls.append('put_metadata')
        super().put_metadata(owner_id, fragment_id, record)

    def put_payload(self, owner_id, fragment_id, data):
        self.calls.append('put_payload')
        super().put_payload(owner_id, fragment_id, data)

    def delete_metadata(self, owner_id, fragment_id):
        self.calls.append('delete_metadata')
        return super().delete_metadata(owner_id, fragment_id)

    def delete_payload(self, owner_id, fragment_id):
        self.calls.append('delete_payload')
        return super().delete_payload(owner_id, fragment_id)


@pytest.fixture
def store():
    return MemoryFragmentStore()


@pytest.fixture
def service(store):
    return FragmentService(store)


class TestCreateFragment:

    def test_create_persists_metadata_and_data(self, service, store):
        fragment = service.create_fragment('owner', 'text/plain', b'hello')

        assert isinstance(fragment, Fragment)
        assert fragment.size == 5
        assert store.get_metadata('owner', fragment.id) == fragment.to_record()
        assert store.get_payload('owner', fragment.id) == b'hello'

    def test_create_writes_metadata_before_data(self):
        store = RecordingStore()
        FragmentService(store).create_fragment('owner', 'text/plain', b'hello')
        assert store.calls == ['put_metadata', 'put_payload']

    def test_create_keeps_type_parameters(self, service):
        fragment = service.create_fragment('owner', 'text/plain; charset=utf-8', b'hello')
        assert fragment.type == 'text/plain; charset=utf-8'
        assert fragment.mime_type == 'text/plain'

    def test_create_without_owner(self, service):
        with pytest.raises(ValidationError):
            service.create_fragment('', 'text/plain', b'hello')

    def test_create_with_empty_data(self, service, store):
        with pytest.raises(ValidationError):
            service.create_fragment('owner', 'text/plain', b'')
        assert store.list_metadata('owner') == []

    def test_create_with_unsupported_type(self, service, store):
        with pytest.raises(UnsupportedMediaTypeError):
            service.create_fragment('owner', 'application/octet-stream', b'\x00')
        assert store.list_metadata('owner') == []

    def test_invalid_json_is_not_persisted(self, service, store):
        with pytest.raises(UnsupportedMediaTypeError):
            service.create_fragment('owner', 'application/json', b'{not json')
        assert service.list_fragments('owner') == []

    def test_payload_failure_leaves_metadata_only(self):
        store = FailingPayloadStore()
        service = FragmentService(store)

        with pytest.raises(StorageError) as exc_info:
            service.create_fragment('owner', 'text/plain', b'hello')

        assert 'disk unavailable' in str(exc_info.value)
        records = store.list_metadata('owner')
        assert len(records) == 1
        assert store.get_payload('owner', records[0]['id']) is None

    def test_metadata_failure_writes_no_payload(self):
        store = FailingMetadataStore()
        service = FragmentService(store)

        with pytest.raises(StorageError):
            service.create_fragment('owner', 'text/plain', b'hello')

        assert store._payloads == {}


class TestReadFragment:

    def test_get_fragment(self, service):
        created = service.create_fragment('owner', 'text/markdown', b'# Hello')
        assert service.get_fragment('owner', created.id) == created

    def test_get_missing_fragment(self, service):
        with pytest.raises(FragmentNotFoundError):
            service.get_fragment('owner', 'missing')

    def test_other_owner_cannot_read(self, service):
        created = service.create_fragment('owner', 'text/plain', b'secret')
        with pytest.raises(FragmentNotFoundError):
            service.get_fragment('intruder', created.id)

    def test_get_fragment_data(self, service):
        created = service.create_fragment('owner', 'text/plain', b'hello')
        assert service.get_fragment_data(created) == b'hello'

    def test_missing_payload_is_not_found(self, service, store):
        created = service.create_fragment('owner', 'text/plain', b'hello')
        store.delete_payload('owner', created.id)
        with pytest.raises(FragmentNotFoundError):
            service.get_fragment_data(created)

    def test_read_round_trip_is_byte_identical(self, service, png_bytes):
        created = service.create_fragment('owner', 'image/png', png_bytes)
        fragment, result = service.read_fragment('owner', created.id)
        assert fragment == created
        assert result.data == png_bytes
        assert result.content_type == 'image/png'

    def test_read_with_own_extension_matches_plain_read(self, service):
        created = service.create_fragment('owner', 'text/markdown', b'# Hello')
        _, plain = service.read_fragment('owner', created.id)
        _, same = service.read_fragment('owner', created.id, '.md')
        assert same.data == plain.data
        assert same.content_type == plain.content_type

    def test_read_converted(self, service):
        created = service.create_fragment('owner', 'text/markdown', b'# Hello')
        _, result = service.read_fragment('owner', created.id, '.html')
        assert result.data == b'<h1>Hello</h1>'

    def test_read_unsupported_conversion(self, service):
        created = service.create_fragment('owner', 'text/markdown', b'# Hello')
        with pytest.raises(ConversionNotSupportedError):
            service.read_fragment('owner', created.id, '.csv')

    def test_storage_read_failure(self):
        class BrokenStore(MemoryFragmentStore):
            def get_metadata(self, owner_id, fragment_id):
                raise OSError("connection reset")

        with pytest.raises(StorageError):
            FragmentService(BrokenStore()).get_fragment('owner', 'frag')


class TestListFragments:

    def test_list_ids(self, service):
        first = service.create_fragment('owner', 'text/plain', b'one')
        second = service.create_fragment('owner', 'text/plain', b'two')
        assert sorted(service.list_fragments('owner')) == sorted([first.id, second.id])

    def test_list_expanded(self, service):
        created = service.create_fragment('owner', 'application/json', b'{"a": 1}')
        fragments = service.list_fragments('owner', expand=True)
        assert fragments == [created]

    def test_list_unknown_owner(self, service):
        assert service.list_fragments('nobody') == []
        assert service.list_fragments('nobody', expand=True) == []

    def test_owners_are_isolated(self, service):
        mine = service.create_fragment('a', 'text/plain', b'mine')
        theirs = service.create_fragment('b', 'text/plain', b'theirs')
        assert service.list_fragments('a') == [mine.id]
        assert service.list_fragments('b') == [theirs.id]


class TestUpdateFragment:

    def test_update_replaces_data_and_size(self, service, store):
        created = service.create_fragment('owner', 'text/plain', b'hello')
        updated = service.update_fragment('owner', created.id, 'text/plain', b'hello world')

        assert updated.id == created.id
        assert updated.owner_id == created.owner_id
        assert updated.type == created.type
        assert updated.created == created.created
        assert updated.size == 11
        assert updated.updated >= created.updated
        assert store.get_payload('owner', created.id) == b'hello world'
        assert store.get_metadata('owner', created.id)['size'] == 11

    def test_update_accepts_parameters_on_same_base_type(self, service):
        created = service.create_fragment('owner', 'text/plain', b'hello')
        updated = service.update_fragment('owner', created.id, 'text/plain; charset=utf-8', b'bye')
        assert updated.type == 'text/plain'

    def test_update_writes_metadata_before_data(self):
        store = RecordingStore()
        service = FragmentService(store)
        created = service.create_fragment('owner', 'text/plain', b'hello')
        store.calls.clear()

        service.update_fragment('owner', created.id, 'text/plain', b'bye')

        assert store.calls == ['put_metadata', 'put_payload']

    def test_type_change_is_rejected(self, service, store):
        created = service.create_fragment('owner', 'text/plain', b'hello')
        before = store.get_metadata('owner', created.id)

        with pytest.raises(TypeImmutableError):
            service.update_fragment('owner', created.id, 'text/markdown', b'# changed')

        assert store.get_metadata('owner', created.id) == before
        assert store.get_payload('owner', created.id) == b'hello'

    def test_empty_data_is_rejected_before_storage(self):
        store = RecordingStore()
        service = FragmentService(store)
        created = service.create_fragment('owner', 'text/plain', b'hello')
        store.calls.clear()

        with pytest.raises(ValidationError):
            service.update_fragment('owner', created.id, 'text/plain', b'')

        assert store.calls == []

    def test_invalid_content_is_rejected(self, service, store):
        created = service.create_fragment('owner', 'application/json', b'{"a": 1}')
        with pytest.raises(UnsupportedMediaTypeError):
            service.update_fragment('owner', created.id, 'application/json', b'{broken')
        assert store.get_payload('owner', created.id) == b'{"a": 1}'

    def test_unsupported_type_is_rejected(self, service):
        created = service.create_fragment('owner', 'text/plain', b'hello')
        with pytest.raises(UnsupportedMediaTypeError):
            service.update_fragment('owner', created.id, 'application/octet-stream', b'\x00')

    def test_update_missing_fragment(self, service):
        with pytest.raises(FragmentNotFoundError):
            service.update_fragment('owner', 'missing', 'text/plain', b'hello')

    def test_missing_fragment_is_reported_before_unsupported_type(self, service):
        with pytest.raises(FragmentNotFoundError):
            service.update_fragment('owner', 'missing', 'application/octet-stream', b'\x00')


class TestDeleteFragment:

    def test_delete_removes_metadata_and_data(self, service, store):
        created = service.create_fragment('owner', 'text/plain', b'hello')
        service.delete_fragment('owner', created.id)

        assert store.get_metadata('owner', created.id) is None
        assert store.get_payload('owner', created.id) is None
        with pytest.raises(FragmentNotFoundError):
            service.get_fragment('owner', created.id)

    def test_delete_order(self):
        store = RecordingStore()
        service = FragmentService(store)
        created = service.create_fragment('owner', 'text/plain', b'hello')
        store.calls.clear()

        service.delete_fragment('owner', created.id)

        assert store.calls == ['delete_metadata', 'delete_payload']

    def test_delete_missing_fragment(self, service):
        with pytest.raises(FragmentNotFoundError):
            service.delete_fragment('owner', 'missing')

    def test_deleted_fragment_cannot_be_updated(self, service):
        created = service.create_fragment('owner', 'text/plain', b'hello')
        service.delete_fragment('owner', created.id)
        with pytest.raises(FragmentNotFoundError):
            service.update_fragment('owner', created.id, 'text/plain', b'again')

    def test_other_owner_cannot_delete(self, service):
        created = service.create_fragment('owner', 'text/plain', b'hello')
        with pytest.raises(FragmentNotFoundError):
            service.delete_fragment('intruder', created.id)
        assert service.get_fragment('owner', created.id) == created


class TestOwnerAndIdChecks:

    @pytest.mark.parametrize('owner_id', ['', None])
    def test_list_without_owner(self, owner_id):
        store = RecordingStore()
        with pytest.raises(ValidationError):
            FragmentService(store).list_fragments(owner_id)
        assert store.calls == []

    @pytest.mark.parametrize('owner_id,fragment_id', [('', 'frag'), (None, 'frag'), ('owner', ''), ('owner', None)])
    def test_get_without_owner_or_id(self, service, owner_id, fragment_id):
        with pytest.raises(ValidationError):
            service.get_fragment(owner_id, fragment_id)

    def test_read_without_owner(self, service):
        with pytest.raises(ValidationError):
            service.read_fragment('', 'frag')

    def test_update_without_owner_writes_nothing(self):
        store = RecordingStore()
        with pytest.raises(ValidationError):
            FragmentService(store).update_fragment('', 'frag', 'text/plain', b'hello')
        assert store.calls == []

    def test_delete_without_id_deletes_nothing(self):
        store = RecordingStore()
        with pytest.raises(ValidationError):
            FragmentService(store).delete_fragment('owner', '')
        assert store.calls == []

    def test_missing_owner_is_not_a_storage_error(self, service):
        with pytest.raises(ValidationError) as exc_info:
            service.list_fragments('')
        assert not isinstance(exc_info.value, StorageError)


def test_default_store_comes_from_service_locator(memory_store):
    assert FragmentService().store is memory_store
