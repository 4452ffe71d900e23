import uuid

import pytest
from sqlalchemy.exc import IntegrityError

from conftest import count_conversations, count_messages, load_conversation, make_vet
from vetchat.database.core.conversations import (
    close_conversation,
    get_conversation,
    list_conversations,
    mark_as_read,
    start_conversation,
    unread_count,
)
from vetchat.database.core.messages import list_messages, send_message
from vetchat.database.entities import Conversation, ConversationStatus
from vetchat.database.helpers.clock import utcnow
from vetchat.database.helpers.transactionManagement import SessionFactory
from vetchat.exceptions import (
    AccessDeniedError,
    DomainValidationError,
    EntityNotFoundError,
    VeterinarianUnavailableError,
)


def test_start_creates_active_conversation(alice, vet_bob):
    view = start_conversation(caller_id=alice.id, veterinarian_id=vet_bob.id, subject="Limping dog")

    assert view.status == ConversationStatus.ACTIVE
    assert view.user_id == alice.id
    assert view.vet_id == vet_bob.id
    assert view.user_name == "Alice"
    assert view.vet_name == "Dr. Bob"
    assert view.subject == "Limping dog"
    assert view.closed_at is None
    assert view.has_unread_for_caller is False
    assert view.last_message_at == view.created_at

    stored = load_conversation(view.id)
    assert stored.user_unread is False
    assert stored.vet_unread is False
    assert count_messages(view.id) == 0


def test_start_is_idempotent_for_an_active_pair(alice, vet_bob):
    first = start_conversation(caller_id=alice.id, veterinarian_id=vet_bob.id, subject="First")
    second = start_conversation(
        caller_id=alice.id, veterinarian_id=vet_bob.id, subject="Second", initial_message="ignored"
    )

    assert second.id == first.id
    assert second.subject == "First"
    assert count_messages(first.id) == 0
    assert count_conversations(user_id=alice.id, status=ConversationStatus.ACTIVE) == 1


def test_start_after_close_creates_a_new_conversation(alice, vet_bob):
    first = start_conversation(caller_id=alice.id, veterinarian_id=vet_bob.id)
    close_conversation(caller_id=alice.id, conversation_id=first.id)

    second = start_conversation(caller_id=alice.id, veterinarian_id=vet_bob.id)

    assert second.id != first.id
    assert second.status == ConversationStatus.ACTIVE
    assert count_conversations(user_id=alice.id) == 2
    assert count_conversations(user_id=alice.id, status=ConversationStatus.ACTIVE) == 1


def test_start_with_initial_message_flags_vet_side(alice, vet_bob):
    view = start_conversation(caller_id=alice.id, veterinarian_id=vet_bob.id, initial_message="Hello doctor")

    stored = load_conversation(view.id)
    assert stored.vet_unread is True
    assert stored.user_unread is False
    assert view.has_unread_for_caller is False

    page = list_messages(caller_id=alice.id, conversation_id=view.id)
    assert [m.content for m in page.items] == ["Hello doctor"]
    assert page.items[0].sender_id == alice.id
    assert view.last_message_at == page.items[0].sent_at


def test_start_ignores_blank_initial_message(alice, vet_bob):
    view = start_conversation(caller_id=alice.id, veterinarian_id=vet_bob.id, initial_message="   ")

    assert count_messages(view.id) == 0
    assert load_conversation(view.id).vet_unread is False


def test_start_rejects_unknown_veterinarian(alice):
    with pytest.raises(EntityNotFoundError):
        start_conversation(caller_id=alice.id, veterinarian_id=uuid.uuid4())


def test_start_rejects_unknown_caller(vet_bob):
    with pytest.raises(EntityNotFoundError):
        start_conversation(caller_id=uuid.uuid4(), veterinarian_id=vet_bob.id)


def test_start_rejects_unavailable_veterinarian(alice):
    busy = make_vet("Busy", available=False)

    with pytest.raises(VeterinarianUnavailableError):
        start_conversation(caller_id=alice.id, veterinarian_id=busy.id)
    assert count_conversations() == 0


def test_start_rejects_own_veterinarian_profile(vet_bob):
    with pytest.raises(DomainValidationError):
        start_conversation(caller_id=vet_bob.user_id, veterinarian_id=vet_bob.id)


def test_partial_index_allows_only_one_active_conversation_per_pair(alice, vet_bob):
    start_conversation(caller_id=alice.id, veterinarian_id=vet_bob.id)

    with SessionFactory() as session:
        session.add(Conversation(uuid.uuid4(), alice.id, vet_bob.id, None, utcnow()))
        with pytest.raises(IntegrityError):
            session.commit()


def test_get_conversation_checks_participation(alice, carol, vet_bob):
    view = start_conversation(caller_id=alice.id, veterinarian_id=vet_bob.id)

    assert get_conversation(caller_id=alice.id, conversation_id=view.id).id == view.id
    assert get_conversation(caller_id=vet_bob.user_id, conversation_id=view.id).id == view.id
    with pytest.raises(AccessDeniedError):
        get_conversation(caller_id=carol.id, conversation_id=view.id)
    with pytest.raises(EntityNotFoundError):
        get_conversation(caller_id=alice.id, conversation_id=uuid.uuid4())


def test_unread_flags_are_per_side(alice, vet_bob):
    conversation = start_conversation(caller_id=alice.id, veterinarian_id=vet_bob.id)

    send_message(caller_id=alice.id, conversation_id=conversation.id, content="Hi")
    assert get_conversation(caller_id=vet_bob.user_id, conversation_id=conversation.id).has_unread_for_caller
    assert not get_conversation(caller_id=alice.id, conversation_id=conversation.id).has_unread_for_caller

    send_message(caller_id=vet_bob.user_id, conversation_id=conversation.id, content="Hello")
    stored = load_conversation(conversation.id)
    assert stored.user_unread is True
    assert stored.vet_unread is True


def test_mark_as_read_clears_own_flag_and_marks_other_side(alice, vet_bob):
    conversation = start_conversation(caller_id=alice.id, veterinarian_id=vet_bob.id, initial_message="One")
    send_message(caller_id=alice.id, conversation_id=conversation.id, content="Two")
    send_message(caller_id=vet_bob.user_id, conversation_id=conversation.id, content="Reply")

    mark_as_read(caller_id=vet_bob.user_id, conversation_id=conversation.id)

    stored = load_conversation(conversation.id)
    assert stored.vet_unread is False
    assert stored.user_unread is True
    items = list_messages(caller_id=alice.id, conversation_id=conversation.id).items
    from_alice = [m for m in items if m.sender_id == alice.id]
    from_vet = [m for m in items if m.sender_id == vet_bob.user_id]
    assert all(m.is_read and m.read_at is not None for m in from_alice)
    assert all(not m.is_read and m.read_at is None for m in from_vet)


def test_mark_as_read_is_idempotent(alice, vet_bob):
    conversation = start_conversation(caller_id=alice.id, veterinarian_id=vet_bob.id, initial_message="Hi")
    mark_as_read(caller_id=vet_bob.user_id, conversation_id=conversation.id)
    first = list_messages(caller_id=alice.id, conversation_id=conversation.id).items[0]

    mark_as_read(caller_id=vet_bob.user_id, conversation_id=conversation.id)
    again = list_messages(caller_id=alice.id, conversation_id=conversation.id).items[0]

    assert again.is_read is True
    assert again.read_at == first.read_at
    assert load_conversation(conversation.id).vet_unread is False


def test_mark_as_read_works_on_closed_conversation(alice, vet_bob):
    conversation = start_conversation(caller_id=alice.id, veterinarian_id=vet_bob.id, initial_message="Hi")
    close_conversation(caller_id=alice.id, conversation_id=conversation.id)

    mark_as_read(caller_id=vet_bob.user_id, conversation_id=conversation.id)

    assert load_conversation(conversation.id).vet_unread is False


def test_mark_as_read_requires_participation(alice, carol, vet_bob):
    conversation = start_conversation(caller_id=alice.id, veterinarian_id=vet_bob.id, initial_message="Hi")

    with pytest.raises(AccessDeniedError):
        mark_as_read(caller_id=carol.id, conversation_id=conversation.id)
    assert load_conversation(conversation.id).vet_unread is True


def test_close_sets_closed_at_once(alice, vet_bob):
    conversation = start_conversation(caller_id=alice.id, veterinarian_id=vet_bob.id)

    close_conversation(caller_id=vet_bob.user_id, conversation_id=conversation.id)
    closed = get_conversation(caller_id=alice.id, conversation_id=conversation.id)
    assert closed.status == ConversationStatus.CLOSED
    assert closed.closed_at is not None

    close_conversation(caller_id=alice.id, conversation_id=conversation.id)
    again = get_conversation(caller_id=alice.id, conversation_id=conversation.id)
    assert again.status == ConversationStatus.CLOSED
    assert again.closed_at == closed.closed_at


def test_close_requires_participation(alice, carol, vet_bob):
    conversation = start_conversation(caller_id=alice.id, veterinarian_id=vet_bob.id)

    with pytest.raises(AccessDeniedError):
        close_conversation(caller_id=carol.id, conversation_id=conversation.id)
    with pytest.raises(EntityNotFoundError):
        close_conversation(caller_id=alice.id, conversation_id=uuid.uuid4())
    assert load_conversation(conversation.id).status == ConversationStatus.ACTIVE


def test_list_conversations_covers_both_sides(alice, carol, vet_bob):
    start_conversation(caller_id=alice.id, veterinarian_id=vet_bob.id)
    start_conversation(caller_id=carol.id, veterinarian_id=vet_bob.id)

    assert list_conversations(caller_id=alice.id).total == 1
    vet_page = list_conversations(caller_id=vet_bob.user_id)
    assert vet_page.total == 2
    assert {c.user_id for c in vet_page.items} == {alice.id, carol.id}


def test_list_conversations_ordering(alice, vet_bob, vet_dana):
    older = start_conversation(caller_id=alice.id, veterinarian_id=vet_bob.id)
    newer = start_conversation(caller_id=alice.id, veterinarian_id=vet_dana.id)

    by_created = list_conversations(caller_id=alice.id)
    assert [c.id for c in by_created.items] == [newer.id, older.id]

    send_message(caller_id=alice.id, conversation_id=older.id, content="Any news?")
    by_activity = list_conversations(caller_id=alice.id, order_by_recent=True)
    assert [c.id for c in by_activity.items] == [older.id, newer.id]


def test_list_conversations_status_filter_and_paging(alice, vet_bob, vet_dana):
    first = start_conversation(caller_id=alice.id, veterinarian_id=vet_bob.id)
    start_conversation(caller_id=alice.id, veterinarian_id=vet_dana.id)
    close_conversation(caller_id=alice.id, conversation_id=first.id)

    closed = list_conversations(caller_id=alice.id, status=ConversationStatus.CLOSED)
    assert [c.id for c in closed.items] == [first.id]
    assert list_conversations(caller_id=alice.id, status=ConversationStatus.ACTIVE).total == 1

    page = list_conversations(caller_id=alice.id, page=1, size=1)
    assert page.total == 2
    assert page.page == 1
    assert page.size == 1
    assert len(page.items) == 1


@pytest.mark.parametrize("page, size", [(-1, 10), (0, 0)])
def test_list_conversations_rejects_bad_page_requests(alice, page, size):
    with pytest.raises(DomainValidationError):
        list_conversations(caller_id=alice.id, page=page, size=size)


def test_page_size_is_capped(alice):
    assert list_conversations(caller_id=alice.id, size=1000).size == 50


def test_unread_count(alice, carol, vet_bob, vet_dana):
    with_bob = start_conversation(caller_id=alice.id, veterinarian_id=vet_bob.id, initial_message="Hi Bob")
    start_conversation(caller_id=carol.id, veterinarian_id=vet_bob.id, initial_message="Hi from Carol")
    with_dana = start_conversation(caller_id=alice.id, veterinarian_id=vet_dana.id)

    assert unread_count(caller_id=vet_bob.user_id) == 2
    assert unread_count(caller_id=alice.id) == 0

    send_message(caller_id=vet_bob.user_id, conversation_id=with_bob.id, content="Hello Alice")
    send_message(caller_id=vet_dana.user_id, conversation_id=with_dana.id, content="Hello from Dana")
    assert unread_count(caller_id=alice.id) == 2

    mark_as_read(caller_id=alice.id, conversation_id=with_bob.id)
    assert unread_count(caller_id=alice.id) == 1
    mark_as_read(caller_id=vet_bob.user_id, conversation_id=with_bob.id)
    assert unread_count(caller_id=vet_bob.user_id) == 1
