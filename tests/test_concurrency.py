from concurrent.futures import ThreadPoolExecutor

import pytest

from conftest import count_conversations, load_conversation
from vetchat.database.core.conversations import start_conversation
from vetchat.database.core.messages import list_messages, send_message
from vetchat.database.daos.conversation_dao import ConversationDao
from vetchat.database.entities import ConversationStatus
from vetchat.exceptions import ConflictError

WORKERS = 8


def test_concurrent_starts_share_one_conversation(alice, vet_bob):
    def start(_):
        return start_conversation(caller_id=alice.id, veterinarian_id=vet_bob.id).id

    with ThreadPoolExecutor(max_workers=WORKERS) as pool:
        ids = list(pool.map(start, range(WORKERS)))

    assert len(set(ids)) == 1
    assert count_conversations(user_id=alice.id, veterinarian_id=vet_bob.id, status=ConversationStatus.ACTIVE) == 1


def test_lost_insert_race_returns_the_winner(alice, vet_bob, monkeypatch):
    winner = start_conversation(caller_id=alice.id, veterinarian_id=vet_bob.id)
    real_fetch = ConversationDao.fetchActiveConversation
    calls = []

    def stale_first_read(self, session, user_id, veterinarian_id):
        calls.append(user_id)
        if len(calls) == 1:
            return None
        return real_fetch(self, session, user_id, veterinarian_id)

    monkeypatch.setattr(ConversationDao, "fetchActiveConversation", stale_first_read)

    result = start_conversation(caller_id=alice.id, veterinarian_id=vet_bob.id, initial_message="Hello?")

    assert result.id == winner.id
    assert len(calls) == 2
    assert count_conversations(user_id=alice.id) == 1
    assert list_messages(caller_id=alice.id, conversation_id=winner.id).total == 0


def test_lost_insert_race_without_winner_conflicts(alice, vet_bob, monkeypatch):
    start_conversation(caller_id=alice.id, veterinarian_id=vet_bob.id)
    monkeypatch.setattr(ConversationDao, "fetchActiveConversation", lambda self, session, user_id, veterinarian_id: None)

    with pytest.raises(ConflictError):
        start_conversation(caller_id=alice.id, veterinarian_id=vet_bob.id)
    assert count_conversations(user_id=alice.id) == 1


def test_concurrent_sends_from_both_sides(alice, vet_bob):
    conversation = start_conversation(caller_id=alice.id, veterinarian_id=vet_bob.id)
    senders = [alice.id, vet_bob.user_id] * 5

    def send(indexed):
        i, sender = indexed
        return send_message(caller_id=sender, conversation_id=conversation.id, content=f"message {i}").id

    with ThreadPoolExecutor(max_workers=WORKERS) as pool:
        sent = list(pool.map(send, enumerate(senders)))

    stored = load_conversation(conversation.id)
    assert stored.message_seq == len(senders)
    assert stored.user_unread is True
    assert stored.vet_unread is True

    items = list_messages(caller_id=alice.id, conversation_id=conversation.id, size=len(senders)).items
    assert {m.id for m in items} == set(sent)
    times = [m.sent_at for m in items]
    assert times == sorted(times)
    assert stored.last_message_at.replace(tzinfo=None) == times[-1].replace(tzinfo=None)
