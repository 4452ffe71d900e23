from vetchat.database.core.conversations import start_conversation
from vetchat.database.core.messages import delete_message, send_message
from vetchat.database.daos.message_dao import MessageDao
from vetchat.database.helpers.transactionManagement import SessionFactory


def test_message_count_and_page_total(alice, vet_bob):
    conversation = start_conversation(caller_id=alice.id, veterinarian_id=vet_bob.id, initial_message="One")
    second = send_message(caller_id=alice.id, conversation_id=conversation.id, content="Two")
    send_message(caller_id=vet_bob.user_id, conversation_id=conversation.id, content="Three")
    delete_message(caller_id=alice.id, message_id=second.id)

    with SessionFactory() as session:
        dao = MessageDao()
        rows, total = dao.fetchMessagesPage(session, conversation.id, offset=0, limit=1)

        assert dao.countMessages(session, conversation.id) == 2
        assert total == 2
        assert [m.content for m in rows] == ["One"]
