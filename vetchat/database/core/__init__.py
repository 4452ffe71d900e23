"""
The `core` package holds the chat operations that the API layer calls.

Contents
--------
- conversations
    Conversation Manager: start (idempotent per user/veterinarian pair), list,
    get, mark as read, close, unread count.

- messages
    Message Service: send, list (oldest first, paged), delete by sender.

- access
    Participant resolution, page normalization, entity → view mapping.

- cascade
    Deletion hooks for the user-lifecycle service.

Every public operation is one `@transactional` unit and takes the caller's
identity explicitly; there is no ambient "current user".
"""
