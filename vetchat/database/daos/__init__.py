"""
DAOs Package — Data Access Layer (SQLAlchemy 2.0)
=================================================

The `daos` package provides the Data Access Layer of the chat core.
It encapsulates all interactions with SQLAlchemy ORM entities, providing
clean APIs for the core layer while hiding direct query details.

Conventions
-----------
- SQLAlchemy 2.0 `select` / `update` / `delete` statements
- Session lifecycle (open/commit/rollback) is handled by callers
- DAOs log and surface exceptions so upper layers decide error policy

Contents
--------
- ConversationDao
    Manages conversation records:
    * Guarded insert of ACTIVE conversations (SAVEPOINT + partial unique index)
    * Lookup by id (optionally row-locked), by active pair, by participant
    * Conditional summary updates: new message, clear unread, close
    * Cascade deletion by user participant

- MessageDao
    Manages chat message records:
    * Creates messages; fetches pages ordered by `seq`
    * Bulk read-marking of the other side's messages
    * Deletes single messages, messages by sender, messages of a user's conversations

- UserDao (user_dao) / VeterinarianDao (veterinarian_dao)
    Read-only directory lookups used for participant resolution and display names.
"""
