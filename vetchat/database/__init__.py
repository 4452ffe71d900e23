"""
The `database` package is responsible for all interactions with the chat database.
It provides configuration, entity definitions, data access, and the chat core
operations built on top of them.

Contents:
    - config:
        Settings and the SQLAlchemy engine / declarative base.

    - entities:
        SQLAlchemy entity models (users, veterinarians, conversations, messages).

    - daos:
        Data Access Objects providing queries and conditional updates for the entities.

    - core:
        Conversation Manager, Message Service, access control and deletion hooks.

    - helpers:
        Transaction management and UTC clock helpers.
"""
