"""
API Package — FastAPI Router • Models • JWT Utils
=================================================

Mission
-------
This package defines the chat service's HTTP interface: FastAPI routing,
JWT-based caller identification and the request/response contracts.

Contents
--------
- fast_api
    FastAPI router (prefix `/api/chat`) with endpoints for:
      • Conversations: start, list, get, mark as read, close, unread count
      • Messages: send, list, delete

- models
    Pydantic data contracts:
      • StartConversationDetails, NewMessage (requests)
      • ConversationView, MessageView, Page[T], UnreadCount (responses)
    The core returns these view models directly.

- utils
    JWT helpers:
      • create_access_token(payload) — issues signed JWTs with exp
      • verify_token(token) — validates JWTs and extracts the subject
      • resolve_caller_id(token) — subject → user UUID, or UnauthorizedError

Operational Notes
-----------------
- Polling only: clients re-fetch conversations, messages and the unread count.
- Security: the caller is identified per request and passed explicitly to every
  core operation. Never log tokens.
"""
