"""Conversation and messaging tools."""

from __future__ import annotations

from typing import Any, Callable, Dict

from .base import ToolGroup, int_arg, tool


class ConversationTools(ToolGroup):
    category = "conversation"

    TOOLS = (
        tool(
            "search_conversations",
            "Search conversations, optionally scoped to one contact.",
            {
                "query": {"type": "string", "description": "Free-text search query"},
                "contactId": {"type": "string", "description": "Only this contact"},
                "limit": {"type": "integer", "minimum": 1, "default": 20},
            },
        ),
        tool(
            "get_conversation",
            "Get a conversation by ID.",
            {"conversationId": {"type": "string"}},
            required=["conversationId"],
        ),
        tool(
            "get_recent_messages",
            "List the most recent messages of a conversation.",
            {
                "conversationId": {"type": "string"},
                "limit": {"type": "integer", "minimum": 1, "default": 20},
            },
            required=["conversationId"],
        ),
        tool(
            "send_sms",
            "Send an SMS message to a contact.",
            {
                "contactId": {"type": "string"},
                "message": {"type": "string", "description": "Message body"},
            },
            required=["contactId", "message"],
        ),
        tool(
            "send_email",
            "Send an email to a contact.",
            {
                "contactId": {"type": "string"},
                "subject": {"type": "string"},
                "html": {"type": "string", "description": "HTML body"},
                "message": {"type": "string", "description": "Plain-text body"},
            },
            required=["contactId", "subject"],
        ),
    )

    def _tool_handlers(self) -> Dict[str, Callable[[Dict[str, Any]], Any]]:
        return {
            "search_conversations": self._search_conversations,
            "get_conversation": self._get_conversation,
            "get_recent_messages": self._get_recent_messages,
            "send_sms": self._send_sms,
            "send_email": self._send_email,
        }

    def _search_conversations(self, args: Dict[str, Any]) -> Dict[str, Any]:
        data = self.client.search_conversations(
            query=args.get("query"),
            contact_id=args.get("contactId"),
            limit=int_arg(args, "limit", 20),
        )
        conversations = data.get("conversations", [])
        return {"conversations": conversations, "total": data.get("total", len(conversations))}

    def _get_conversation(self, args: Dict[str, Any]) -> Dict[str, Any]:
        return self.client.get_conversation(args["conversationId"])

    def _get_recent_messages(self, args: Dict[str, Any]) -> Dict[str, Any]:
        data = self.client.get_messages(args["conversationId"], int_arg(args, "limit", 20))
        messages = data.get("messages", data)
        if isinstance(messages, dict):
            messages = messages.get("messages", [])
        return {"conversationId": args["conversationId"], "messages": messages}

    def _send_sms(self, args: Dict[str, Any]) -> Dict[str, Any]:
        return self.client.send_message(
            {"type": "SMS", "contactId": args["contactId"], "message": args["message"]}
        )

    def _send_email(self, args: Dict[str, Any]) -> Dict[str, Any]:
        if not args.get("html") and not args.get("message"):
            raise ValueError("send_email needs either html or message")
        payload = {
            "type": "Email",
            "contactId": args["contactId"],
            "subject": args["subject"],
            "html": args.get("html"),
            "message": args.get("message"),
        }
        return self.client.send_message(
            {key: value for key, value in payload.items() if value is not None}
        )
