"""Search/retrieve tools for generic assistant clients (ChatGPT connectors).

These clients only call tools named ``search`` and ``retrieve``, so this group
bridges them onto the contact, conversation and blog endpoints.
"""

from __future__ import annotations

from typing import Any, Callable, Dict, List

from .base import ToolGroup, tool

RETRIEVABLE_TYPES = ("contact", "conversation", "blog")


class GenAITools(ToolGroup):
    category = "genai"

    TOOLS = (
        tool(
            "search",
            "Search for information in GoHighLevel CRM system",
            {"query": {"type": "string", "description": "Search query for GoHighLevel data"}},
            required=["query"],
        ),
        tool(
            "retrieve",
            "Retrieve specific data from GoHighLevel",
            {
                "id": {"type": "string", "description": "ID of the item to retrieve"},
                "type": {
                    "type": "string",
                    "enum": list(RETRIEVABLE_TYPES),
                    "description": "Type of item to retrieve",
                },
            },
            required=["id", "type"],
        ),
    )

    def _tool_handlers(self) -> Dict[str, Callable[[Dict[str, Any]], Any]]:
        return {"search": self._search, "retrieve": self._retrieve}

    def _search(self, args: Dict[str, Any]) -> str:
        query = args["query"]
        if not isinstance(query, str) or not query.strip():
            raise ValueError("query must be a non-empty string")
        query = query.strip()

        contacts = self.client.search_contacts(query, limit=10).get("contacts", [])
        conversations = self.client.search_conversations(query=query, limit=10).get(
            "conversations", []
        )

        lines: List[str] = [f'GoHighLevel Search Results for: "{query}"', ""]
        for contact in contacts:
            name = contact.get("contactName") or " ".join(
                part for part in (contact.get("firstName"), contact.get("lastName")) if part
            )
            lines.append(f"- Contact {contact.get('id')}: {name or '(no name)'} <{contact.get('email') or '-'}>")
        for conversation in conversations:
            lines.append(
                f"- Conversation {conversation.get('id')}: "
                f"{conversation.get('lastMessageBody') or conversation.get('fullName') or '(no messages)'}"
            )
        if not contacts and not conversations:
            lines.append("No matching records found.")
        lines.append("")
        lines.append(f"{len(contacts)} contacts, {len(conversations)} conversations")
        return "\n".join(lines)

    def _retrieve(self, args: Dict[str, Any]) -> Dict[str, Any]:
        item_type = args["type"]
        item_id = args["id"]
        if item_type not in RETRIEVABLE_TYPES:
            raise ValueError(
                f"type must be one of {', '.join(RETRIEVABLE_TYPES)}, got {item_type!r}"
            )

        if item_type == "contact":
            data = self.client.get_contact(item_id).get("contact", {})
        elif item_type == "conversation":
            data = self.client.get_conversation(item_id)
        else:
            data = {"posts": self.client.get_blog_posts(item_id).get("blogs", [])}
        return {"type": item_type, "id": item_id, "data": data}
