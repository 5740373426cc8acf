"""Contact management tools."""

from __future__ import annotations

from typing import Any, Callable, Dict

from .base import ToolGroup, int_arg, str_list_arg, tool

_CONTACT_FIELDS = {
    "firstName": {"type": "string", "description": "First name"},
    "lastName": {"type": "string", "description": "Last name"},
    "email": {"type": "string", "description": "Email address"},
    "phone": {"type": "string", "description": "Phone number in E.164 format"},
    "tags": {"type": "array", "items": {"type": "string"}, "description": "Tags"},
    "source": {"type": "string", "description": "Lead source"},
}


class ContactTools(ToolGroup):
    category = "contact"

    TOOLS = (
        tool(
            "search_contacts",
            "Search contacts in the location by name, email or phone.",
            {
                "query": {"type": "string", "description": "Free-text search query"},
                "limit": {"type": "integer", "minimum": 1, "description": "Maximum results", "default": 25},
            },
        ),
        tool(
            "get_contact",
            "Get a single contact by ID.",
            {"contactId": {"type": "string", "description": "Contact ID"}},
            required=["contactId"],
        ),
        tool(
            "create_contact",
            "Create a new contact.",
            _CONTACT_FIELDS,
            required=["email"],
        ),
        tool(
            "update_contact",
            "Update fields on an existing contact.",
            {"contactId": {"type": "string", "description": "Contact ID"}, **_CONTACT_FIELDS},
            required=["contactId"],
        ),
        tool(
            "delete_contact",
            "Delete a contact.",
            {"contactId": {"type": "string", "description": "Contact ID"}},
            required=["contactId"],
        ),
        tool(
            "add_contact_tags",
            "Add tags to a contact.",
            {
                "contactId": {"type": "string", "description": "Contact ID"},
                "tags": {"type": "array", "items": {"type": "string"}},
            },
            required=["contactId", "tags"],
        ),
        tool(
            "remove_contact_tags",
            "Remove tags from a contact.",
            {
                "contactId": {"type": "string", "description": "Contact ID"},
                "tags": {"type": "array", "items": {"type": "string"}},
            },
            required=["contactId", "tags"],
        ),
    )

    def _tool_handlers(self) -> Dict[str, Callable[[Dict[str, Any]], Any]]:
        return {
            "search_contacts": self._search_contacts,
            "get_contact": self._get_contact,
            "create_contact": self._create_contact,
            "update_contact": self._update_contact,
            "delete_contact": self._delete_contact,
            "add_contact_tags": self._add_contact_tags,
            "remove_contact_tags": self._remove_contact_tags,
        }

    def _search_contacts(self, args: Dict[str, Any]) -> Dict[str, Any]:
        data = self.client.search_contacts(args.get("query"), int_arg(args, "limit", 25))
        contacts = data.get("contacts", [])
        return {"contacts": contacts, "total": data.get("total", len(contacts))}

    def _get_contact(self, args: Dict[str, Any]) -> Dict[str, Any]:
        return self.client.get_contact(args["contactId"]).get("contact", {})

    def _create_contact(self, args: Dict[str, Any]) -> Dict[str, Any]:
        fields = {key: value for key, value in args.items() if key in _CONTACT_FIELDS}
        return self.client.create_contact(fields).get("contact", {})

    def _update_contact(self, args: Dict[str, Any]) -> Dict[str, Any]:
        fields = {key: value for key, value in args.items() if key in _CONTACT_FIELDS}
        if not fields:
            raise ValueError("update_contact needs at least one field to change")
        return self.client.update_contact(args["contactId"], fields).get("contact", {})

    def _delete_contact(self, args: Dict[str, Any]) -> Dict[str, Any]:
        data = self.client.delete_contact(args["contactId"])
        return {"succeded": bool(data.get("succeded", True)), "contactId": args["contactId"]}

    def _add_contact_tags(self, args: Dict[str, Any]) -> Dict[str, Any]:
        return self.client.add_contact_tags(args["contactId"], str_list_arg(args, "tags"))

    def _remove_contact_tags(self, args: Dict[str, Any]) -> Dict[str, Any]:
        return self.client.remove_contact_tags(args["contactId"], str_list_arg(args, "tags"))
