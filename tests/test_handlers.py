"""Tests for the CRM handler groups."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from ghl_mcp.handlers import BlogTools, ContactTools, ConversationTools, GenAITools, default_groups


@pytest.fixture()
def ghl():
    return MagicMock()


def test_every_group_handles_exactly_its_declared_tools(ghl):
    for group in default_groups(ghl):
        declared = {descriptor.name for descriptor in group.list_tools()}
        assert declared == set(group._tool_handlers())


def test_unknown_tool_raises(ghl):
    with pytest.raises(ValueError):
        ContactTools(ghl).execute("send_sms", {})


def test_search_summarizes_contacts_and_conversations(ghl):
    ghl.search_contacts.return_value = {
        "contacts": [{"id": "c1", "firstName": "Ada", "lastName": "Lovelace", "email": "ada@example.com"}]
    }
    ghl.search_conversations.return_value = {
        "conversations": [{"id": "v1", "lastMessageBody": "Follow-up call scheduled"}]
    }

    text = GenAITools(ghl).execute("search", {"query": " ada "})

    assert 'Search Results for: "ada"' in text
    assert "Contact c1: Ada Lovelace <ada@example.com>" in text
    assert "Conversation v1: Follow-up call scheduled" in text
    ghl.search_contacts.assert_called_once_with("ada", limit=10)


def test_search_rejects_blank_query(ghl):
    with pytest.raises(ValueError):
        GenAITools(ghl).execute("search", {"query": "   "})


def test_retrieve_routes_by_type(ghl):
    ghl.get_contact.return_value = {"contact": {"id": "c1"}}
    ghl.get_blog_posts.return_value = {"blogs": [{"id": "p1"}]}
    tools = GenAITools(ghl)

    assert tools.execute("retrieve", {"id": "c1", "type": "contact"}) == {
        "type": "contact",
        "id": "c1",
        "data": {"id": "c1"},
    }
    assert tools.execute("retrieve", {"id": "b1", "type": "blog"})["data"] == {
        "posts": [{"id": "p1"}]
    }
    with pytest.raises(ValueError):
        tools.execute("retrieve", {"id": "x", "type": "invoice"})


def test_update_contact_requires_a_field(ghl):
    with pytest.raises(ValueError):
        ContactTools(ghl).execute("update_contact", {"contactId": "c1"})

    ghl.update_contact.return_value = {"contact": {"id": "c1", "firstName": "Ada"}}
    result = ContactTools(ghl).execute("update_contact", {"contactId": "c1", "firstName": "Ada"})
    assert result == {"id": "c1", "firstName": "Ada"}
    ghl.update_contact.assert_called_once_with("c1", {"firstName": "Ada"})


def test_contact_tags_must_be_strings(ghl):
    with pytest.raises(ValueError):
        ContactTools(ghl).execute("add_contact_tags", {"contactId": "c1", "tags": "vip"})


def test_send_email_builds_message_payload(ghl):
    ghl.send_message.return_value = {"messageId": "m1"}
    ConversationTools(ghl).execute(
        "send_email", {"contactId": "c1", "subject": "Hi", "html": "<p>Hi</p>"}
    )
    ghl.send_message.assert_called_once_with(
        {"type": "Email", "contactId": "c1", "subject": "Hi", "html": "<p>Hi</p>"}
    )


def test_limits_must_be_positive(ghl):
    with pytest.raises(ValueError):
        ConversationTools(ghl).execute("search_conversations", {"limit": 0})
    with pytest.raises(ValueError):
        BlogTools(ghl).execute("get_blog_posts", {"blogId": "b1", "offset": -1})
