"""CRM tool handler groups, in registration order."""

from typing import List

from ..client import GHLApiClient
from .base import ToolGroup, tool
from .blog import BlogTools
from .contacts import ContactTools
from .conversations import ConversationTools
from .genai import GenAITools

GROUP_CLASSES = (GenAITools, ContactTools, ConversationTools, BlogTools)


def default_groups(client: GHLApiClient) -> List[ToolGroup]:
    """Instantiate every handler group against one shared client."""

    return [group_cls(client) for group_cls in GROUP_CLASSES]


__all__ = [
    "BlogTools",
    "ContactTools",
    "ConversationTools",
    "GROUP_CLASSES",
    "GenAITools",
    "ToolGroup",
    "default_groups",
    "tool",
]
