"""Blog tools."""

from __future__ import annotations

from typing import Any, Callable, Dict

from .base import ToolGroup, int_arg, tool


class BlogTools(ToolGroup):
    category = "blog"

    TOOLS = (
        tool(
            "get_blog_sites",
            "List the blog sites of the location.",
            {
                "limit": {"type": "integer", "minimum": 1, "default": 10},
                "skip": {"type": "integer", "minimum": 0, "default": 0},
            },
        ),
        tool(
            "get_blog_posts",
            "List posts of a blog site.",
            {
                "blogId": {"type": "string"},
                "limit": {"type": "integer", "minimum": 1, "default": 10},
                "offset": {"type": "integer", "minimum": 0, "default": 0},
                "status": {
                    "type": "string",
                    "enum": ["DRAFT", "PUBLISHED", "SCHEDULED", "ARCHIVED"],
                },
            },
            required=["blogId"],
        ),
    )

    def _tool_handlers(self) -> Dict[str, Callable[[Dict[str, Any]], Any]]:
        return {
            "get_blog_sites": self._get_blog_sites,
            "get_blog_posts": self._get_blog_posts,
        }

    def _get_blog_sites(self, args: Dict[str, Any]) -> Dict[str, Any]:
        skip = args.get("skip", 0)
        if not isinstance(skip, int) or skip < 0:
            raise ValueError("skip must be a non-negative integer")
        data = self.client.get_blog_sites(int_arg(args, "limit", 10), skip)
        return {"sites": data.get("data", [])}

    def _get_blog_posts(self, args: Dict[str, Any]) -> Dict[str, Any]:
        offset = args.get("offset", 0)
        if not isinstance(offset, int) or offset < 0:
            raise ValueError("offset must be a non-negative integer")
        data = self.client.get_blog_posts(
            args["blogId"], int_arg(args, "limit", 10), offset, args.get("status")
        )
        return {"blogId": args["blogId"], "posts": data.get("blogs", [])}
