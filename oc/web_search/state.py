"""Web search subgraph state."""

from typing import Annotated, TypedDict

from langchain_core.messages import AnyMessage
from langgraph.graph.message import add_messages

from oc.models import SearchResult


class WebSearchState(TypedDict, total=False):
    messages: Annotated[list[AnyMessage], add_messages]
    query: str | None
    should_search: bool
    web_search_results: list[SearchResult]
