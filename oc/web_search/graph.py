"""Web search subgraph: classifyMessage -> (queryGenerator -> search) | END."""

from langgraph.graph import END, START, StateGraph

from oc.web_search.nodes import classify_message, query_generator, search
from oc.web_search.state import WebSearchState


def _search_or_end(state: WebSearchState) -> str:
    return "queryGenerator" if state.get("should_search") else END


workflow = StateGraph(WebSearchState)

workflow.add_node("classifyMessage", classify_message)
workflow.add_node("queryGenerator", query_generator)
workflow.add_node("search", search)

workflow.add_edge(START, "classifyMessage")
workflow.add_conditional_edges("classifyMessage", _search_or_end, ["queryGenerator", END])
workflow.add_edge("queryGenerator", "search")
workflow.add_edge("search", END)

graph = workflow.compile(name="Web Search Graph")
