"""Scripted stand-ins for chat models, shared by the node tests."""

from langchain_core.messages import AIMessage


class FakeChatModel:
    """Chat model double with scripted `ainvoke` responses and `astream` chunks.

    `responses` items are returned in order (strings become AIMessages,
    exceptions are raised). `streams` items are lists of chunks, or an
    exception raised when the stream is consumed. `structured` / `tools` are
    the models returned by `with_structured_output` / `bind_tools`
    (default: self).
    """

    def __init__(self, responses=(), streams=(), structured=None, tools=None):
        self.responses = list(responses)
        self.streams = list(streams)
        self.structured = structured
        self.tools = tools
        self.calls = []
        self.stream_calls = []
        self.bound_tools = []
        self.tool_choice = None
        self.schema = None

    async def ainvoke(self, messages, *args, **kwargs):
        self.calls.append(messages)
        if not self.responses:
            raise AssertionError("Unexpected ainvoke call")
        response = self.responses.pop(0)
        if isinstance(response, BaseException):
            raise response
        if isinstance(response, str):
            return AIMessage(content=response)
        return response

    async def astream(self, messages, *args, **kwargs):
        self.stream_calls.append(messages)
        if not self.streams:
            raise AssertionError("Unexpected astream call")
        chunks = self.streams.pop(0)
        if isinstance(chunks, BaseException):
            raise chunks
        for chunk in chunks:
            yield chunk

    def with_structured_output(self, schema, **kwargs):
        self.schema = schema
        return self.structured if self.structured is not None else self

    def bind_tools(self, tools, tool_choice=None, **kwargs):
        self.bound_tools = tools
        self.tool_choice = tool_choice
        return self.tools if self.tools is not None else self


def tool_response(name: str, args: dict) -> AIMessage:
    """AI message carrying a single forced tool call."""
    return AIMessage(content="", tool_calls=[{"name": name, "args": args, "id": "call_1", "type": "tool_call"}])


def evaluation_args(best_id: str, score: float, ids=("article_1", "article_2", "article_3")) -> dict:
    """Tool-call args for an evaluate_artifact response."""
    return {
        "article_comparison": [
            {
                "article_id": article_id,
                "scores": [{"score": score, "comment": "ok"}],
                "content_preferences": {"score": score, "comment": ""},
                "style_preferences": {"score": score, "comment": ""},
                "overall": {
                    "total_score": score if article_id == best_id else max(score - 10, 0),
                    "strengths": ["clear layout"],
                    "weaknesses": ["weak footer"],
                },
            }
            for article_id in ids
        ],
        "best_article": {"article_id": best_id, "total_score": score, "justification": "Best overall."},
    }


METRICS_ARGS = {
    "metrics": [
        {
            "name": "Layout",
            "description": "Visual hierarchy of the page",
            "weight": 0.5,
            "criteria": ["Clear sections"],
        },
        {
            "name": "Interactivity",
            "description": "Working controls",
            "weight": 0.5,
            "criteria": ["Toggle switches plans"],
        },
    ]
}
