import json
from datetime import date
from decimal import Decimal
from types import SimpleNamespace

from coopledger.ai import chat
from coopledger.ai.tool_registry import TOOL_REGISTRY, execute_tool, get_tool_schemas
from coopledger.models.ai import AIAuditLog
from coopledger.schemas.contribution import ContributionCreate
from coopledger.services.contribution import create_contribution


def tool_call_message(name, arguments, call_id="call_1"):
    function = SimpleNamespace(name=name, arguments=json.dumps(arguments))
    return SimpleNamespace(role="assistant", content=None, tool_calls=[SimpleNamespace(id=call_id, function=function)])


def text_message(content):
    return SimpleNamespace(role="assistant", content=content, tool_calls=None)


class ScriptedCompletions:
    """Returns the queued messages in order; an Exception in the queue is raised."""

    def __init__(self, *replies):
        self.replies = list(replies)
        self.calls = []

    def create(self, **kwargs):
        self.calls.append(kwargs)
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        return SimpleNamespace(choices=[SimpleNamespace(message=reply)])


def use_completions(monkeypatch, completions):
    client = SimpleNamespace(chat=SimpleNamespace(completions=completions))
    monkeypatch.setattr(chat, "_get_client", lambda: client)


def seed(db):
    create_contribution(db, ContributionCreate(
        member_name="Aisha Bello", file_number="KT/001", amount=Decimal("6000"),
        date=date(2024, 1, 25), previous_payment=Decimal("1000"),
    ))
    create_contribution(db, ContributionCreate(
        member_name="Ibrahim Musa", file_number="KT/002", amount=Decimal("3000"), date=date(2024, 2, 25),
    ))


def test_registry_exposes_ledger_tools():
    names = {schema["function"]["name"] for schema in get_tool_schemas()}

    assert names == {
        "get_society_summary",
        "find_members",
        "get_member_statement",
        "get_inflow_series",
        "get_loan_portfolio",
        "get_recent_contributions",
    }
    statement_schema = next(s for s in get_tool_schemas() if s["function"]["name"] == "get_member_statement")
    assert statement_schema["function"]["parameters"]["required"] == ["file_number"]


def test_execute_tool_injects_session(db):
    seed(db)

    summary = execute_tool("get_society_summary", {}, db)
    assert summary["total_equity"] == 10000.0
    assert summary["member_count"] == 2
    assert summary["projected_dividend"] == 500.0

    members = execute_tool("find_members", {"search_term": "ibrahim", "ignored": 1}, db)
    assert [m["file_number"] for m in members] == ["KT/002"]

    assert "error" in execute_tool("get_member_statement", {"file_number": "KT/404"}, db)
    assert execute_tool("no_such_tool", {}, db) == {"error": "Tool 'no_such_tool' not found"}
    assert "get_society_summary" in TOOL_REGISTRY


def test_process_query_with_function_calling(db, monkeypatch):
    seed(db)
    completions = ScriptedCompletions(
        tool_call_message("find_members", {"search_term": "aisha"}),
        text_message("Aisha Bello has **₦7,000**."),
    )
    use_completions(monkeypatch, completions)

    result = chat.process_ai_query(db, "What is Aisha's balance?")

    assert result["response"] == "Aisha Bello has **₦7,000**."
    assert result["tool_calls"][0]["tool"] == "find_members"
    assert result["tool_calls"][0]["result"][0]["current_balance"] == 7000.0

    tool_message = completions.calls[1]["messages"][-1]
    assert tool_message["role"] == "tool"
    assert tool_message["tool_call_id"] == "call_1"

    log = db.query(AIAuditLog).one()
    assert log.query_text == "What is Aisha's balance?"
    assert log.response == result["response"]


def test_process_query_keyword_fallback(db, monkeypatch):
    seed(db)
    completions = ScriptedCompletions(
        RuntimeError("400 tool use is not supported"),
        text_message("There are no loans yet."),
    )
    use_completions(monkeypatch, completions)

    result = chat.process_ai_query(db, "Show me the loan portfolio")

    assert result["response"] == "There are no loans yet."
    assert [c["tool"] for c in result["tool_calls"]] == ["get_loan_portfolio"]
    assert "Context: get_loan_portfolio" in completions.calls[1]["messages"][1]["content"]


def test_process_query_errors_become_apology(db, monkeypatch):
    use_completions(monkeypatch, ScriptedCompletions(RuntimeError("connection reset")))

    result = chat.process_ai_query(db, "Total equity?")

    assert result["response"] == chat.APOLOGY_RESPONSE
    assert db.query(AIAuditLog).count() == 1


def test_chat_endpoints(client, auth_headers, monkeypatch):
    use_completions(monkeypatch, ScriptedCompletions(text_message("Total equity is ₦0.")))

    greeting = client.get("/api/ai/greeting", headers=auth_headers).json()["response"]
    assert "NYSC KATSINA" in greeting

    first = client.post("/api/ai/chat", json={"query": "hello", "is_first_message": True}, headers=auth_headers)
    assert first.json()["response"] == greeting

    answer = client.post("/api/ai/chat", json={"query": "Total equity?"}, headers=auth_headers)
    assert answer.status_code == 200
    assert answer.json()["response"] == "Total equity is ₦0."

    assert client.post("/api/ai/chat", json={"query": ""}, headers=auth_headers).status_code == 422


def test_chat_feature_flag(client, auth_headers, monkeypatch):
    monkeypatch.setattr("coopledger.core.config.settings.ENABLE_AI_CHAT", False)

    response = client.post("/api/ai/chat", json={"query": "hi"}, headers=auth_headers)
    assert response.status_code == 503
