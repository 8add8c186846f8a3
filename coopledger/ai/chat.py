"""AI chat service - LLM integration with function calling."""
from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError
from typing import Dict, List
from groq import Groq
import json
import logging
import re
from coopledger.core.config import settings
from coopledger.ai.tool_registry import get_tool_schemas, execute_tool
from coopledger.models.ai import AIAuditLog

logger = logging.getLogger(__name__)

MAX_TOOL_ITERATIONS = 3
APOLOGY_RESPONSE = "I apologize, but I'm having trouble processing your request. Please try rephrasing your question."


def _get_client() -> Groq:
    return Groq(api_key=settings.GROQ_API_KEY)


def build_greeting() -> str:
    greeting = f"Official Ledger Assistant for the {settings.SOCIETY_NAME} is active. I can help you with:\n\n"
    greeting += "• Member balances and contribution statements\n"
    greeting += "• Total equity, member count and projected dividends\n"
    greeting += "• Monthly and yearly contribution inflows\n"
    greeting += "• The loan portfolio and outstanding balances\n\n"
    greeting += "How can I help you today?"
    return greeting


def build_system_prompt() -> str:
    dividend_percent = f"{settings.DIVIDEND_YIELD_RATE * 100:g}"
    symbol = settings.CURRENCY_SYMBOL
    return f"""You are the Official Digital Ledger Assistant for the {settings.SOCIETY_NAME}.
You have real-time access to the society's ledger through the available tools.

Your role is to assist the society's administrators with:

1. **Member balances**: find a member by name or file number and report their opening balance, current balance and last payment. Use `find_members` and `get_member_statement`.
2. **Society position**: summarize total equity, number of members, average balance and projected dividends at the {dividend_percent}% yield. Use `get_society_summary`.
3. **Trends**: describe contribution inflows by month or by year. Use `get_inflow_series`.
4. **Loans**: describe the loan portfolio, pending applications and outstanding balances. Use `get_loan_portfolio`.
5. **Membership rules**: explain that membership requires regular monthly contributions.

**Important Guidelines**:
- Always use the tools to get figures; never invent balances
- A member's balance is their opening balance (previous payment on their earliest record) plus all their contributions
- Loans use flat interest: total due is principal plus principal times rate
- If a question is outside the ledger, politely say what you can help with

**Currency and Formatting**:
- ALWAYS use {symbol} (Naira) as the currency symbol
- Format amounts as {symbol}12,500 or {symbol}1,250.50 (comma thousands separator)
- Use Markdown: **bold** for key figures, bullet points for lists
- Keep responses concise and professional"""


def _keyword_context(db: Session, query: str, tool_calls: List[Dict]) -> str:
    """Gather tool results by keyword when function calling is unavailable."""
    from coopledger.ai.tools import (
        get_society_summary,
        find_members,
        get_member_statement,
        get_inflow_series,
        get_loan_portfolio,
        get_recent_contributions,
    )

    query_lower = query.lower()
    calls = []

    if any(k in query_lower for k in ["loan", "borrow", "repay", "interest"]):
        calls.append(("get_loan_portfolio", get_loan_portfolio, {}))
    if any(k in query_lower for k in ["month", "year", "trend", "inflow", "growth"]):
        bucket = "year" if "year" in query_lower else "month"
        calls.append(("get_inflow_series", get_inflow_series, {"bucket": bucket}))
    if any(k in query_lower for k in ["recent", "latest", "last"]):
        calls.append(("get_recent_contributions", get_recent_contributions, {}))

    file_match = re.search(r"\b([A-Z]{2,}[-/][A-Z0-9/-]+|\d{3,})\b", query, re.IGNORECASE)
    if file_match and "statement" in query_lower:
        calls.append(("get_member_statement", get_member_statement, {"file_number": file_match.group(1)}))
    elif any(k in query_lower for k in ["member", "who", "balance", "file"]):
        name_match = re.search(r"(?:for|of|is|find)\s+([a-z][a-z .'-]+?)(?:'s|\?|$)", query_lower)
        search_term = file_match.group(1) if file_match else (name_match.group(1).strip() if name_match else None)
        calls.append(("find_members", find_members, {"search_term": search_term}))

    if not calls:
        calls.append(("get_society_summary", get_society_summary, {}))

    context = ""
    for name, func, arguments in calls:
        try:
            result = func(db, **arguments)
        except SQLAlchemyError as e:
            db.rollback()
            result = {"error": str(e)}
        tool_calls.append({"tool": name, "arguments": arguments, "result": result})
        context += f"{name}: {json.dumps(result, default=str)}\n"
    return context


def _save_audit_log(db: Session, query: str, tool_calls: List[Dict], response: str):
    try:
        # Tool calls are read-only; clear any failed transaction state first
        db.rollback()
        db.add(AIAuditLog(
            query_text=query,
            tool_calls=json.loads(json.dumps(tool_calls, default=str)),
            response=response,
        ))
        db.commit()
    except SQLAlchemyError as audit_error:
        db.rollback()
        logger.error(f"Failed to save AI audit log: {audit_error}")


def process_ai_query(db: Session, query: str) -> Dict:
    """
    Process an assistant query with function calling.

    The LLM selects ledger tools for up to three rounds. When the model
    rejects tool use, a keyword-based lookup supplies the context instead.
    Every query is recorded in the AI audit log; failures come back as an
    apology in the response text rather than an exception.
    """
    tool_calls: List[Dict] = []
    ai_response = None
    system_prompt = build_system_prompt()
    messages = [
        {"role": "system", "content": system_prompt},
        {"role": "user", "content": query}
    ]
    tools = get_tool_schemas()

    try:
        client = _get_client()
        use_function_calling = bool(tools)
        iteration = 0

        while use_function_calling and iteration < MAX_TOOL_ITERATIONS:
            iteration += 1
            api_params = {
                "model": settings.LLM_MODEL,
                "messages": messages,
                "temperature": 0.3,
                "tools": tools,
                "tool_choice": "auto",
            }
            try:
                response = client.chat.completions.create(**api_params)
            except Exception as api_error:
                if "tool" in str(api_error).lower() or "400" in str(api_error):
                    logger.warning(f"Function calling rejected, using keyword fallback: {api_error}")
                    use_function_calling = False
                    break
                raise

            message = response.choices[0].message
            if not getattr(message, "tool_calls", None):
                ai_response = message.content
                break

            messages.append({
                "role": "assistant",
                "content": message.content,
                "tool_calls": [
                    {
                        "id": tc.id,
                        "type": "function",
                        "function": {
                            "name": tc.function.name,
                            "arguments": tc.function.arguments
                        }
                    }
                    for tc in message.tool_calls
                ]
            })

            for tool_call in message.tool_calls:
                tool_name = tool_call.function.name
                try:
                    arguments = json.loads(tool_call.function.arguments) if tool_call.function.arguments else {}
                except json.JSONDecodeError:
                    arguments = {}

                result = execute_tool(tool_name, arguments, db)
                tool_calls.append({
                    "tool": tool_name,
                    "arguments": arguments,
                    "result": result
                })
                messages.append({
                    "role": "tool",
                    "tool_call_id": tool_call.id,
                    "content": json.dumps(result, default=str)
                })

        if not use_function_calling:
            context = _keyword_context(db, query, tool_calls)
            response = client.chat.completions.create(
                model=settings.LLM_MODEL,
                messages=[
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": f"Context: {context}\n\nUser question: {query}"}
                ],
                temperature=0.3
            )
            ai_response = response.choices[0].message.content

        if not ai_response:
            ai_response = APOLOGY_RESPONSE
    except Exception as e:
        logger.error(f"AI query failed: {e}")
        ai_response = APOLOGY_RESPONSE

    _save_audit_log(db, query, tool_calls, ai_response)
    return {
        "response": ai_response,
        "tool_calls": tool_calls
    }
