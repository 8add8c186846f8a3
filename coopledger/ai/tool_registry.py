"""Tool registry for AI function calling."""
from typing import Dict, List, Callable, Any
from sqlalchemy.orm import Session
import inspect


# Registry of available tools
TOOL_REGISTRY: Dict[str, Dict[str, Any]] = {}


def register_tool(
    name: str,
    description: str,
    parameters: Dict[str, Any],
    function: Callable
):
    """Register a tool for function calling."""
    TOOL_REGISTRY[name] = {
        "name": name,
        "description": description,
        "parameters": parameters,
        "function": function
    }


def get_tool_schemas() -> List[Dict[str, Any]]:
    """Get all registered tools as OpenAI-compatible function schemas."""
    schemas = []
    for tool_name, tool_info in TOOL_REGISTRY.items():
        params_schema = {
            "type": "object",
            "properties": tool_info["parameters"].get("properties", {})
        }

        # Only include required if there are required parameters
        required = tool_info["parameters"].get("required", [])
        if required:
            params_schema["required"] = required

        schema = {
            "type": "function",
            "function": {
                "name": tool_name,
                "description": tool_info["description"],
                "parameters": params_schema
            }
        }
        schemas.append(schema)
    return schemas


def execute_tool(tool_name: str, arguments: Dict[str, Any], db: Session) -> Any:
    """Execute a tool by name with given arguments."""
    if tool_name not in TOOL_REGISTRY:
        return {"error": f"Tool '{tool_name}' not found"}

    func = TOOL_REGISTRY[tool_name]["function"]

    # Pass db if the function accepts it, plus any matching arguments
    sig = inspect.signature(func)
    params = {}
    for param_name in sig.parameters:
        if param_name == "db":
            params["db"] = db
        elif param_name in arguments:
            params[param_name] = arguments[param_name]

    try:
        return func(**params)
    except Exception as e:
        return {"error": str(e)}


def initialize_tools():
    """Initialize and register all available tools."""
    from coopledger.ai.tools import (
        get_society_summary,
        find_members,
        get_member_statement,
        get_inflow_series,
        get_loan_portfolio,
        get_recent_contributions,
    )

    register_tool(
        name="get_society_summary",
        description="Get society-wide totals: total equity, number of members, average balance, outstanding loan exposure, total disbursed, pending loans and projected dividend. Use this for questions about the society's overall position, total savings, equity or dividends.",
        parameters={
            "type": "object",
            "properties": {},
            "required": []
        },
        function=get_society_summary
    )

    register_tool(
        name="find_members",
        description="Find members by name or staff file number and return their opening and current balances, last payment and number of records. Leave search_term empty to list the top members by balance.",
        parameters={
            "type": "object",
            "properties": {
                "search_term": {
                    "type": "string",
                    "description": "Part of a member's name or file number"
                }
            },
            "required": []
        },
        function=find_members
    )

    register_tool(
        name="get_member_statement",
        description="Get one member's full contribution statement (chronological payments with running balance). Use this when the user asks for a member's history or statement.",
        parameters={
            "type": "object",
            "properties": {
                "file_number": {
                    "type": "string",
                    "description": "The member's staff file number"
                }
            },
            "required": ["file_number"]
        },
        function=get_member_statement
    )

    register_tool(
        name="get_inflow_series",
        description="Get contribution inflows summed by month of year or by calendar year. Use this for trends, best months or year-on-year comparisons.",
        parameters={
            "type": "object",
            "properties": {
                "bucket": {
                    "type": "string",
                    "description": "Bucket granularity",
                    "enum": ["month", "year"]
                }
            },
            "required": []
        },
        function=get_inflow_series
    )

    register_tool(
        name="get_loan_portfolio",
        description="Get all loans with borrower, principal, flat interest rate, status, repaid amount and outstanding balance.",
        parameters={
            "type": "object",
            "properties": {},
            "required": []
        },
        function=get_loan_portfolio
    )

    register_tool(
        name="get_recent_contributions",
        description="Get the most recent contribution records.",
        parameters={
            "type": "object",
            "properties": {
                "limit": {
                    "type": "integer",
                    "description": "Number of records to return (default 20, max 100)"
                }
            },
            "required": []
        },
        function=get_recent_contributions
    )


# Initialize tools on module import
initialize_tools()
