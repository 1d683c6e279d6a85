import asyncio

from daily_checkin.mcp_server import create_mcp_server


def test_mcp_server_registers_check_in_tools(service):
    mcp = create_mcp_server(service)
    tools = asyncio.run(mcp.list_tools())
    assert {tool.name for tool in tools} == {
        "get_todays_question",
        "get_past_questions",
        "get_answers_for_question",
        "submit_answer",
    }
