"""MCP server for AgentRecall."""
