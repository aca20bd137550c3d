"""MCP server exposing AgentRecall retrieval and ingestion tools."""

from mcp.server.fastmcp import FastMCP
import httpx

from agentrecall.config import RetrieverConfig

mcp = FastMCP("agentrecall")
BROKER = RetrieverConfig.from_env().broker_url


@mcp.tool()
async def supervisor_search(query: str) -> str:
    """Search prior delegation results, workflows and agent capabilities.

    Use before delegating to recall which agent handled similar work and
    how it went. Returns plain text ready to include in your reasoning.
    """
    async with httpx.AsyncClient(timeout=10.0) as client:
        r = await client.post(f"{BROKER}/retrieve", json={"query": query})
        r.raise_for_status()
        return r.json()["context"]


@mcp.tool()
async def record_delegation(
    agent_type: str,
    task: str,
    result: str,
    success: bool = True,
    task_id: str | None = None,
    workflow_id: str | None = None,
    duration_ms: int | None = None,
) -> dict:
    """Record the outcome of a task delegated to a worker agent."""
    async with httpx.AsyncClient(timeout=10.0) as client:
        r = await client.post(f"{BROKER}/context/delegation", json={
            "agent_type": agent_type,
            "task": task,
            "result": result,
            "success": success,
            "task_id": task_id,
            "workflow_id": workflow_id,
            "duration_ms": duration_ms,
        })
        r.raise_for_status()
        return r.json()


@mcp.tool()
async def record_workflow(
    workflow_id: str,
    description: str,
    status: str = "completed",
    steps: list[str] | None = None,
    agents: list[str] | None = None,
) -> dict:
    """Record a multi-agent workflow summary.

    Args:
        workflow_id: Workflow identifier
        description: What the workflow did
        status: 'started', 'completed' or 'failed'
        steps: Workflow steps in order
        agents: Agents involved
    """
    async with httpx.AsyncClient(timeout=10.0) as client:
        r = await client.post(f"{BROKER}/context/workflow", json={
            "workflow_id": workflow_id,
            "description": description,
            "status": status,
            "steps": steps or [],
            "agents": agents or [],
        })
        r.raise_for_status()
        return r.json()


if __name__ == "__main__":
    mcp.run()
