"""CLI for AgentRecall - broker server, queries and housekeeping."""

from __future__ import annotations

import json

import click
import httpx

from agentrecall import __version__
from agentrecall.client import BrokerClient, BrokerUnavailableError
from agentrecall.config import DEFAULT_BROKER_URL
from agentrecall.schemas import DelegationResult, WorkflowStatus, WorkflowSummary

MS_PER_DAY = 24 * 60 * 60 * 1000

broker_option = click.option(
    "--broker", "-b",
    default=DEFAULT_BROKER_URL,
    envvar="AGENTRECALL_BROKER_URL",
    show_default=True,
    help="Broker base URL",
)


def _call_broker(action):
    """Run a broker call, turning transport and HTTP errors into CLI errors."""
    try:
        return action()
    except BrokerUnavailableError as e:
        raise click.ClickException(f"{e}. Is 'agentrecall serve' running?")
    except httpx.HTTPStatusError as e:
        raise click.ClickException(
            f"Broker returned {e.response.status_code}: {e.response.text}"
        )


@click.group()
@click.version_option(version=__version__, prog_name="agentrecall")
def main() -> None:
    """AgentRecall - short-term context recall for a supervisor agent.

    Stores delegation results, workflows and capabilities in memory and
    serves relevance-ranked context to the supervisor.
    """
    pass


@main.command()
@click.option("--port", default=8000, help="Port to run the broker on")
@click.option("--host", default="127.0.0.1", help="Host to bind to")
@click.option("--reload", is_flag=True, help="Enable auto-reload for development")
def serve(port: int, host: str, reload: bool) -> None:
    """Start the AgentRecall HTTP broker server."""
    import uvicorn

    click.echo(f"Starting AgentRecall broker on {host}:{port}")
    uvicorn.run(
        "agentrecall.broker:create_app",
        factory=True,
        host=host,
        port=port,
        reload=reload,
    )


@main.command()
@click.argument("query")
@broker_option
@click.option(
    "--correlation",
    is_flag=True,
    help="Also show which entries matched",
)
@click.option(
    "--raw",
    is_flag=True,
    help="Output raw JSON instead of formatted text",
)
def query(query: str, broker: str, correlation: bool, raw: bool) -> None:
    """Retrieve prior context for a query.

    \b
    Example:
        agentrecall query "git merge conflict"
        agentrecall query "workflow failed" --correlation
    """
    client = BrokerClient(broker)
    response = _call_broker(lambda: client.retrieve(query, include_correlation=correlation or raw))

    if raw:
        click.echo(json.dumps(response.model_dump(mode="json"), indent=2))
        return

    click.echo(response.context)

    if response.correlation and response.correlation.aggregate:
        aggregate = response.correlation.aggregate
        click.echo(f"\n{'─' * 60}")
        if aggregate.cache_hit:
            click.echo(f"Retrieval {aggregate.retrieval_id}: served from cache")
        else:
            click.echo(
                f"Retrieval {aggregate.retrieval_id}: {aggregate.count} matches, "
                f"mean score {aggregate.mean_relevance:.2f}"
            )
        for i, match in enumerate(response.correlation.matches, 1):
            click.echo(f"  {i}. {match.id} {match.category.value} {match.source} (score: {match.score:.2f})")


@main.command()
@broker_option
def stats(broker: str) -> None:
    """Show store and cache statistics."""
    client = BrokerClient(broker)
    engine_stats = _call_broker(client.stats)

    store = engine_stats.store
    cache = engine_stats.cache
    click.echo(f"Entries: {store.total}")
    for category, count in sorted(store.by_category.items()):
        click.echo(f"  - {category}: {count}")
    if store.by_agent:
        click.echo("By agent:")
        for agent_type, count in sorted(store.by_agent.items()):
            click.echo(f"  - {agent_type}: {count}")
    click.echo(f"Cache: {cache.size}/{cache.max_size} queries, {cache.hits} hits, {cache.misses} misses")


@main.command()
@broker_option
@click.option(
    "--max-age-days",
    default=7.0,
    type=click.FloatRange(min=0),
    show_default=True,
    help="Remove entries older than this many days",
)
def cleanup(broker: str, max_age_days: float) -> None:
    """Purge old context entries."""
    client = BrokerClient(broker)
    response = _call_broker(lambda: client.cleanup(int(max_age_days * MS_PER_DAY)))
    click.echo(f"Removed {response.removed} entries")


@main.command("record-delegation")
@broker_option
@click.option("--agent-type", "-a", required=True, help="Worker agent that ran the task")
@click.option("--task", "-t", required=True, help="Task description")
@click.option("--result", "-r", "result_text", required=True, help="Task output")
@click.option("--failed", is_flag=True, help="Mark the delegation as failed")
@click.option("--task-id", default=None, help="Delegation task id")
@click.option("--workflow-id", default=None, help="Owning workflow id")
@click.option("--duration-ms", type=click.IntRange(min=0), default=None, help="Task duration in milliseconds")
def record_delegation(
    broker: str,
    agent_type: str,
    task: str,
    result_text: str,
    failed: bool,
    task_id: str | None,
    workflow_id: str | None,
    duration_ms: int | None,
) -> None:
    """Record the outcome of a delegated task."""
    client = BrokerClient(broker)
    result = DelegationResult(
        agent_type=agent_type,
        task=task,
        result=result_text,
        task_id=task_id,
        workflow_id=workflow_id,
        success=not failed,
        duration_ms=duration_ms,
    )
    response = _call_broker(lambda: client.record_delegation(result))

    if response.accepted:
        click.echo(f"Recorded delegation context: {response.entry_id}")
    else:
        raise click.ClickException("Broker did not accept the delegation context")


@main.command("record-workflow")
@broker_option
@click.option("--workflow-id", "-w", required=True, help="Workflow id")
@click.option("--description", "-d", required=True, help="What the workflow does")
@click.option(
    "--status", "-s",
    type=click.Choice([status.value for status in WorkflowStatus]),
    default=WorkflowStatus.COMPLETED.value,
    show_default=True,
    help="Workflow status",
)
@click.option("--step", "steps", multiple=True, help="Workflow step (repeatable)")
@click.option("--agent", "agents", multiple=True, help="Participating agent (repeatable)")
def record_workflow(
    broker: str,
    workflow_id: str,
    description: str,
    status: str,
    steps: tuple[str, ...],
    agents: tuple[str, ...],
) -> None:
    """Record a multi-agent workflow summary."""
    client = BrokerClient(broker)
    workflow = WorkflowSummary(
        workflow_id=workflow_id,
        description=description,
        status=WorkflowStatus(status),
        steps=list(steps),
        agents=list(agents),
    )
    response = _call_broker(lambda: client.record_workflow(workflow))

    if response.accepted:
        click.echo(f"Recorded workflow context: {response.entry_id}")
    else:
        raise click.ClickException("Broker did not accept the workflow context")


@main.command()
def mcp() -> None:
    """Run the MCP server exposing supervisor_search to an LLM.

    \b
    Configure in .mcp.json:
        {
            "mcpServers": {
                "agentrecall": {
                    "command": "agentrecall",
                    "args": ["mcp"]
                }
            }
        }
    """
    from mcp_agentrecall.server import mcp as mcp_server
    mcp_server.run()


if __name__ == "__main__":
    main()
