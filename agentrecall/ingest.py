"""Builders translating orchestration events into context entries."""

from __future__ import annotations

import re

from agentrecall.schemas import (
    CapabilityDescription,
    ContextCategory,
    ContextEntry,
    ContextMetadata,
    DelegationResult,
    WorkflowStatus,
    WorkflowSummary,
)

# Default relevance priors per category
DELEGATION_SUCCESS_RELEVANCE = 5
DELEGATION_FAILURE_RELEVANCE = 2
WORKFLOW_RELEVANCE: dict[WorkflowStatus, float] = {
    WorkflowStatus.COMPLETED: 5,
    WorkflowStatus.STARTED: 3,
    WorkflowStatus.FAILED: 1,
}
CAPABILITY_RELEVANCE = 4

# Delegation output kept in the store
MAX_DELEGATION_RESULT_CHARS = 500


def _slugify(text: str) -> str:
    """Lower-case text with whitespace runs collapsed to hyphens."""
    return re.sub(r"\s+", "-", text.strip().lower())


def build_delegation_entry(result: DelegationResult, timestamp: int) -> ContextEntry:
    """Build a context entry for a completed (or failed) delegation.

    Args:
        result: Delegation outcome reported by the coordination layer
        timestamp: Creation time in epoch ms

    Returns:
        ContextEntry in the delegation category
    """
    tags = [result.agent_type, "success" if result.success else "failure"]
    if result.duration_ms:
        tags.append(f"duration-{round(result.duration_ms / 1000)}s")

    return ContextEntry(
        content=f"Task: {result.task}\nResult: {result.result[:MAX_DELEGATION_RESULT_CHARS]}",
        source=f"delegation-{result.agent_type}",
        category=ContextCategory.DELEGATION,
        metadata=ContextMetadata(
            timestamp=timestamp,
            agent_type=result.agent_type,
            task_id=result.task_id,
            workflow_id=result.workflow_id,
            relevance_score=(
                DELEGATION_SUCCESS_RELEVANCE if result.success else DELEGATION_FAILURE_RELEVANCE
            ),
            tags=tuple(tags),
        ),
    )


def build_workflow_entry(workflow: WorkflowSummary, timestamp: int) -> ContextEntry:
    """Build a context entry summarizing a multi-agent workflow."""
    content = (
        f"Workflow: {workflow.description}\n"
        f"Steps: {', '.join(workflow.steps)}\n"
        f"Agents involved: {', '.join(workflow.agents)}"
    )
    tags = [workflow.status.value, "multi-agent", *workflow.agents, f"steps-{len(workflow.steps)}"]

    return ContextEntry(
        content=content,
        source=f"workflow-{workflow.workflow_id}",
        category=ContextCategory.WORKFLOW,
        metadata=ContextMetadata(
            timestamp=timestamp,
            workflow_id=workflow.workflow_id,
            relevance_score=WORKFLOW_RELEVANCE[workflow.status],
            tags=tuple(tags),
        ),
    )


def build_capability_entry(capability: CapabilityDescription, timestamp: int) -> ContextEntry:
    """Build a context entry describing a worker agent capability."""
    lines = [
        f"Agent: {capability.agent_type}",
        f"Capability: {capability.capability}",
        f"Description: {capability.description}",
        f"Examples: {', '.join(capability.examples)}",
    ]
    if capability.limitations:
        lines.append(f"Limitations: {', '.join(capability.limitations)}")

    tags = [
        capability.agent_type,
        "capability",
        _slugify(capability.capability),
        "has-limitations" if capability.limitations else "no-limitations",
    ]

    return ContextEntry(
        content="\n".join(lines),
        source=f"capability-{capability.agent_type}",
        category=ContextCategory.AGENT_CAPABILITY,
        metadata=ContextMetadata(
            timestamp=timestamp,
            agent_type=capability.agent_type,
            relevance_score=CAPABILITY_RELEVANCE,
            tags=tuple(tags),
        ),
    )
