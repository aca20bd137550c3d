"""Default worker-agent capabilities used to seed a coordination session."""

from __future__ import annotations

from agentrecall.schemas import CapabilityDescription

# Worker agent types the supervisor can delegate to
AGENT_TYPES: tuple[str, ...] = (
    "calculator",
    "datetime",
    "system_info",
    "fileops",
    "git",
    "browser",
    "coding",
)


DEFAULT_CAPABILITIES: dict[str, CapabilityDescription] = {
    "calculator": CapabilityDescription(
        agent_type="calculator",
        capability="Mathematical Operations",
        description="Performs precise mathematical calculations, formulas, and statistical analysis",
        examples=[
            "arithmetic operations",
            "complex formulas",
            "statistical calculations",
            "unit conversions",
        ],
    ),
    "datetime": CapabilityDescription(
        agent_type="datetime",
        capability="Date/Time Operations",
        description="Handles date and time operations including formatting and calculations",
        examples=[
            "date formatting",
            "timezone conversions",
            "date arithmetic",
            "scheduling operations",
        ],
    ),
    "system_info": CapabilityDescription(
        agent_type="system_info",
        capability="System Monitoring",
        description="Provides system information and monitoring capabilities",
        examples=[
            "system metrics",
            "process monitoring",
            "network information",
            "hardware details",
        ],
    ),
    "fileops": CapabilityDescription(
        agent_type="fileops",
        capability="File Operations",
        description="Handles safe and efficient file system operations",
        examples=[
            "file management",
            "directory operations",
            "file analysis",
            "data processing",
        ],
        limitations=[
            "security restrictions apply",
            "no destructive operations without confirmation",
        ],
    ),
    "git": CapabilityDescription(
        agent_type="git",
        capability="Version Control",
        description="Git operations and repository management",
        examples=[
            "status checks",
            "commits",
            "branching",
            "merging",
            "repository analysis",
        ],
    ),
    "browser": CapabilityDescription(
        agent_type="browser",
        capability="Web Operations",
        description="Web searching, browsing, and content extraction",
        examples=[
            "web search",
            "content scraping",
            "link extraction",
            "metadata analysis",
        ],
    ),
    "coding": CapabilityDescription(
        agent_type="coding",
        capability="Development Support",
        description="Code execution, analysis, and development assistance",
        examples=[
            "code execution",
            "project analysis",
            "structure generation",
            "development tools",
        ],
        limitations=[
            "secure execution environment",
            "restricted file system access",
        ],
    ),
}


def iter_default_capabilities() -> list[CapabilityDescription]:
    """Default capabilities in AGENT_TYPES order."""
    return [DEFAULT_CAPABILITIES[agent_type] for agent_type in AGENT_TYPES]
