"""AgentRecall: short-term context recall for a supervisor agent.

A bounded in-memory store of delegation results, workflow summaries and
worker capabilities, searched lexically and served to the supervisor as
prompt-ready text.
"""

__version__ = "0.1.0"
