"""AgentChain: sequential multi-agent LLM workflows.

Compose a linear chain of agents, each bound to a provider and model, and run
them so every agent's output feeds the next agent's input.
"""

__version__ = "0.1.0"
