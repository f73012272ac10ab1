"""HTTP server for AgentChain.

A FastAPI application exposing workflow run control and custom provider
registration over the agent core.
"""
