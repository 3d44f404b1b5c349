"""
L5 Orchestration — the build orchestrator and its process supervisor.
"""
