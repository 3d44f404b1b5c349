"""
L3 Detection — read-only probes of the host.

- ``host``        — operating system and CPU count
- ``system_deps`` — required executables on PATH
- ``tool_version``— installed versions of catalog tools
"""
