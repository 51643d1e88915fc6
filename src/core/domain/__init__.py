"""Domain models and errors.

Plain, strict data structures (Pydantic v2) and the failure taxonomy. The
domain knows nothing about adb, iOS tunnels, HTTP or the CLI.
"""
