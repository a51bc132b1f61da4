"""
Terminal client for the Tasks API.

State lives in an immutable ``ClientState`` changed only through
``tasks_client.state.reduce``; ``TodoApp`` issues the HTTP calls and
dispatches the resulting actions.
"""
