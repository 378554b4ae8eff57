"""Helper modules for Zen Planner.

- entity_helpers: Signal naming and device info
- entry_helpers: Locating the loaded coordinator
- rate_limit: Fixed-window request limiter for the HTTP endpoints
- advisor_helpers: Request normalization, context summaries, prompts, parsing
- completion_client: Client for the external chat-completion service
"""
