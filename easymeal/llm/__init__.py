"""
LLM integration layer.

Responsibilities:
- Manage Groq API configuration and credentials.
- Build recipe generation prompts from user preferences.
- Call Groq LLM to generate recipes and normalize ingredient names.
- Parse and validate the structured JSON the model returns.
"""
