"""
Recipe preference layer.

Responsibilities:
- Define the RecipePreferences record and its closed vocabularies.
- Compile a preference record into the prompt fragment sent to the LLM.
"""
