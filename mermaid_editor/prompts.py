"""Prompts sent to the completion service."""

SYSTEM_PROMPT = (
    "You are a helpful assistant that generates Mermaid diagram code based on "
    "user descriptions. Only respond with valid Mermaid syntax without any "
    "explanations or markdown formatting."
)

USER_PROMPT_TEMPLATE = "Generate a Mermaid diagram for: {prompt}"


def build_user_prompt(prompt: str) -> str:
    return USER_PROMPT_TEMPLATE.format(prompt=prompt)
