"""Base prompt class."""

from typing import Any


class Prompt:
    """Base class for all prompts."""

    def __init__(self, template: str, system_prompt: str):
        """Initialize the prompt.

        Args:
            template: The prompt template string
            system_prompt: The system prompt
        """
        self.template = template
        self.system_prompt = system_prompt

    def format(self, **kwargs: Any) -> str:
        """Format the prompt template with variables.

        The system prompt is prepended because the providers take a single
        text part alongside the image.

        Args:
            **kwargs: Variables to format the template with

        Returns:
            str: The formatted prompt
        """
        body = self.template.format(**kwargs)
        return f"{self.system_prompt}\n\n{body}".strip()
