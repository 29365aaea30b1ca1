"""Prompt Construction Package"""

from aic2.prompts.builder import PromptBuilder, PromptOptions, DEFAULT_PROMPT_OPTIONS, build_prompt

__all__ = [
    "PromptBuilder",
    "PromptOptions",
    "DEFAULT_PROMPT_OPTIONS",
    "build_prompt",
]
