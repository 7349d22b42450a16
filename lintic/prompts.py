"""Prompt text sent to the language model.

Prompts are composed from plain strings only, so the same inputs always
produce byte-identical prompts.
"""
from __future__ import annotations

from lintic.models import Offense

# Characters of original and fixed code included in a summary prompt
SUMMARY_CHAR_BUDGET = 2000

TRUNCATION_MARKER = '# ... (truncated)'

FIX_INSTRUCTIONS = """\
You are an expert Ruby developer and code reviewer. Please fix the following Ruby code to resolve all RuboCop linting errors.

This code is from a Pull Request. Focus ONLY on fixing linting errors in the changed lines shown in the diff below.

IMPORTANT INSTRUCTIONS:
1. Return ONLY the corrected Ruby code (the complete fixed file content)
2. Maintain the original functionality and logic
3. Fix ONLY the linting errors in the changed lines (shown in the diff)
4. Do not modify code that wasn't changed in the PR unless it's necessary to fix linting errors
5. Do not add any explanations or comments about the changes
6. Preserve the original code structure as much as possible
7. Focus on the lines marked with + in the diff - these are the new/changed lines"""

SUMMARY_INSTRUCTIONS = """\
You are an expert Ruby developer reviewing an automated fix for RuboCop linting errors.
Compare the original code with the fixed code and explain what was changed and why.

IMPORTANT INSTRUCTIONS:
1. Write a short summary as a Markdown bullet list (at most 5 bullets)
2. Mention the RuboCop rules that were addressed
3. Do NOT include any code or code blocks
4. Do NOT repeat the full file"""


def format_offenses(offenses: list[Offense]) -> str:
    """Render offenses as one bullet line each, in linter order."""
    return '\n'.join(
        f'- Line {offense.line_label}: {offense.message} ({offense.rule_id})'
        for offense in offenses
    )


def truncate(text: str, limit: int = SUMMARY_CHAR_BUDGET) -> str:
    """Cut text to at most limit characters, marking the cut."""
    if len(text) <= limit:
        return text
    return f'{text[:limit].rstrip()}\n{TRUNCATION_MARKER}'


def build_fix_prompt(
    file_content: str,
    offenses: list[Offense],
    file_diff: str | None = None,
) -> str:
    """Build the prompt asking for the corrected file."""
    diff_context = ''
    if file_diff:
        diff_context = f'\n\nPR DIFF (focus on these changes):\n```diff\n{file_diff}\n```'

    return (
        f'{FIX_INSTRUCTIONS}\n\n'
        f'ORIGINAL CODE:\n```ruby\n{file_content}\n```{diff_context}\n\n'
        f'LINTING ERRORS TO FIX:\n{format_offenses(offenses)}\n\n'
        'CORRECTED CODE:\n'
    )


def build_summary_prompt(
    original_content: str,
    fixed_content: str,
    offenses: list[Offense],
) -> str:
    """Build the prompt asking for a prose explanation of a fix."""
    return (
        f'{SUMMARY_INSTRUCTIONS}\n\n'
        f'ORIGINAL CODE:\n```ruby\n{truncate(original_content)}\n```\n\n'
        f'FIXED CODE:\n```ruby\n{truncate(fixed_content)}\n```\n\n'
        f'LINTING ERRORS THAT WERE FIXED:\n{format_offenses(offenses)}\n\n'
        'SUMMARY:\n'
    )
