"""Prompt templates for documentation summaries."""


SYSTEM_PROMPT = (
    "You summarize technical documentation for a retrieval index. "
    "Be factual, use the document's own terminology, never invent content."
)


class PromptTemplates:
    """Summary prompts with a fixed, parseable output format."""

    @staticmethod
    def file_summary(text: str, terse_chars: int = 250) -> str:
        """Prompt for the terse + detailed summary of a whole file.

        Args:
            text: File contents (possibly truncated)
            terse_chars: Upper bound for the terse summary

        Returns:
            Formatted prompt
        """
        return f"""Summarize the documentation file below.

Return exactly two blocks and nothing else:

TERSE: <one line, {terse_chars - 100}-{terse_chars} characters, keyword-dense: the APIs, concepts, commands and names a reader would search for>
DETAILED: <one paragraph of 3-6 sentences describing what the file covers and when to read it>

File contents:
<<<
{text}
>>>"""

    @staticmethod
    def section_summary(text: str) -> str:
        """Prompt for a single-sentence section summary.

        Args:
            text: Section contents including its heading

        Returns:
            Formatted prompt
        """
        return f"""Summarize this documentation section in one sentence of at most 200 characters.
Name the specific topics it covers. Reply with the sentence only.

Section:
<<<
{text}
>>>"""
