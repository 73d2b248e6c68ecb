"""
Prompt template for complexity extraction.

Both backends receive the same instruction so their replies share the
two-line format checked by the validity predicate.
"""


def build_analysis_prompt(code: str) -> str:
    """
    Build the analysis prompt for the LLM.

    Args:
        code: Source code to analyze, embedded verbatim

    Returns:
        Formatted prompt string
    """
    return f"""Just tell only this:
Time Complexity:
Space Complexity:

Code:
```
{code}
```"""
