"""Research prompt construction from a strategy configuration."""

from deepcurrent.strategy.models import StrategyConfig

_DEPTH_INSTRUCTIONS = {
    "deep": "Conduct thorough, deep research with multiple follow-up queries (up to 5).",
    "shallow": "Conduct quick, focused research with minimal follow-ups (1-2 max).",
    "standard": "Conduct focused research with targeted follow-up queries (2-3).",
}


def build_research_prompt(query: str, config: StrategyConfig, strategy_version: int) -> str:
    """Render the agent prompt for a query under a strategy.

    Args:
        query: User research question
        config: Strategy configuration in effect
        strategy_version: Version number shown in the prompt

    Returns:
        Prompt text
    """
    if config.time_window in ("month", "all"):
        window = "Consider both recent and historical sources."
    else:
        window = "Focus on recent and current information."

    if "narrative" in config.summary_templates:
        style = "Format as a narrative with clear sections and flowing prose."
    else:
        style = "Format as clear bullet points and structured sections."

    lines = [
        f'Research the following topic: "{query}"',
        "",
        f"**Research Strategy Configuration (v{strategy_version}):**",
        f"- Search Depth: {config.search_depth}",
        f"- {_DEPTH_INSTRUCTIONS[config.search_depth]}",
        f"- {window}",
        f"- {style}",
    ]
    if config.max_followups:
        lines.append(f"- Maximum follow-up queries: {config.max_followups}")
    lines += [
        "",
        "Provide a comprehensive summary with:",
        "1. Key findings",
        "2. Important insights",
        "3. Relevant sources (with URLs)",
        "",
        "Format your response in clear, readable markdown.",
    ]
    return "\n".join(lines)
