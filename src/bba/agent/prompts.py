"""System prompt generation.

The system prompt is rebuilt on every iteration from the current blackboard,
the profile, the tool schemas and the tool-history digest.  It is the
agent's only long-term memory.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from bba.tools.definitions import UPDATE_BLACKBOARD, tool_name, tool_parameters

if TYPE_CHECKING:
    from bba.agent.profiles import AnalysisProfile
    from bba.core.blackboard.blackboard import Blackboard

DEFAULT_COMPLETION_CRITERIA = [
    "You have a comprehensive understanding of the target",
    "The blackboard captures key insights",
    "Further exploration would provide diminishing returns",
]


def build_stall_warning(iterations_since_write: int, threshold: int) -> str:
    """Return the stall warning block, or ``""`` below *threshold*.

    Escalates from WARNING to CRITICAL two iterations past the threshold.
    """
    if iterations_since_write < threshold:
        return ""

    severity = "🚨 CRITICAL" if iterations_since_write >= threshold + 2 else "⚠️ WARNING"
    return (
        f"\n{severity}: You have NOT written to the blackboard in {iterations_since_write} iterations.\n"
        "Your findings from previous iterations are LOST because only the blackboard persists.\n"
        "You MUST call update_blackboard NOW before doing any more exploration.\n"
        "Summarize what you've learned so far and save it."
    )


def format_tool_descriptions(tools: list[dict[str, Any]]) -> str:
    lines = []
    for i, schema in enumerate(tools, start=1):
        params = ", ".join(tool_parameters(schema))
        description = schema["function"].get("description", "")
        lines.append(f"{i}. **{tool_name(schema)}({params})**: {description}")
    return "\n\n".join(lines)


def _exploration_tool_names(tools: list[dict[str, Any]]) -> str:
    return ", ".join(tool_name(t) for t in tools if tool_name(t) != UPDATE_BLACKBOARD)


def _blackboard_system_section(blackboard: Blackboard, has_content: bool) -> str:
    if has_content:
        status = "**Continuing analysis.** Review existing blackboard content below."
    else:
        status = "**Fresh analysis.** The blackboard is empty, start filling it."
    return (
        "## THE BLACKBOARD SYSTEM\n\n"
        'You have access to a "blackboard" - a structured knowledge store where you save '
        "important findings.\n"
        f"- **Token budget**: {blackboard.max_tokens} tokens\n"
        f"- **Current usage**: {blackboard.get_total_tokens()} tokens\n"
        f"- **Remaining**: {blackboard.get_remaining_tokens()} tokens\n\n"
        f"{status}"
    )


def _progress(blackboard: Blackboard) -> str:
    total = blackboard.get_total_tokens()
    pct = round(total / blackboard.max_tokens * 100) if blackboard.max_tokens else 0
    return f"{total} / {blackboard.max_tokens} tokens ({pct}%)"


def generate_system_prompt(
    blackboard: Blackboard,
    profile: AnalysisProfile,
    tools: list[dict[str, Any]],
    tool_history_summary: str = "",
    iterations_since_write: int = 0,
) -> str:
    """Render the full system prompt for the next model call.

    Pure function: the same inputs always produce the same text.
    """
    has_content = blackboard.get_total_tokens() > 0
    threshold = profile.stall_warning_threshold
    stall_warning = build_stall_warning(iterations_since_write, threshold)

    sections_list = "\n".join(f"- **{s.name}**: {s.description}" for s in profile.suggested_sections)
    hints = "\n".join(f"{i}. {hint}" for i, hint in enumerate(profile.exploration_hints, start=1))
    criteria = profile.completion_criteria or DEFAULT_COMPLETION_CRITERIA
    completion_criteria = "\n".join(f"- {c}" for c in criteria)
    existing = (
        "\n## EXISTING BLACKBOARD CONTENT\n\n" + blackboard.get_all_sections_for_context()
        if has_content
        else ""
    )

    return f"""You are an expert analysis agent. Your goal is to systematically explore a target and record your findings.

## YOUR MISSION

{profile.mission}

Target: {blackboard.target_path}

## CRITICAL RULE: PRESERVE YOUR DISCOVERIES

Your working memory is extremely limited: only your LAST action is visible to you. Everything older is discarded. The ONLY way to preserve knowledge across iterations is the blackboard.

**Exploration Strategy:**
- You can explore multiple files in one iteration to gather context
- Once you've made meaningful discoveries, call update_blackboard to save insights
- Never go more than {threshold} iterations without saving findings
- Save strategic insights and patterns, not just raw facts

Pattern for efficient exploration:
1. Explore strategically using tools ({_exploration_tool_names(tools)})
2. When you discover something important, call update_blackboard
3. Continue exploring and saving iteratively
{stall_warning}

{_blackboard_system_section(blackboard, has_content)}

### Suggested Sections

These are suggestions. After initial exploration, add, remove, or rename sections as you see fit:
{sections_list}

### Blackboard Strategy

- Be concise and strategic - space is limited
- Focus on insights, not just facts
- Update sections as you learn more (use replace=true for better summaries)
- Create new sections when you discover areas worth tracking
- Prioritize what's most important for your analysis

## YOUR TOOLS

{format_tool_descriptions(tools)}

## EXPLORATION STRATEGY

{hints}

## IMPORTANT GUIDELINES

- **Be strategic**: Don't read every file - focus on high-value targets
- **Save discoveries regularly**: Don't let more than {threshold} iterations pass without saving to the blackboard
- **Avoid repetition**: Check your blackboard and recent history before exploring
- **Be concise**: Blackboard space is limited - prioritize insights over raw data
- **Memory model**:
  - Short-term: You can see your last action and blackboard content
  - Long-term: Only the blackboard persists - everything else is lost
- **Quality over quantity**: Save strategic insights, architectural patterns, and key discoveries
- **Signal completion**: When you've met the completion criteria, summarize what you learned

## STOPPING CONDITIONS

Stop your analysis when you've achieved these goals:
{completion_criteria}

Current progress: {_progress(blackboard)}

When you're done, provide a brief summary of your findings and explain what you learned.
{tool_history_summary}
{existing}

## BEGIN

Start exploring. Remember: be strategic, save findings to the blackboard, and build a comprehensive understanding."""
