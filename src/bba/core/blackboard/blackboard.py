"""Core Blackboard — the token-bounded knowledge store of an exploration run.

The blackboard is the only channel that survives across agent iterations:
the model sees a regenerated dump of it in every system prompt, while the
conversation itself is pruned to the last exchange.  Capacity is enforced
on every write:

* ``max_tokens`` is the soft budget shown to the model.
* ``floor(max_tokens * overflow_factor)`` is the hard cap.  A write that
  would push the total past it is rejected without touching any state.
"""

from __future__ import annotations

import json
import math
import secrets
import string
import time
from typing import Any

from bba.core.blackboard.models import BlackboardData, Section, UpdateResult, utc_now
from bba.core.context.counter import estimate_tokens
from bba.errors import BlackboardSeedError

DEFAULT_MAX_TOKENS = 4000
DEFAULT_OVERFLOW_FACTOR = 1.2

_ID_ALPHABET = string.ascii_lowercase + string.digits


def _generate_id() -> str:
    suffix = "".join(secrets.choice(_ID_ALPHABET) for _ in range(7))
    return f"bb_{int(time.time() * 1000)}_{suffix}"


def format_section_name(name: str) -> str:
    return " ".join(word[:1].upper() + word[1:] for word in name.split("_"))


class Blackboard:
    """Named-section knowledge store with soft and hard token limits.

    Sections are an open mapping: any string the agent invents is a valid
    section name.  Insertion order is preserved for rendering.
    """

    def __init__(
        self,
        target_path: str,
        max_tokens: int = DEFAULT_MAX_TOKENS,
        id: str | None = None,  # noqa: A002
        *,
        overflow_factor: float = DEFAULT_OVERFLOW_FACTOR,
    ) -> None:
        self.id = id or _generate_id()
        self.target_path = target_path
        self.max_tokens = max_tokens
        self.overflow_factor = overflow_factor
        self.created_at = utc_now()
        self.updated_at = self.created_at
        self._sections: dict[str, Section] = {}

    # ------------------------------------------------------------------
    # Construction helpers
    # ------------------------------------------------------------------

    @classmethod
    def seed(
        cls,
        target_path: str,
        sections: dict[str, str],
        max_tokens: int | None = None,
        *,
        overflow_factor: float = DEFAULT_OVERFLOW_FACTOR,
    ) -> Blackboard:
        """Build a blackboard pre-populated from a ``name -> content`` map.

        Every entry is written in replace mode.  If any write is rejected the
        whole construction fails with :class:`BlackboardSeedError` listing
        every failing section.
        """
        board = cls(
            target_path,
            max_tokens if max_tokens is not None else DEFAULT_MAX_TOKENS,
            overflow_factor=overflow_factor,
        )
        failures: list[str] = []
        for name, content in sections.items():
            result = board.update_section(name, content, replace=True)
            if not result.success:
                failures.append(f"{name}: {result.message}")
        if failures:
            raise BlackboardSeedError(failures)
        return board

    # ------------------------------------------------------------------
    # Core mutation
    # ------------------------------------------------------------------

    @property
    def hard_cap(self) -> int:
        """Absolute token ceiling including the overflow allowance."""
        return math.floor(self.max_tokens * self.overflow_factor)

    def update_section(self, name: str, content: str, replace: bool = False) -> UpdateResult:
        """Append *content* to section *name*, or overwrite it when *replace*.

        Sections are created on first write.  The write is admitted only if
        the resulting grand total stays within :attr:`hard_cap`.
        """
        current = self._sections.get(name)

        if replace or current is None or not current.content:
            new_content = content
        else:
            new_content = f"{current.content}\n\n{content}"

        new_tokens = estimate_tokens(new_content)
        current_tokens = current.tokens if current is not None else 0
        new_total = self.get_total_tokens() - current_tokens + new_tokens

        if new_total > self.hard_cap:
            return UpdateResult(
                success=False,
                message=(
                    f"Update would exceed hard token limit ({new_total} > {self.hard_cap}). "
                    "Consider replacing content or removing other sections."
                ),
            )

        now = utc_now()
        self._sections[name] = Section(
            name=name,
            content=new_content,
            tokens=new_tokens,
            updated_at=now,
        )
        self.updated_at = now

        return UpdateResult(
            success=True,
            message=f"Section '{name}' updated ({new_tokens} tokens)",
        )

    def remove_section(self, name: str) -> bool:
        """Delete a section entirely; return ``True`` if it existed."""
        if name not in self._sections:
            return False
        del self._sections[name]
        self.updated_at = utc_now()
        return True

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_section(self, name: str) -> str:
        """Return the content of *name*, or ``""`` if absent."""
        section = self._sections.get(name)
        return section.content if section is not None else ""

    def get_sections(self) -> list[Section]:
        """Return all sections with non-empty content, in insertion order."""
        return [s for s in self._sections.values() if s.content]

    def get_section_names(self) -> list[str]:
        return [s.name for s in self.get_sections()]

    def get_total_tokens(self) -> int:
        return sum(s.tokens for s in self._sections.values())

    def get_remaining_tokens(self) -> int:
        """Remaining capacity against the soft limit, clamped at zero.

        Writes into the overflow allowance are still admitted when this
        reports zero.
        """
        return max(0, self.max_tokens - self.get_total_tokens())

    @property
    def utilization(self) -> float:
        """Fraction of the soft budget in use (may exceed 1.0)."""
        if self.max_tokens <= 0:
            return 0.0
        return self.get_total_tokens() / self.max_tokens

    def get_all_sections_for_context(self) -> str:
        """Render every non-empty section for injection into a prompt."""
        parts = ["=== BLACKBOARD ===\n"]
        for section in self.get_sections():
            parts.append(f"## {section.name.upper()}")
            parts.append(section.content)
            parts.append("")
        parts.append("=== END BLACKBOARD ===")
        return "\n".join(parts)

    # ------------------------------------------------------------------
    # Serialisation
    # ------------------------------------------------------------------

    def to_markdown(self) -> str:
        """Export the board as a human-readable Markdown document."""
        total = self.get_total_tokens()
        pct = round(total / self.max_tokens * 100) if self.max_tokens else 0
        lines = [
            "# Analysis Blackboard\n",
            f"**Target:** {self.target_path}",
            f"**Tokens:** {total} / {self.max_tokens} ({pct}%)",
            f"**Last Updated:** {self.updated_at.isoformat()}\n",
            "---\n",
        ]
        for section in self.get_sections():
            stamp = section.updated_at.strftime("%Y-%m-%d %H:%M:%S %Z")
            lines.append(f"## {format_section_name(section.name)}\n")
            lines.append(section.content)
            lines.append(f"\n*{section.tokens} tokens, updated {stamp}*\n")
            lines.append("---\n")
        return "\n".join(lines)

    def to_data(self) -> BlackboardData:
        return BlackboardData(
            id=self.id,
            target_path=self.target_path,
            sections=dict(self._sections),
            total_tokens=self.get_total_tokens(),
            max_tokens=self.max_tokens,
            created_at=self.created_at,
            updated_at=self.updated_at,
        )

    def to_json(self) -> dict[str, Any]:
        """Return the JSON-compatible wire shape (camelCase keys)."""
        result: dict[str, Any] = self.to_data().model_dump(mode="json", by_alias=True)
        return result

    def snapshot(self) -> bytes:
        """Serialise the board to indented JSON bytes."""
        return json.dumps(self.to_json(), indent=2).encode()

    @classmethod
    def from_json(
        cls,
        data: BlackboardData | dict[str, Any] | str | bytes,
        *,
        overflow_factor: float = DEFAULT_OVERFLOW_FACTOR,
    ) -> Blackboard:
        """Rebuild a board from :meth:`to_json` output.

        Sections whose stored content is empty are skipped.  Token counts and
        timestamps are restored as stored.
        """
        if isinstance(data, BlackboardData):
            parsed = data
        elif isinstance(data, str | bytes):
            parsed = BlackboardData.model_validate_json(data)
        else:
            parsed = BlackboardData.model_validate(data)

        board = cls(
            parsed.target_path,
            parsed.max_tokens,
            parsed.id,
            overflow_factor=overflow_factor,
        )
        board.created_at = parsed.created_at
        board.updated_at = parsed.updated_at
        for key, section in parsed.sections.items():
            if section.content:
                board._sections[key] = section
        return board

    def __repr__(self) -> str:
        return (
            f"Blackboard(id={self.id!r}, target_path={self.target_path!r}, "
            f"tokens={self.get_total_tokens()}/{self.max_tokens})"
        )
