"""Arguments handed to commands and modules.

The CLI passes everything after the action through untouched; this splits
those tokens into positionals and ``--options`` once, so each command reads
what it needs without its own parser.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field


@dataclass(slots=True)
class Arguments:
    action: str = ""
    positionals: list[str] = field(default_factory=list)
    options: dict[str, str | bool] = field(default_factory=dict)

    @classmethod
    def parse(cls, tokens: Sequence[str], *, action: str = "") -> Arguments:
        """Split ``--key=value``, ``--flag``, ``-abc`` and positional tokens.

        Everything after a bare ``--`` is positional.
        """
        args = cls(action=action)
        rest_positional = False
        for token in tokens:
            if rest_positional:
                args.positionals.append(token)
            elif token == "--":
                rest_positional = True
            elif token.startswith("--"):
                name, eq, value = token[2:].partition("=")
                args.options[name] = value if eq else True
            elif token.startswith("-") and len(token) > 1:
                for char in token[1:]:
                    args.options[char] = True
            else:
                args.positionals.append(token)
        return args

    @property
    def target(self) -> str | None:
        """First positional: the module, command or file an action is about."""
        return self.positionals[0] if self.positionals else None

    def flag(self, name: str) -> bool:
        return bool(self.options.get(name))

    def get(self, name: str, default: str | None = None) -> str | None:
        value = self.options.get(name)
        if isinstance(value, str):
            return value
        return default
