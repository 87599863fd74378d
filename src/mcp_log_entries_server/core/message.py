"""Message formatting rules.

A rule applies when all of its ``when_exists`` fields are present and
renders the message column as a list of field and constant segments.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Any, Union

from .models import ConstantSegment, Fields, FieldSegment, Highlights, MessageSegment
from .typed_json import stable_stringify

MessageFormatter = Callable[[Fields, Highlights], list[MessageSegment]]

FALLBACK_MESSAGE = "failed to find message"


@dataclass(frozen=True, slots=True)
class FieldPart:
    field: str


@dataclass(frozen=True, slots=True)
class ConstantPart:
    constant: str


FormatPart = Union[FieldPart, ConstantPart]


@dataclass(frozen=True, slots=True)
class FormattingRule:
    when_exists: tuple[str, ...]
    parts: tuple[FormatPart, ...]


@dataclass(frozen=True, slots=True)
class CompiledFormattingRules:
    required_fields: tuple[str, ...]
    format: MessageFormatter


def get_builtin_rules(message_fields: Sequence[str]) -> list[FormattingRule]:
    """Builtin rules, most specific first."""
    rules = [
        FormattingRule(
            when_exists=("event.dataset", "log.original"),
            parts=(
                ConstantPart("["),
                FieldPart("event.dataset"),
                ConstantPart("] "),
                FieldPart("log.original"),
            ),
        )
    ]
    rules.extend(FormattingRule(when_exists=(f,), parts=(FieldPart(f),)) for f in message_fields)
    rules.append(FormattingRule(when_exists=("log.original",), parts=(FieldPart("log.original"),)))
    return rules


def _format_value(value: Any) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, (dict, list)):
        return stable_stringify(value)
    return str(value)


def _render(rule: FormattingRule, fields: Fields, highlights: Highlights) -> list[MessageSegment]:
    out: list[MessageSegment] = []
    for part in rule.parts:
        if isinstance(part, FieldPart):
            out.append(
                FieldSegment(
                    field=part.field,
                    value=_format_value(fields.get(part.field)),
                    highlights=list(highlights.get(part.field, [])),
                )
            )
        else:
            out.append(ConstantSegment(constant=part.constant))
    return out


def compile_formatting_rules(rules: Sequence[FormattingRule]) -> CompiledFormattingRules:
    """Compile rules into the set of fields they read and a formatter."""
    required: dict[str, None] = {}
    for rule in rules:
        for name in rule.when_exists:
            required.setdefault(name)
        for part in rule.parts:
            if isinstance(part, FieldPart):
                required.setdefault(part.field)

    frozen_rules = tuple(rules)

    def format_message(fields: Fields, highlights: Highlights) -> list[MessageSegment]:
        for rule in frozen_rules:
            if all(fields.get(name) is not None for name in rule.when_exists):
                return _render(rule, fields, highlights)
        return [ConstantSegment(constant=FALLBACK_MESSAGE)]

    return CompiledFormattingRules(required_fields=tuple(required), format=format_message)
