#!/usr/bin/env python3
"""
🐧 PNGN Tellraw Renderer - Structured Message Module
====================================================
Copyright (c) 2025 PNGN-Tec LLC

Flattens structured chat messages into plain marked-up text ready for
the compositor. A structured message is a JSON object of the form

    {"rawtext": [{"text": "Hi "}, {"selector": "@p"},
                 {"score": {"name": "@s", "objective": "kills"}}]}

Selector and score components are substituted from caller-supplied
tables; unknown ones become empty text.
"""

import copy
import json
import logging
from typing import Any, Dict, Optional

# Configure logging
logger = logging.getLogger('tellraw_rawtext')

Selectors = Dict[str, str]
Scores = Dict[str, Dict[str, int]]


class RawtextError(ValueError):
    """Structured message source is not valid JSON."""


def translate_tellraw(message: Any,
                      selectors: Optional[Selectors] = None,
                      scores: Optional[Scores] = None) -> Any:
    """
    Substitute selector and score components of a structured message.

    Args:
        message: Decoded JSON value
        selectors: Selector string to display text
        scores: Objective name to {holder name: score}

    Returns:
        Copy of the message with every score or selector component
        replaced by {"text": ...}
    """
    selectors = selectors or {}
    scores = scores or {}
    result = copy.deepcopy(message)

    if not isinstance(result, dict) or not isinstance(result.get('rawtext'), list):
        return result

    components = result['rawtext']
    for i, component in enumerate(components):
        if not isinstance(component, dict):
            continue

        if 'score' in component:
            score = component['score']
            if not isinstance(score, dict):
                continue
            name, objective = score.get('name'), score.get('objective')
            if not isinstance(name, str) or not isinstance(objective, str):
                continue
            value = scores.get(objective, {}).get(name)
            components[i] = {'text': '' if value is None else str(value)}

        elif 'selector' in component:
            selector = component['selector']
            if isinstance(selector, str):
                components[i] = {'text': selectors.get(selector, '')}

    return result


def rawtext_to_text(message: Any) -> str:
    """
    Flatten a translated message to text.

    A string passes through, a rawtext array concatenates its string
    "text" fields, and any other value is dumped back to compact JSON.
    """
    if isinstance(message, str):
        return message

    if isinstance(message, dict) and isinstance(message.get('rawtext'), list):
        return ''.join(
            component['text'] for component in message['rawtext']
            if isinstance(component, dict) and isinstance(component.get('text'), str)
        )

    return json.dumps(message, ensure_ascii=False, separators=(',', ':'))


def parse_tellraw(source: str,
                  selectors: Optional[Selectors] = None,
                  scores: Optional[Scores] = None) -> str:
    """
    Parse, translate and flatten a structured message.

    Raises:
        RawtextError: If the source is not valid JSON
    """
    try:
        message = json.loads(source)
    except json.JSONDecodeError as e:
        raise RawtextError(f"Invalid JSON: {e}") from e

    text = rawtext_to_text(translate_tellraw(message, selectors, scores))
    logger.debug(f"Flattened structured message to {len(text)} characters")
    return text
