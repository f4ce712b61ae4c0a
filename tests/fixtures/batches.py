"""Builders for generated-batch payloads."""

from __future__ import annotations

import json
from typing import Any, Dict, List

_GENERAL_TEMPLATES: List[Dict[str, Any]] = [
    {
        "text": "What color do you get when you mix red and yellow?",
        "type": "multiple_choice",
        "options": ["Purple", "Orange", "Green", "Blue"],
        "correct_answer": "Orange",
        "fun_fact": "Orange is made by mixing two primary colors!",
    },
    {
        "text": "The sun is a star.",
        "type": "true_false",
        "options": ["True", "False"],
        "correct_answer": "True",
        "fun_fact": "The sun is the closest star to Earth!",
    },
    {
        "text": "A group of lions is called a ____.",
        "type": "fill_blank",
        "options": None,
        "correct_answer": "pride",
        "fun_fact": "Lions live together in family groups called prides!",
    },
    {
        "text": "Do penguins live at the North Pole?",
        "type": "yes_no",
        "options": ["Yes", "No"],
        "correct_answer": "No",
        "fun_fact": "Penguins live in Antarctica near the South Pole!",
    },
]


def general_items(count: int = 10) -> List[Dict[str, Any]]:
    items = []
    for idx in range(count):
        item = dict(_GENERAL_TEMPLATES[idx % len(_GENERAL_TEMPLATES)])
        item["text"] = f"{item['text']} (#{idx + 1})"
        items.append(item)
    return items


def voice_items(count: int = 5) -> List[Dict[str, Any]]:
    words = [("Water", "నీరు"), ("Mother", "అమ్మ"), ("Dog", "కుక్క")]
    items = []
    for idx in range(count):
        english, telugu = words[idx % len(words)]
        items.append(
            {
                "text": f"What is the Telugu word for '{english}'? (#{idx + 1})",
                "type": "voice_input",
                "options": None,
                "correct_answer": telugu,
                "fun_fact": "Telugu is spoken by millions of people!",
            }
        )
    return items


def as_reply(items: List[Dict[str, Any]]) -> str:
    return json.dumps(items, ensure_ascii=False)
