"""Static question sets used when generation fails.

Topics whose name hits a known category get a curated set; anything else gets
gentle reflective questions built around the topic's own name. The output is
a pure function of the topic name and policy, so a failed regeneration always
produces the same batch.
"""

from __future__ import annotations

import re
from itertools import cycle, islice
from typing import Optional, Sequence

from ..models import QuestionDraft, QuestionType, payload_for
from .policy import GenerationPolicy

__all__ = ["build_fallback", "match_category"]

# (text, type, options, correct_answer, fun_fact)
_Item = tuple[str, QuestionType, Optional[Sequence[str]], str, str]

MC = QuestionType.MULTIPLE_CHOICE
TF = QuestionType.TRUE_FALSE
YN = QuestionType.YES_NO
FB = QuestionType.FILL_BLANK
VOICE = QuestionType.VOICE_INPUT

_TRUE_FALSE = ("True", "False")
_YES_NO = ("Yes", "No")

_ARITHMETIC: tuple[_Item, ...] = (
    ("What is 5 + 3?", MC, ("6", "7", "8", "9"), "8",
     "5 + 3 = 8. You can count on your fingers to check!"),
    ("A triangle has 3 sides.", TF, _TRUE_FALSE, "True",
     "Every triangle has exactly 3 sides and 3 corners!"),
    ("2 + 2 = ____", FB, None, "4",
     "Two pairs of things always make four!"),
    ("Is 10 bigger than 7?", YN, _YES_NO, "Yes",
     "10 is 3 more than 7. Count up from 7 to check!"),
    ("Which number comes after 9?", MC, ("8", "10", "11", "12"), "10",
     "10 is the first number that needs two digits!"),
    ("Half of 8 is 5.", TF, _TRUE_FALSE, "False",
     "Half of 8 is 4, because 4 + 4 = 8."),
    ("10 - 4 = ____", FB, None, "6",
     "Try counting backwards from 10 four times!"),
    ("Can you share 6 apples equally between 2 friends?", YN, _YES_NO, "Yes",
     "Each friend gets 3 apples, because 3 + 3 = 6!"),
    ("What is 2 x 3?", MC, ("4", "5", "6", "7"), "6",
     "2 x 3 means 2 groups of 3, which is 3 + 3 = 6!"),
    ("The number 7 comes before 6.", TF, _TRUE_FALSE, "False",
     "When we count, 7 comes right after 6."),
)

_EARTH_SCIENCE: tuple[_Item, ...] = (
    ("What do we call water falling from clouds?", MC,
     ("Rain", "Sand", "Smoke", "Leaves"), "Rain",
     "Rain forms when tiny drops in a cloud join together and get heavy!"),
    ("The sun is a star.", TF, _TRUE_FALSE, "True",
     "The sun is the closest star to Earth!"),
    ("Frozen water is called ____.", FB, None, "ice",
     "Water turns into ice when it gets colder than 0 degrees Celsius!"),
    ("Does the Earth go around the sun?", YN, _YES_NO, "Yes",
     "It takes the Earth about 365 days to go all the way around the sun!"),
    ("Which season is usually the coldest?", MC,
     ("Summer", "Spring", "Winter", "Autumn"), "Winter",
     "In winter, our part of the Earth leans away from the sun."),
    ("The moon makes its own light.", TF, _TRUE_FALSE, "False",
     "The moon shines because sunlight bounces off it!"),
    ("The planet we live on is called ____.", FB, None, "Earth",
     "Earth is the only planet we know of with oceans of liquid water!"),
    ("Is a rainbow made of many colors?", YN, _YES_NO, "Yes",
     "A rainbow has seven colors, from red all the way to violet!"),
    ("Which planet is called the Red Planet?", MC,
     ("Mars", "Venus", "Jupiter", "Saturn"), "Mars",
     "Mars looks red because its ground is covered in rusty dust!"),
    ("Clouds are made of tiny drops of water.", TF, _TRUE_FALSE, "True",
     "A single cloud can hold as much water as many swimming pools!"),
)

_BIOLOGY: tuple[_Item, ...] = (
    ("Which animal is known as the 'King of the Jungle'?", MC,
     ("Tiger", "Lion", "Elephant", "Bear"), "Lion",
     "Lions are called the 'King of the Jungle' even though they live in "
     "grasslands!"),
    ("A spider has 8 legs.", TF, _TRUE_FALSE, "True",
     "All spiders have 8 legs, which makes them arachnids, not insects!"),
    ("A group of lions is called a ____.", FB, None, "pride",
     "Lions live together in family groups called prides!"),
    ("Do penguins live at the North Pole?", YN, _YES_NO, "No",
     "Penguins live in the southern half of the world, mostly around "
     "Antarctica!"),
    ("What do pandas love to eat?", MC,
     ("Fish", "Bamboo", "Berries", "Grass"), "Bamboo",
     "Pandas can munch bamboo for up to 12 hours a day!"),
    ("Plants need sunlight to grow.", TF, _TRUE_FALSE, "True",
     "Plants use sunlight to make their own food!"),
    ("A baby frog is called a ____.", FB, None, "tadpole",
     "Tadpoles live in water and grow legs as they turn into frogs!"),
    ("Can a chameleon change its color?", YN, _YES_NO, "Yes",
     "Chameleons change color to show how they feel and to stay warm!"),
    ("What is the largest mammal in the world?", MC,
     ("Elephant", "Blue Whale", "Giraffe", "Hippo"), "Blue Whale",
     "A blue whale can be as long as three school buses!"),
    ("An octopus has only one heart.", TF, _TRUE_FALSE, "False",
     "An octopus has three hearts!"),
)

_GEOGRAPHY: tuple[_Item, ...] = (
    ("Which is the biggest ocean?", MC,
     ("Atlantic", "Indian", "Pacific", "Arctic"), "Pacific",
     "The Pacific Ocean is bigger than all the land on Earth put together!"),
    ("Africa is a continent.", TF, _TRUE_FALSE, "True",
     "Africa has more than 50 countries!"),
    ("The icy land at the South Pole is called ____.", FB, None,
     "Antarctica",
     "Antarctica is covered by ice that is more than a mile thick!"),
    ("Is a map a picture of a place seen from above?", YN, _YES_NO, "Yes",
     "Maps help us find our way, like a bird's-eye view of the world!"),
    ("How many continents are there?", MC, ("5", "6", "7", "8"), "7",
     "The seven continents are Africa, Antarctica, Asia, Australia, Europe, "
     "North America and South America!"),
    ("The Sahara is a cold, icy land.", TF, _TRUE_FALSE, "False",
     "The Sahara is a huge, hot desert in Africa!"),
    ("The longest river in Africa is the ____.", FB, None, "Nile",
     "The Nile flows through eleven countries!"),
    ("Does a compass help people find north?", YN, _YES_NO, "Yes",
     "A compass needle is a tiny magnet that points north!"),
    ("Which of these is a country?", MC,
     ("Brazil", "Pacific", "Sahara", "Everest"), "Brazil",
     "Brazil is the biggest country in South America!"),
    ("Mount Everest is the tallest mountain above sea level.", TF,
     _TRUE_FALSE, "True",
     "Mount Everest is almost 9 kilometers tall!"),
)

_VOCABULARY: dict[str, tuple[_Item, ...]] = {
    "telugu": (
        ("What is the Telugu word for 'Water'?", VOICE, None, "నీరు",
         "Water is called 'నీరు' (Neeru) in Telugu, and every living thing "
         "needs it!"),
        ("What is the Telugu word for 'Mother'?", VOICE, None, "అమ్మ",
         "'అమ్మ' (Amma) is one of the first words many Telugu children say!"),
        ("What is the Telugu word for 'Father'?", VOICE, None, "నాన్న",
         "Father is called 'నాన్న' (Nanna) in Telugu."),
        ("What is the Telugu word for 'Dog'?", VOICE, None, "కుక్క",
         "A dog is called 'కుక్క' (Kukka) in Telugu!"),
        ("What is the Telugu word for 'Milk'?", VOICE, None, "పాలు",
         "Milk is called 'పాలు' (Paalu) in Telugu."),
    ),
}

_CATEGORIES: tuple[tuple[str, tuple[str, ...], tuple[_Item, ...]], ...] = (
    ("arithmetic",
     ("math", "number", "counting", "addition", "subtraction", "arithmetic",
      "shape"),
     _ARITHMETIC),
    ("biology",
     ("animal", "plant", "insect", "bug", "bird", "biology", "dinosaur",
      "body"),
     _BIOLOGY),
    ("earth_science",
     ("weather", "earth", "volcano", "rock", "season", "science", "space",
      "planet", "solar"),
     _EARTH_SCIENCE),
    ("geography",
     ("geography", "country", "countries", "map", "continent", "world",
      "ocean"),
     _GEOGRAPHY),
)


def _generic_items(topic_name: str) -> tuple[_Item, ...]:
    t = topic_name
    return (
        (f"What can we learn from {t}?", MC,
         ("Lots of interesting things!", "Nothing at all", "Only one thing",
          "We cannot learn anything"),
         "Lots of interesting things!",
         "Every topic has something new waiting to be discovered!"),
        (f"Learning about {t} can be fun.", TF, _TRUE_FALSE, "True",
         "Your brain grows stronger every time you learn something new!"),
        ("The topic we are exploring today is ____.", FB, None, t,
         f"Today we are exploring {t}!"),
        (f"Can we find books about {t} in a library?", YN, _YES_NO, "Yes",
         "Libraries have books about almost everything!"),
        (f"Who can help you learn more about {t}?", MC,
         ("A teacher", "A rock", "A shoe", "A cloud"), "A teacher",
         "Teachers love it when you ask questions!"),
        (f"Asking questions about {t} helps us learn.", TF, _TRUE_FALSE,
         "True", "Scientists ask questions every day!"),
        ("Practice makes ____!", FB, None, "perfect",
         "The more you practice, the easier things become!"),
        (f"Is it okay to make mistakes while learning about {t}?", YN,
         _YES_NO, "Yes", "Mistakes help us learn and grow!"),
        (f"What is a good way to learn about {t}?", MC,
         ("Reading and asking questions", "Never trying",
          "Covering your ears", "Sleeping all day"),
         "Reading and asking questions",
         "Reading just a little every day adds up to a lot!"),
        (f"Curious people love to explore topics like {t}.", TF, _TRUE_FALSE,
         "True", "Curiosity is like a superpower for learning!"),
    )


def _generic_voice_items(topic_name: str) -> tuple[_Item, ...]:
    return (
        (f"Can you say '{topic_name}' out loud?", VOICE, None, topic_name,
         "Saying new words out loud helps you remember them!"),
        ("Can you say 'hello' out loud?", VOICE, None, "hello",
         "People say hello in thousands of different languages!"),
        ("Can you say 'thank you' out loud?", VOICE, None, "thank you",
         "Saying thank you makes other people smile!"),
        ("Can you say 'friend' out loud?", VOICE, None, "friend",
         "Friends help each other learn new things!"),
        ("Can you say 'happy' out loud?", VOICE, None, "happy",
         "Smiling can help you feel happy too!"),
    )


def match_category(topic_name: str) -> Optional[str]:
    """Return the curated category for ``topic_name``, if any."""

    lowered = topic_name.lower()
    for name, keywords, _items in _CATEGORIES:
        if any(re.search(rf"\b{re.escape(kw)}", lowered) for kw in keywords):
            return name
    return None


def _select_items(
    topic_name: str, policy: GenerationPolicy
) -> tuple[_Item, ...]:
    if policy.is_voice_only:
        language = (policy.answer_language or "").lower()
        return _VOCABULARY.get(language) or _generic_voice_items(topic_name)
    category = match_category(topic_name)
    for name, _keywords, items in _CATEGORIES:
        if name == category:
            return items
    return _generic_items(topic_name)


def build_fallback(
    topic_name: str, policy: GenerationPolicy
) -> list[QuestionDraft]:
    """Return exactly ``policy.batch_size`` drafts for ``topic_name``.

    Curated sets are truncated to the batch size, or repeated when the
    policy asks for more items than the set holds.
    """

    items = _select_items(topic_name.strip() or "this topic", policy)
    allowed = [item for item in items if item[1] in policy.question_types]
    if allowed:
        items = tuple(allowed)
    drafts: list[QuestionDraft] = []
    for text, qtype, options, answer, fact in islice(
        cycle(items), policy.batch_size
    ):
        drafts.append(
            QuestionDraft(
                text=text,
                type=qtype,
                payload=payload_for(
                    qtype, options, language=policy.answer_language
                ),
                correct_answer=answer,
                fun_fact=fact,
            )
        )
    return drafts
