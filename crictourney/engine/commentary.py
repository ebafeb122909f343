"""
Commentary templates for ball events.
"""
import random
from typing import Optional

COMMENTARY_TEMPLATES = {
    "dot": [
        "Good line and length, no run.",
        "Defended solidly back down the pitch.",
        "Beaten outside off! No run.",
        "Left alone, sails through to the keeper.",
        "Dot ball. Tight bowling.",
    ],
    "run": [
        "Pushed into the gap for {value}.",
        "Worked away off the pads, {value} taken.",
        "Good running between the wickets, {value} to the total.",
        "Nudged into the leg side and they pick up {value}.",
    ],
    "boundary": [
        "FOUR! Driven beautifully through the covers!",
        "FOUR! Cut hard past point!",
        "FOUR! Flicked off the pads to the fine leg fence!",
        "FOUR! Punched down the ground, no stopping that!",
    ],
    "six": [
        "SIX! Launched high into the stands!",
        "SIX! Cleared long-on with ease!",
        "SIX! Down the track and straight over the bowler's head!",
        "MAXIMUM! That's gone a long way!",
    ],
    "wicket": [
        "WICKET! The stumps are shattered!",
        "OUT! Taken safely in the deep!",
        "GONE! Plumb in front, the finger goes up!",
        "OUT! Edged and the keeper makes no mistake!",
    ],
    "wide": [
        "Wide ball, well outside off stump.",
        "Strays down the leg side, wide called.",
        "Too wide, the umpire stretches his arms.",
    ],
    "no_ball": [
        "NO BALL! Overstepped the crease.",
        "No ball called, that was above the waist.",
    ],
    "leg_bye": [
        "Off the pads for a leg bye.",
        "Deflects off the thigh pad, they scamper a leg bye.",
    ],
    "bye": [
        "Beats the bat and the keeper, a bye taken.",
        "Keeper fumbles and they sneak a bye.",
    ],
    "match_start": [
        "Welcome to what promises to be a cracking contest!",
        "The players are out in the middle, we're about to get underway.",
        "Big crowd in tonight, the stage is set!",
    ],
}


class CommentaryGenerator:
    """Picks a random template line for an event category"""

    def __init__(self, rng: Optional[random.Random] = None):
        self.rng = rng or random.Random()

    def generate(self, category: str, value: Optional[int] = None) -> str:
        templates = COMMENTARY_TEMPLATES.get(category)
        if not templates:
            return f"Play continues after a {category} event."
        text = self.rng.choice(templates)
        if "{value}" in text:
            runs = value if value is not None else 1
            text = text.format(value=f"{runs} run{'s' if runs != 1 else ''}")
        return text

    def __call__(self, category: str, value: Optional[int] = None) -> str:
        return self.generate(category, value)
