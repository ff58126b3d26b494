"""Character-aware nudge texts, phrased as the agent's own internal thought."""

from __future__ import annotations

from agent_judge.models.domain import NudgeType

NudgeMap = dict[NudgeType, str]

GENERIC_NUDGES: NudgeMap = {
    "devils_advocate": (
        "I should share a different perspective and challenge what everyone else is saying."
    ),
    "change_subject": (
        "I should steer this conversation in a new direction with a fresh topic."
    ),
    "personal_story": (
        "I have a personal experience relevant to this discussion that I should share."
    ),
    "challenging_question": (
        "I should ask a thought-provoking question that makes everyone reconsider."
    ),
    "new_ideas": "I should propose a new idea or approach that nobody has considered yet.",
}

CHARACTER_NUDGES: dict[str, NudgeMap] = {
    "michael": {
        "devils_advocate": (
            "I should push back and share a completely different take. What would a great "
            "leader do? Challenge the group's thinking with a bold, unconventional perspective."
        ),
        "change_subject": (
            "Time to steer this conversation somewhere more exciting. A good boss keeps "
            "things fresh and unpredictable."
        ),
        "personal_story": (
            "I should share a story from my personal life that relates to this topic. "
            "Something funny or meaningful that only I would think of."
        ),
        "challenging_question": (
            "I need to ask the tough question nobody else will. That's what separates a "
            "boss from a leader."
        ),
        "new_ideas": (
            "I should come up with something totally original here. My best ideas always "
            "come when I think outside the box."
        ),
    },
    "dwight": {
        "devils_advocate": (
            "Everyone is wrong and I need to correct them. As Assistant Regional Manager, "
            "I have superior knowledge on this matter."
        ),
        "change_subject": (
            "This conversation is unproductive. I should redirect to something more "
            "relevant, like security protocols or beet farming."
        ),
        "personal_story": (
            "I should share a relevant experience from the Schrute family farm or my "
            "volunteer sheriff training."
        ),
        "challenging_question": (
            "I need to test everyone's preparedness with a hard question. Weakness must "
            "be exposed."
        ),
        "new_ideas": (
            "I should propose a superior solution based on Schrute family tradition or my "
            "survival training expertise."
        ),
    },
    "jim": {
        "devils_advocate": (
            "I should play devil's advocate here. It'd be fun to poke holes in this and "
            "see where the conversation goes."
        ),
        "change_subject": (
            "This is getting stale. I should pivot to something more interesting or find "
            "the humor in the situation."
        ),
        "personal_story": (
            "I could share something from my own experience that puts this in a different "
            "light, maybe with a bit of humor."
        ),
        "challenging_question": (
            "I should ask something that makes everyone think twice, maybe with a "
            "sarcastic edge."
        ),
        "new_ideas": (
            "I should suggest something unexpected here. The best ideas are the ones "
            "nobody saw coming."
        ),
    },
    "pam": {
        "devils_advocate": (
            "I actually disagree with this and I should say so. I need to be more "
            "assertive about sharing my perspective."
        ),
        "change_subject": (
            "Maybe I should bring up something different that could help move this "
            "forward in a better direction."
        ),
        "personal_story": (
            "I have a personal experience that's relevant here. I should share it even if "
            "it feels a little vulnerable."
        ),
        "challenging_question": (
            "I should ask the question that everyone is thinking but nobody wants to say "
            "out loud."
        ),
        "new_ideas": (
            "I have a creative idea that might work. I should speak up instead of keeping "
            "it to myself."
        ),
    },
    "oscar": {
        "devils_advocate": (
            "Actually, the facts don't support what everyone is saying. I should provide "
            "the correct perspective with evidence."
        ),
        "change_subject": (
            "I should elevate this conversation to something more intellectually substantive."
        ),
        "personal_story": (
            "I have relevant experience that provides important context everyone is missing."
        ),
        "challenging_question": (
            "I need to ask the analytical question that exposes the flawed logic in this "
            "discussion."
        ),
        "new_ideas": (
            "I should propose a more rational, well-reasoned approach based on actual data."
        ),
    },
    "stanley": {
        "devils_advocate": (
            "This is a waste of time and I should say so. Someone needs to be the voice "
            "of reason."
        ),
        "change_subject": (
            "I should redirect this conversation to something that actually matters, or "
            "better yet, end it."
        ),
        "personal_story": (
            "I've been doing this for decades. I should share what I've learned, even if "
            "nobody wants to hear it."
        ),
        "challenging_question": (
            "I should ask how this is supposed to help us do our actual jobs and go home "
            "on time."
        ),
        "new_ideas": (
            "I know a simpler way to handle this. The answer is almost always less work, "
            "not more."
        ),
    },
}


def get_nudge_text(agent_id: str, nudge_type: NudgeType) -> str:
    """Nudge for the character keyed by ``agent_id``, else the generic one."""
    return CHARACTER_NUDGES.get(agent_id, GENERIC_NUDGES)[nudge_type]
