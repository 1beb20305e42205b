"""Scripted "story doctor" that answers fixed questions about the fable.

Matching is plain substring containment on case-folded input. Rules are tried
in table order and the first hit wins; several keyword sets overlap, so the
order below is part of the behaviour.
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field
from typing import Optional, Sequence, Tuple, Union


logger = logging.getLogger(__name__)


DEFAULT_THINK_WINDOW: Tuple[float, float] = (0.5, 1.0)


@dataclass(frozen=True)
class KeywordRule:
    name: str
    keywords: Tuple[str, ...]
    response: str

    def matches(self, text: str) -> bool:
        return any(keyword in text for keyword in self.keywords)

    def select(self, text: str) -> Optional[str]:
        return self.response if self.matches(text) else None


@dataclass(frozen=True)
class TopicRule:
    """Outer keyword gate with its own ordered sub-rules and a topic fallback."""

    name: str
    keywords: Tuple[str, ...]
    sub_rules: Sequence[KeywordRule] = field(default_factory=tuple)
    fallback: str = ""

    def matches(self, text: str) -> bool:
        return any(keyword in text for keyword in self.keywords)

    def select(self, text: str) -> Optional[str]:
        if not self.matches(text):
            return None
        for rule in self.sub_rules:
            if rule.matches(text):
                logger.debug("topic %s -> sub-rule %s", self.name, rule.name)
                return rule.response
        return self.fallback


Rule = Union[KeywordRule, TopicRule]


DEFAULT_RESPONSE = (
    "음, 그건 조금 어려운 질문인걸? '교훈이 뭐야?', '여우는 왜 포기했어?', "
    "'포도는 무슨 맛일까?' 처럼 물어봐 줄래?"
)


def build_rules() -> Tuple[Rule, ...]:
    return (
        # Greetings & identity
        KeywordRule(
            name="greeting",
            keywords=("안녕", "반가워"),
            response="안녕! 나는 이야기 박사님이야. 우리 같이 '여우와 신포도' 이야기를 알아볼까?",
        ),
        KeywordRule(
            name="identity",
            keywords=("이름", "누구"),
            response="나는 '여우와 신포도'에 대해 모든 걸 알고 있는 이야기 박사님이야! 궁금한 걸 물어봐 줘.",
        ),
        KeywordRule(
            name="thanks",
            keywords=("고마워", "감사"),
            response="천만에! 또 궁금한 게 있으면 언제든지 물어봐.",
        ),
        # Moral and the two follow-up concepts it leads to
        KeywordRule(
            name="moral",
            keywords=("교훈", "배운", "의미", "주제"),
            response=(
                "이 이야기의 교훈은 매우 중요해! <strong>'가질 수 없다고 해서 그것을 나쁘게 말하거나 "
                "깎아내려선 안 된다'</strong>는 거야. <br>혹시 '자기합리화'라는 말 들어봤니?"
            ),
        ),
        KeywordRule(
            name="rationalization",
            keywords=("자기합리화", "합리화", "핑계"),
            response=(
                "어려운 말이지? 쉽게 말하면 <strong>'자신의 잘못이나 실패를 인정하기 싫어서 그럴듯한 "
                "핑계를 대는 것'</strong>을 말해. 여우가 포도를 못 따먹고 '저건 맛없을 거야'라고 한 것처럼 말이야."
            ),
        ),
        KeywordRule(
            name="cognitive_dissonance",
            keywords=("인지부조화",),
            response=(
                "우와! 정말 똑똑하구나! 맞아, 여우가 배고픔과 실패 사이에서 마음이 불편해지니까 "
                "스스로 속인 거야. 그걸 '인지부조화'라고 해."
            ),
        ),
        # Characters & plot
        TopicRule(
            name="fox",
            keywords=("여우",),
            sub_rules=(
                KeywordRule(
                    name="fox.reason",
                    keywords=("배고", "이유", "먹었"),
                    response="여우는 쫄쫄 굶어서 배가 아주 많이 고팠어. 그래서 포도를 보자마자 달려들었지.",
                ),
                KeywordRule(
                    name="fox.personality",
                    keywords=("성격", "어때"),
                    response="여우는 끈기가 좀 부족했던 것 같아. 그리고 솔직하지 못하고 남 탓을 하는 성격을 가지고 있네.",
                ),
                KeywordRule(
                    name="fox.appearance",
                    keywords=("색", "생김새"),
                    response="이 그림 속의 여우는 예쁜 주황색 털을 가지고 있단다.",
                ),
            ),
            fallback="여우는 배가 고파서 포도를 따려고 노력했지만 결국 실패했어.",
        ),
        TopicRule(
            name="grapes",
            keywords=("포도",),
            sub_rules=(
                KeywordRule(
                    name="grapes.color",
                    keywords=("색", "무슨"),
                    response="탐스러운 <strong>보라색</strong> 포도였어. 정말 달콤해 보였지!",
                ),
                KeywordRule(
                    name="grapes.taste",
                    keywords=("맛", "시어", "셔"),
                    response="사실 포도는 아주 달콤하고 맛있게 익었을 거야. 여우가 못 먹어서 억지로 시다고 생각한 거지.",
                ),
                KeywordRule(
                    name="grapes.location",
                    keywords=("어디",),
                    response="포도는 아주 높은 포도나무 덩굴 위에 매달려 있었어.",
                ),
            ),
            fallback="포도는 여우가 닿지 못할 만큼 높이 있었단다.",
        ),
        KeywordRule(
            name="outcome",
            keywords=("포기", "실패", "못", "안"),
            response=(
                "여우는 키가 닿지 않아서 몇 번 점프하다가 힘들어서 포기했어. "
                "조금 더 노력했거나 도구를 썼으면 좋았을 텐데!"
            ),
        ),
        # Misc
        KeywordRule(
            name="fun",
            keywords=("재미",),
            response="그치? 이솝 우화는 짧지만 정말 재미있고 배울 점이 많아!",
        ),
        KeywordRule(
            name="similar_stories",
            keywords=("다른", "비슷", "동화"),
            response="'토끼와 거북이'나 '개미와 베짱이' 이야기도 이솝 우화야. 그것들도 아주 재미있단다!",
        ),
        KeywordRule(
            name="setting",
            keywords=("어디", "장소", "배경"),
            response="따뜻한 햇살이 비치는 숲속이었어. 포도나무가 높이 자라있는 곳이었지.",
        ),
        KeywordRule(
            name="ending",
            keywords=("다음", "뒤", "결말"),
            response="여우는 결국 포도를 못 먹고 투덜대며 숲속 다른 곳으로 가버렸어. 배는 여전히 고팠겠지?",
        ),
    )


def normalize(text: str) -> str:
    return text.casefold()


class StoryResponder:
    """Maps any input string to exactly one canned reply. Keeps no turn memory."""

    def __init__(
        self,
        rules: Sequence[Rule] | None = None,
        default_response: str = DEFAULT_RESPONSE,
        think_window: Tuple[float, float] = DEFAULT_THINK_WINDOW,
    ) -> None:
        self.rules: Tuple[Rule, ...] = tuple(rules) if rules is not None else build_rules()
        self.default_response = default_response
        low, high = think_window
        self.think_window = (min(low, high), max(low, high))

    def respond(self, text: str) -> str:
        normalized = normalize(text if isinstance(text, str) else str(text))
        for rule in self.rules:
            reply = rule.select(normalized)
            if reply is not None:
                logger.debug("rule %s matched", rule.name)
                return reply
        logger.debug("no rule matched; using default response")
        return self.default_response

    def thinking_delay(self, rng: random.Random | None = None) -> float:
        """Seconds to wait before showing a reply, uniform within the think window."""
        low, high = self.think_window
        return (rng or random).uniform(low, high)


__all__ = [
    "DEFAULT_RESPONSE",
    "DEFAULT_THINK_WINDOW",
    "KeywordRule",
    "Rule",
    "StoryResponder",
    "TopicRule",
    "build_rules",
    "normalize",
]
