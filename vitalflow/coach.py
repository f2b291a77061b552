"""
Capability functions behind the HTTP routes.

Each one builds a fixed prompt, calls the LLM client once and parses the
answer. Any failure in that pipeline is logged and replaced by a static
fallback, so callers always receive a well-formed value.
"""

import time
from datetime import datetime
from typing import Optional, Sequence

from dateutil import tz

from vitalflow.agent import LLMClient
from vitalflow.config import Settings
from vitalflow.logger import get_logger
from vitalflow.utils.models import BloodPressureReading, ChatMessage, ExerciseSuggestion, HealthAnalysis
from vitalflow.utils.parsing import parse_structured

logger = get_logger(__name__)

DEFAULT_CONTEXT = "office worker"
MAX_READINGS_IN_PROMPT = 10

DEFAULT_EXERCISE = ExerciseSuggestion(
    name="隐形椅子",
    description="背靠墙壁下蹲，像坐在一把隐形的椅子上，坚持 45 秒后缓慢站起，重复 3 组。",
    duration_seconds=90,
    difficulty="Medium",
    fun_fact="激活腿部最大肌群，迅速提升血液循环。",
)

FALLBACK_TIP = "每隔 1 小时站起来伸展 2 分钟，血液就会感谢你。"

NO_DATA_TREND = "暂无数据"
NO_DATA_ADVICE = "请先记录几条血压数据再试。"
FALLBACK_TREND = "AI 服务暂不可用"
FALLBACK_ADVICE = "稍后再试，或继续保持良好生活方式。"

EXERCISE_SYSTEM_PROMPT = "你是一名擅长设计工位微运动的健身教练，只能用简体中文输出 JSON 对象。"
TIP_SYSTEM_PROMPT = "你是一名活泼幽默的健康教练，回答要简短、鼓励性、用简体中文。"
TIP_USER_PROMPT = "请给出一句 30 字以内、关于降低血压或减少久坐的小贴士，语气轻松。"
ANALYSIS_SYSTEM_PROMPT = "你是一名心血管健康教练，只能返回 JSON，对血压趋势给出积极的分析和建议。"


def now_millis() -> int:
    return int(time.time() * 1000)


def _format_value(value: float) -> str:
    return f"{value:g}"


def format_readings(readings: Sequence[BloodPressureReading], tzinfo) -> str:
    """Oldest first, last MAX_READINGS_IN_PROMPT entries, one "date: sys/dia" per line."""
    recent = sorted(readings, key=lambda reading: reading.timestamp)[-MAX_READINGS_IN_PROMPT:]
    lines = []
    for reading in recent:
        day = datetime.fromtimestamp(reading.timestamp / 1000, tz=tzinfo).strftime("%Y-%m-%d")
        lines.append(f"{day}: {_format_value(reading.systolic)}/{_format_value(reading.diastolic)}")
    return "\n".join(lines)


class VitalCoach:
    def __init__(self, client: LLMClient, settings: Settings):
        self.client = client
        if settings.TIMEZONE:
            self.tzinfo = tz.gettz(settings.TIMEZONE)
            if self.tzinfo is None:
                raise ValueError(f"Unknown timezone: {settings.TIMEZONE}")
        else:
            self.tzinfo = tz.tzlocal()

    async def suggest_exercise(self, context: Optional[str] = None) -> ExerciseSuggestion:
        context = (context or "").strip() or DEFAULT_CONTEXT
        messages = [
            ChatMessage(role="system", content=EXERCISE_SYSTEM_PROMPT),
            ChatMessage(
                role="user",
                content=(
                    f"为一位{context}生成一个可以在工位完成的趣味微运动。"
                    "字段需包含 name、description、durationSeconds、difficulty、funFact，"
                    "且时长控制在 60-120 秒。"
                ),
            ),
        ]
        try:
            text = await self.client.complete_chat(messages, response_format="json_object", temperature=0.7)
            exercise = ExerciseSuggestion.model_validate(parse_structured(text))
        except Exception as e:
            logger.warning(f"suggest_exercise fallback: {e}")
            return DEFAULT_EXERCISE

        # The illustration never decides between the exercise and the fallback
        try:
            image_url = await self.client.generate_image(
                f'Draw a clean flat illustration that shows "{exercise.name}" ({exercise.description}). '
                "Style: memphis, white background, indigo accent, no Chinese text."
            )
            if image_url:
                exercise = ExerciseSuggestion.model_validate({**exercise.model_dump(), "image_url": image_url})
        except Exception as e:
            logger.warning(f"suggest_exercise illustration failed: {e}")
        return exercise

    async def tip_for_healthy_habits(self) -> str:
        messages = [
            ChatMessage(role="system", content=TIP_SYSTEM_PROMPT),
            ChatMessage(role="user", content=TIP_USER_PROMPT),
        ]
        try:
            tip = await self.client.complete_chat(messages, temperature=0.8)
        except Exception as e:
            logger.warning(f"tip_for_healthy_habits fallback: {e}")
            return FALLBACK_TIP
        return tip.strip() or FALLBACK_TIP

    async def analyze_trend(self, readings: Sequence[BloodPressureReading]) -> HealthAnalysis:
        if not readings:
            return HealthAnalysis(trend=NO_DATA_TREND, advice=NO_DATA_ADVICE, generated_at=now_millis())

        try:
            data_string = format_readings(readings, self.tzinfo)
            messages = [
                ChatMessage(role="system", content=ANALYSIS_SYSTEM_PROMPT),
                ChatMessage(role="user", content=f"请根据下面的血压记录，输出 trend 和 advice 两个字段：\n{data_string}"),
            ]
            text = await self.client.complete_chat(messages, response_format="json_object", temperature=0.4)
            parsed = parse_structured(text)
            return HealthAnalysis.model_validate({**parsed, "generatedAt": now_millis()})
        except Exception as e:
            logger.warning(f"analyze_trend fallback: {e}")
            return HealthAnalysis(trend=FALLBACK_TREND, advice=FALLBACK_ADVICE, generated_at=now_millis())
