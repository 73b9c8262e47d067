"""
Burnout Detector - energy score and burnout signals from daily study logs.

Looks at the last 7 logged days and compares the most recent 3 against the
full window. Penalties are independent and cumulative:

    accuracy drop >= 15 pts   -15
    accuracy drop >= 25 pts   -25 more
    study time down >= 30%    -20
    4+ late-night days        -15
    < 20 questions/day        -10
"""

from __future__ import annotations

from collections.abc import Sequence
from statistics import fmean

from loguru import logger

from prep_engine.core.models import (
    BurnoutAssessment,
    BurnoutSignal,
    EnergyLog,
    Severity,
    SignalType,
)
from prep_engine.core.thresholds import DEFAULT_BURNOUT_CONFIG, BurnoutConfig


def _window(logs: Sequence[EnergyLog], config: BurnoutConfig) -> list[EnergyLog]:
    ordered = sorted(logs, key=lambda log: log.day)
    return ordered[-config.window_days:]


def _drops(window: list[EnergyLog], config: BurnoutConfig) -> tuple[float, float]:
    """(accuracy drop in points, study-time drop as a fraction of the average)."""
    recent = window[-config.recent_days:]

    accuracy_drop = fmean(log.accuracy for log in window) - fmean(log.accuracy for log in recent)

    avg_hours = fmean(log.study_hours for log in window)
    recent_hours = fmean(log.study_hours for log in recent)
    time_drop = (avg_hours - recent_hours) / avg_hours if avg_hours > 0 else 0.0

    return accuracy_drop, time_drop


def energy_score(
    logs: Sequence[EnergyLog], config: BurnoutConfig = DEFAULT_BURNOUT_CONFIG
) -> float:
    """
    Composite energy score (0-100); lower means closer to burnout.

    Args:
        logs: Daily energy logs, any order; only the latest window is used

    Returns:
        Score clamped to [0, 100]. No logs means full energy.
    """
    if not logs:
        return 100.0

    window = _window(logs, config)
    score = 100.0

    accuracy_drop, time_drop = _drops(window, config)
    if accuracy_drop >= config.accuracy_drop_points:
        score -= config.accuracy_drop_penalty
    if accuracy_drop >= config.severe_accuracy_drop_points:
        score -= config.severe_accuracy_drop_penalty

    if time_drop >= config.time_drop_ratio:
        score -= config.time_drop_penalty

    late_nights = sum(1 for log in window if log.late_night_study)
    if late_nights >= config.late_night_days:
        score -= config.late_night_penalty

    if fmean(log.questions_attempted for log in window) < config.min_avg_questions:
        score -= config.low_questions_penalty

    return max(0.0, min(100.0, score))


def detect_signals(
    logs: Sequence[EnergyLog], config: BurnoutConfig = DEFAULT_BURNOUT_CONFIG
) -> list[BurnoutSignal]:
    """Burnout signals with severity; needs at least three logged days."""
    if len(logs) < config.min_logs_for_signals:
        return []

    window = _window(logs, config)
    signals: list[BurnoutSignal] = []

    accuracy_drop, time_drop = _drops(window, config)
    if accuracy_drop >= config.signal_accuracy_drop:
        signals.append(
            BurnoutSignal(
                SignalType.ACCURACY_DROP,
                Severity.HIGH if accuracy_drop > config.signal_accuracy_drop_high else Severity.MEDIUM,
                f"Your accuracy dropped by {accuracy_drop:.1f}% in the last {config.recent_days} days",
            )
        )

    time_decrease_pct = time_drop * 100
    if time_decrease_pct >= config.signal_time_decrease_pct:
        signals.append(
            BurnoutSignal(
                SignalType.TIME_DECREASE,
                Severity.HIGH
                if time_decrease_pct > config.signal_time_decrease_high_pct
                else Severity.MEDIUM,
                f"Study time decreased by {time_decrease_pct:.0f}%",
            )
        )

    late_nights = sum(1 for log in window if log.late_night_study)
    if late_nights >= config.signal_night_study_days:
        signals.append(
            BurnoutSignal(
                SignalType.NIGHT_STUDY,
                Severity.HIGH,
                f"You studied late at night on {late_nights} days this week",
            )
        )

    avg_questions = fmean(log.questions_attempted for log in window)
    if avg_questions < config.signal_incomplete_questions:
        signals.append(
            BurnoutSignal(
                SignalType.INCOMPLETE_TARGETS,
                Severity.HIGH
                if avg_questions < config.signal_incomplete_questions_high
                else Severity.MEDIUM,
                f"Daily target completion is low "
                f"({avg_questions:.0f}/{config.daily_question_target} questions)",
            )
        )

    return signals


def should_suggest_rest(
    score: float,
    signals: Sequence[BurnoutSignal],
    config: BurnoutConfig = DEFAULT_BURNOUT_CONFIG,
) -> bool:
    """Rest when energy is very low or two or more high-severity signals fire."""
    high = sum(1 for s in signals if s.severity is Severity.HIGH)
    return score < config.rest_day_threshold or high >= config.high_severity_signals_for_rest


def rest_day_message(score: float) -> str:
    if score < 20:
        return "Critical: take a complete break today. Your brain needs recovery!"
    if score < 40:
        return "Warning: consider a light study day or a half-day break."
    if score < 60:
        return "Suggestion: focus on easier topics or just revision today."
    return "You're doing great! Keep up the momentum."


def assess(
    logs: Sequence[EnergyLog], config: BurnoutConfig = DEFAULT_BURNOUT_CONFIG
) -> BurnoutAssessment:
    """Score, signals and rest recommendation in one pass."""
    score = energy_score(logs, config)
    signals = detect_signals(logs, config)
    rest = should_suggest_rest(score, signals, config)
    if rest:
        logger.warning(f"Rest day suggested: energy {score:.0f}, {len(signals)} signals")
    return BurnoutAssessment(
        energy_score=score,
        signals=tuple(signals),
        suggest_rest=rest,
        message=rest_day_message(score),
    )
