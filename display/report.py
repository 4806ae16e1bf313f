"""文本输出模块 - 格式化指标行、等级变化和行程报告。"""

from models.data_models import FatigueLevel, FatigueMetrics, LevelChange, TripSummary

# 等级文字映射
LEVEL_TEXT = {
    FatigueLevel.NORMAL: "正常",
    FatigueLevel.MILD: "轻度疲劳",
    FatigueLevel.MODERATE: "中度疲劳",
    FatigueLevel.HIGH: "重度疲劳",
    FatigueLevel.CRITICAL: "危险",
}


def format_value(v: float) -> str:
    """格式化浮点数为两位小数字符串。"""
    return f"{v:.2f}"


def format_duration(seconds: float) -> str:
    """格式化行程时长：超过 1 小时显示 "Xh Ym"，否则显示 "N min"。"""
    total = int(seconds)
    hours = total // 3600
    minutes = total // 60 % 60
    if hours > 0:
        return f"{hours}h {minutes}m"
    return f"{minutes} min"


def format_metrics_line(metrics: FatigueMetrics) -> str:
    """单行指标摘要；校准未完成时显示校准进度。"""
    if not metrics.is_calibrated:
        return f"校准中: {metrics.calibration_progress} 个样本"
    return (
        f"PERCLOS {format_value(metrics.perclos)}% | "
        f"长眨眼 {metrics.long_blink_rate:.0f}/min | "
        f"平均眨眼 {format_value(metrics.mean_blink_duration)}s | "
        f"点头 {format_value(metrics.head_nod_rate)}/5min | "
        f"哈欠 {metrics.yawn_count} | "
        f"视线偏离 {format_value(metrics.gaze_deviation_percent)}% | "
        f"得分 {metrics.fatigue_score:.0f} ({LEVEL_TEXT[metrics.fatigue_level]})"
    )


def format_level_change(change: LevelChange) -> str:
    arrow = "↑" if change.escalated else "↓"
    return (
        f"[{change.timestamp:8.2f}s] {arrow} "
        f"{LEVEL_TEXT[change.previous]} -> {LEVEL_TEXT[change.current]} "
        f"(得分 {change.score:.0f})"
    )


def format_perclos_sparkline(history) -> str:
    """把 PERCLOS 历史画成一行字符图，每个字符对应一次 10 秒采样。"""
    blocks = " ▁▂▃▄▅▆▇█"
    chars = []
    for value in history:
        index = min(int(value / 100.0 * (len(blocks) - 1) + 0.5), len(blocks) - 1)
        chars.append(blocks[max(index, 0)])
    return "".join(chars)


def format_trip_report(summary: TripSummary) -> str:
    lines = [
        "=" * 40,
        "行程报告",
        "=" * 40,
        f"时长:       {format_duration(summary.duration)}",
        f"告警次数:   {summary.alert_count}",
        f"眨眼次数:   {summary.blink_count}",
        f"哈欠次数:   {summary.yawn_count}",
        f"点头次数:   {summary.head_nod_count}",
        f"最高得分:   {summary.peak_score:.0f} ({LEVEL_TEXT[summary.peak_level]})",
    ]
    if summary.perclos_history:
        lines.append(f"PERCLOS:    {format_perclos_sparkline(summary.perclos_history)}")
    return "\n".join(lines)
