"""逐帧信号录制文件（JSON Lines）的读写"""

import json
import os
from dataclasses import asdict, fields
from typing import Iterable, List

from models.data_models import Sample

_FIELDS = tuple(f.name for f in fields(Sample))


def _parse_sample(data: dict) -> Sample:
    values = {k: float(data[k]) for k in _FIELDS if k != "is_calibrated"}
    return Sample(is_calibrated=bool(data["is_calibrated"]), **values)


def load_recording(path: str) -> List[Sample]:
    """
    加载录制文件，每行一个 JSON 对象，字段与 Sample 一致。

    Raises:
        ValueError: 路径无效、JSON 格式错误或缺少字段
    """
    if not os.path.isfile(path):
        raise ValueError(f"录制文件路径无效: {path}")

    samples = []
    with open(path, "r", encoding="utf-8") as f:
        for line_no, line in enumerate(f, start=1):
            line = line.strip()
            if not line:
                continue
            try:
                data = json.loads(line)
            except json.JSONDecodeError as e:
                raise ValueError(f"录制文件第 {line_no} 行格式错误: {path}") from e
            missing = [k for k in _FIELDS if k not in data]
            if missing:
                raise ValueError(f"录制文件第 {line_no} 行缺少字段 {missing}: {path}")
            samples.append(_parse_sample(data))
    return samples


def save_recording(samples: Iterable[Sample], path: str) -> None:
    """保存为 JSON Lines，自动创建目录"""
    output_dir = os.path.dirname(path)
    if output_dir:
        os.makedirs(output_dir, exist_ok=True)

    with open(path, "w", encoding="utf-8") as f:
        for sample in samples:
            f.write(json.dumps(asdict(sample), ensure_ascii=False))
            f.write("\n")
