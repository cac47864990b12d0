# -*- coding: utf-8 -*-
"""
查看器配置（Model）。
YAML 文件经 pydantic 校验后得到 ViewerConfig；未提供配置文件时使用默认值。
"""

from pathlib import Path
from typing import Optional, Union

import yaml
from pydantic import BaseModel, Field


class ViewerConfig(BaseModel):
    # 颜色表条目数
    colormap_size: int = Field(256, gt=1)
    zoom_in_factor: float = Field(1.25, gt=1.0)
    zoom_out_factor: float = Field(0.8, gt=0.0, lt=1.0)
    # 加载后是否把视图适配到整幅图像
    fit_on_load: bool = True


def load_viewer_config(config_path: Optional[Union[str, Path]] = None) -> ViewerConfig:
    """读取 YAML 配置；路径为空或文件为空时返回默认配置，字段非法时抛出 pydantic.ValidationError。"""
    if config_path is None:
        return ViewerConfig()
    with open(config_path, "r") as f:
        raw_config = yaml.safe_load(f) or {}
    return ViewerConfig(**raw_config)
