"""MeCab 形态素记录模型。

mecab-channel morpheme v0.1.0

默认（IPADIC）输出格式:
    表层形\t品詞,品詞細分類1,品詞細分類2,品詞細分類3,活用型,活用形,原形,読み,発音

未知词只有前 7 个素性，缺失字段为 None；"*" 同样视为 None。
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

__all__ = [
    "Morpheme",
    "parse_morpheme",
    "FEATURE_FIELDS",
]

FEATURE_FIELDS = (
    "pos",
    "pos_detail1",
    "pos_detail2",
    "pos_detail3",
    "conjugation_type",
    "conjugation_form",
    "base_form",
    "reading",
    "pronunciation",
)


class Morpheme(BaseModel):
    """一个形态素。

    Attributes:
        surface: 表层形
        pos: 品詞
        pos_detail1..3: 品詞細分類
        conjugation_type: 活用型
        conjugation_form: 活用形
        base_form: 原形
        reading: 読み
        pronunciation: 発音
        features: 原始素性列表（包括超出 IPADIC 字段数的部分）
    """

    model_config = ConfigDict(frozen=True)

    surface: str
    pos: str | None = None
    pos_detail1: str | None = None
    pos_detail2: str | None = None
    pos_detail3: str | None = None
    conjugation_type: str | None = None
    conjugation_form: str | None = None
    base_form: str | None = None
    reading: str | None = None
    pronunciation: str | None = None
    features: list[str] = Field(default_factory=list)


def parse_morpheme(line: str) -> Morpheme:
    """将一行 MeCab 输出解析为 Morpheme。

    可直接作为 Channel 的行解析器使用::

        channel.set_line_parser(parse_morpheme)
    """
    surface, _, feature_text = line.partition("\t")
    features = feature_text.split(",") if feature_text else []
    values = {
        name: (value if value != "*" else None)
        for name, value in zip(FEATURE_FIELDS, features)
    }
    return Morpheme(surface=surface, features=features, **values)
