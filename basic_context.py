# -*- coding: utf-8 -*-
"""
컴파일 1회분 상태 (변수 목록 / 라벨·서브루틴 / DATA·RESTORE)
- 트리 변환(1st pass) 중에 채워지고, 조립 단계(2nd pass)에서 소비된다
- 컴파일마다 CompileContext 를 새로 만든다 (전역 상태 없음)
"""

import re
import logging
from collections import Counter
from typing import Dict, List, Optional, Tuple

log = logging.getLogger(__name__)

JS_KEYWORDS = re.compile(
    r"^(arguments|await|break|case|catch|class|const|continue|debugger|default|delete|do|"
    r"else|enum|eval|export|extends|false|finally|for|function|if|implements|import|in|"
    r"instanceof|interface|let|new|null|package|private|protected|public|return|static|"
    r"super|switch|this|throw|true|try|typeof|var|void|while|with|yield)$"
)


# =====================================================
# 변수 레지스트리
# =====================================================
class VariableRegistry:
    def __init__(self):
        self.counts: Dict[str, int] = {}   # 삽입 순서 = 처음 본 순서

    @staticmethod
    def canonical(name: str) -> str:
        name = name.lower()
        if JS_KEYWORDS.match(name):
            name = "_" + name
        return name

    def resolve(self, name: str) -> str:
        name = self.canonical(name)
        self.counts[name] = self.counts.get(name, 0) + 1
        return name

    def declarations(self) -> List[Tuple[str, object]]:
        return [(n, "" if n.endswith("$") else 0) for n in self.counts]

    def __len__(self):
        return len(self.counts)

    def __contains__(self, name):
        return name in self.counts


# =====================================================
# 라벨 / 서브루틴
# =====================================================
class LabelEntry:
    __slots__ = ("label", "first_line", "last_line", "data_index", "data_start")

    def __init__(self, label, first_line, data_start=0):
        self.label = label
        self.first_line = first_line
        self.last_line = -1        # RETURN 으로 끝나는 줄이 나오면 설정
        self.data_index = -1       # 이 라벨 아래 첫 DATA 위치
        self.data_start = data_start

    def __repr__(self):
        return (f"LabelEntry({self.label!r}, first={self.first_line}, "
                f"last={self.last_line}, data={self.data_index})")


class LabelTracker:
    def __init__(self):
        self.entries: List[LabelEntry] = []
        self.gosub_refs: Counter = Counter()

    def on_label_seen(self, label, line_index, data_start=0):
        self.entries.append(LabelEntry(str(label), line_index, data_start))

    def on_gosub_reference(self, label):
        self.gosub_refs[str(label)] += 1

    def on_return_seen(self, line_index):
        # RETURN 은 가장 최근 라벨의 구역을 닫는다 (라벨 없으면 무시)
        if self.entries:
            self.entries[-1].last_line = line_index

    def current(self) -> Optional[LabelEntry]:
        return self.entries[-1] if self.entries else None

    def is_referenced(self, label) -> bool:
        return self.gosub_refs[str(label)] > 0

    def resolve_subroutines(self) -> List[Tuple[str, int, int]]:
        """
        GOSUB 대상 라벨에서 시작해서, 그 뒤 처음으로 RETURN 을 가진 라벨 줄에서 끝나는 구역.
        반환: [(label, first_line, last_line), ...] (소스 순서)
        """
        regions = []
        start = None
        for entry in self.entries:
            if self.is_referenced(entry.label):
                start = entry
            if start is not None and entry.last_line >= 0:
                regions.append((start.label, start.first_line, entry.last_line))
                start = None
        if start is not None:
            log.debug("subroutine %s has no RETURN; left inline", start.label)
        return regions


# =====================================================
# DATA / RESTORE
# =====================================================
class DataTracker:
    def __init__(self):
        self.data_list: List[object] = []
        self.data_text: List[str] = []     # JS 리터럴 표기 (data_list 와 같은 길이)
        self.restore_map: Dict[str, int] = {}

    def on_data(self, items, labels: LabelTracker):
        # items: [('NUM', v, text) | ('STR', v, raw), ...]
        entry = labels.current()
        if entry is not None and entry.data_index < 0:
            entry.data_index = len(self.data_list)
        for _tag, value, text in items:
            self.data_list.append(value)
            self.data_text.append(text)

    def on_restore(self, label=None):
        label = "0" if label is None else str(label)
        self.restore_map.setdefault(label, -1)
        return label

    def finish(self, labels: LabelTracker):
        pending = {k for k, v in self.restore_map.items() if v == -1}
        for entry in labels.entries:
            if entry.label in pending:
                idx = entry.data_index if entry.data_index >= 0 else entry.data_start
                self.restore_map[entry.label] = idx
                pending.discard(entry.label)   # 중복 라벨은 첫 번째가 이김
        if "0" in pending:
            self.restore_map["0"] = 0
            pending.discard("0")
        for label in pending:
            log.debug("RESTORE %s: label not found", label)
        return self.restore_map


# =====================================================
# 컴파일 컨텍스트
# =====================================================
class CompileContext:
    def __init__(self):
        self.registry = VariableRegistry()
        self.labels = LabelTracker()
        self.data = DataTracker()
        self.line_index = 0
