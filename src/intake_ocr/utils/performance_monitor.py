"""
バッチ処理のパフォーマンス監視

問診票テキストを1件ずつ解析する際の処理時間とプロセスのメモリ使用量を
記録し、バッチ終了時にサマリーをログ出力する
"""

import gc
import logging
import time
from collections import deque
from dataclasses import dataclass, asdict
from typing import Any, Dict, Optional

import psutil

from utils.datetime_utils import now_jst

logger = logging.getLogger(__name__)


@dataclass
class DocumentMetrics:
    """1件分の処理指標"""
    label: str
    timestamp: str
    elapsed_ms: float
    memory_usage_mb: float
    success: bool = True


class BatchPerformanceMonitor:
    """問診票バッチ処理の監視"""

    def __init__(self,
                 warning_memory_mb: float = 512.0,
                 slow_document_ms: float = 1000.0,
                 max_history_size: int = 1000):
        self.warning_memory_mb = warning_memory_mb
        self.slow_document_ms = slow_document_ms
        self.process = psutil.Process()

        # dequeによる履歴管理（長時間バッチでのメモリ増加防止）
        self.metrics_history = deque(maxlen=max_history_size)

        self.stats = {
            "total_documents": 0,
            "failed_documents": 0,
            "slow_documents": 0,
            "memory_warnings": 0,
            "total_elapsed_ms": 0.0,
            "max_elapsed_ms": 0.0,
            "max_memory_seen": 0.0,
        }
        self._started_at: Optional[float] = None
        self._start_memory_mb = 0.0

    def _current_memory_mb(self) -> float:
        try:
            return self.process.memory_info().rss / 1024 / 1024
        except (psutil.AccessDenied, psutil.NoSuchProcess) as e:
            logger.debug(f"Memory info unavailable: {e}")
            return 0.0

    def start(self) -> None:
        """バッチ開始"""
        self._started_at = time.perf_counter()
        self._start_memory_mb = self._current_memory_mb()
        logger.info(f"Batch started (memory: {self._start_memory_mb:.1f}MB)")

    def record(self, label: str, elapsed_ms: float, success: bool = True) -> DocumentMetrics:
        """1件分の処理結果を記録"""
        memory_mb = self._current_memory_mb()
        metrics = DocumentMetrics(
            label=label,
            timestamp=now_jst().isoformat(),
            elapsed_ms=elapsed_ms,
            memory_usage_mb=memory_mb,
            success=success,
        )
        self.metrics_history.append(metrics)

        self.stats["total_documents"] += 1
        self.stats["total_elapsed_ms"] += elapsed_ms
        self.stats["max_elapsed_ms"] = max(self.stats["max_elapsed_ms"], elapsed_ms)
        self.stats["max_memory_seen"] = max(self.stats["max_memory_seen"], memory_mb)
        if not success:
            self.stats["failed_documents"] += 1

        if elapsed_ms >= self.slow_document_ms:
            self.stats["slow_documents"] += 1
            logger.warning(f"Slow document: {label} took {elapsed_ms:.1f}ms")
        if memory_mb >= self.warning_memory_mb:
            self.stats["memory_warnings"] += 1
            logger.warning(f"High memory usage: {memory_mb:.1f}MB")

        return metrics

    def measure(self, label: str) -> "_MeasureContext":
        """with 文で1件分の処理時間を計測する"""
        return _MeasureContext(self, label)

    def get_summary_report(self) -> Dict[str, Any]:
        """サマリーレポートを取得"""
        total = self.stats["total_documents"]
        avg_ms = self.stats["total_elapsed_ms"] / total if total else 0.0
        wall_ms = (time.perf_counter() - self._started_at) * 1000 if self._started_at else 0.0
        return {
            "total_documents": total,
            "failed_documents": self.stats["failed_documents"],
            "slow_documents": self.stats["slow_documents"],
            "memory_warnings": self.stats["memory_warnings"],
            "average_elapsed_ms": round(avg_ms, 2),
            "max_elapsed_ms": round(self.stats["max_elapsed_ms"], 2),
            "wall_time_ms": round(wall_ms, 2),
            "start_memory_mb": round(self._start_memory_mb, 1),
            "max_memory_mb": round(self.stats["max_memory_seen"], 1),
            "recent": [asdict(m) for m in list(self.metrics_history)[-5:]],
        }

    def finish(self) -> Dict[str, Any]:
        """バッチ終了（GC後のメモリを測ってサマリーを出力）"""
        collected = gc.collect()
        report = self.get_summary_report()
        report["gc_collected"] = collected
        logger.info(
            f"Batch finished: {report['total_documents']} documents "
            f"({report['failed_documents']} failed), "
            f"avg {report['average_elapsed_ms']}ms, max memory {report['max_memory_mb']}MB"
        )
        return report


class _MeasureContext:
    def __init__(self, monitor: BatchPerformanceMonitor, label: str):
        self.monitor = monitor
        self.label = label
        self._start = 0.0

    def __enter__(self):
        self._start = time.perf_counter()
        return self

    def __exit__(self, exc_type, exc, tb):
        elapsed_ms = (time.perf_counter() - self._start) * 1000
        self.monitor.record(self.label, elapsed_ms, success=exc_type is None)
        return False
