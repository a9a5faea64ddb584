"""
Logging setup and performance measurement helpers.

Used by the demo driver and the tests to show that lazy pipelines and cycle
detection do work proportional to what is pulled, in constant memory.
"""

import gc
import logging
import os
import sys
import time
import tracemalloc
from typing import Any, Dict, Optional

import psutil


LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - [%(funcName)s:%(lineno)d] - %(message)s'


def setup_logging(level: Optional[str] = None) -> logging.Logger:
    """
    Configure stdout logging. ``level`` falls back to the LAZYSEQ_LOG_LEVEL
    environment variable, then INFO.
    """
    level = (level or os.environ.get("LAZYSEQ_LOG_LEVEL") or "INFO").upper()
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format=LOG_FORMAT,
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True
    )
    return logging.getLogger('lazyseq')


logger = logging.getLogger(__name__)


def _fresh_metrics() -> Dict[str, Any]:
    return {"operations": [], "total_time_ms": 0.0, "total_memory_mb": 0.0}


# Global performance tracking
_performance_metrics = _fresh_metrics()


def _record(performance_info: Dict[str, Any]):
    _performance_metrics["operations"].append(performance_info)
    _performance_metrics["total_time_ms"] += performance_info["execution_time_ms"]
    _performance_metrics["total_memory_mb"] += performance_info["memory_usage_mb"]


def measure_performance(operation_name: str, func, *args, **kwargs) -> Dict[str, Any]:
    """
    Call ``func`` and record wall time, peak traced memory and process RSS.

    The returned dict carries the call's return value under ``result``. The
    recorded entry does not, so the registry never keeps a sequence or its
    values alive. Exceptions are recorded and re-raised.
    """
    process = psutil.Process()
    tracemalloc.start()
    gc.collect()
    start_time = time.perf_counter()

    try:
        result = func(*args, **kwargs)

        execution_time_ms = (time.perf_counter() - start_time) * 1000
        _, peak = tracemalloc.get_traced_memory()
        performance_info = {
            "operation": operation_name,
            "execution_time_ms": execution_time_ms,
            "memory_usage_mb": peak / 1024 / 1024,
            "rss_mb": process.memory_info().rss / 1024 / 1024,
            "success": True,
            "result_size": len(result) if hasattr(result, "__len__") else None,
            "timestamp": time.time()
        }
        _record(performance_info)
        logger.debug(
            f"{operation_name}: {execution_time_ms:.2f}ms, "
            f"peak {performance_info['memory_usage_mb']:.3f}MB traced"
        )
        return {**performance_info, "result": result}

    except Exception as e:
        execution_time_ms = (time.perf_counter() - start_time) * 1000
        _, peak = tracemalloc.get_traced_memory()
        _record({
            "operation": operation_name,
            "execution_time_ms": execution_time_ms,
            "memory_usage_mb": peak / 1024 / 1024,
            "success": False,
            "error": str(e),
            "timestamp": time.time()
        })
        logger.error(f"{operation_name} failed after {execution_time_ms:.2f}ms: {e}")
        raise

    finally:
        tracemalloc.stop()


def get_performance_summary() -> Dict[str, Any]:
    """
    Totals and per-operation averages over everything measured since the
    last clear, with failed calls counted separately.
    """
    operations = _performance_metrics["operations"]
    count = len(operations)
    total_time = _performance_metrics["total_time_ms"]
    total_memory = _performance_metrics["total_memory_mb"]
    return {
        "total_operations": count,
        "failed_operations": sum(1 for op in operations if not op["success"]),
        "total_time_ms": total_time,
        "total_memory_mb": total_memory,
        "avg_time_ms": total_time / count if count else 0.0,
        "avg_memory_mb": total_memory / count if count else 0.0,
    }


def clear_performance_metrics():
    global _performance_metrics
    _performance_metrics = _fresh_metrics()
