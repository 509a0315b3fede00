"""Cluster monitoring while long-running closures execute."""

from __future__ import annotations

import logging
import threading

log = logging.getLogger(__name__)


def executor_memory(spark):
    """Return ``{executor address: (used bytes, limit bytes)}`` via the JVM bridge."""
    executors = spark.sparkContext._jsc.sc().getExecutorMemoryStatus()
    usage = {}
    it = executors.iterator()
    while it.hasNext():
        entry = it.next()
        mem_limit = entry._2()._1()
        mem_remaining = entry._2()._2()
        usage[entry._1()] = (mem_limit - mem_remaining, mem_limit)
    return usage


def format_status(usage, n_jobs, n_stages, per_executor=False):
    """Render one status report as a list of lines."""
    total_used = sum(u for u, _ in usage.values())
    total_mem = sum(m for _, m in usage.values())
    pct_total = (total_used / total_mem * 100) if total_mem > 0 else 0
    lines = [
        f"[monitor] {len(usage)} executors | "
        f"Jobs: {n_jobs} | Stages: {n_stages} | "
        f"Memory: {total_used / 1e9:.1f} / {total_mem / 1e9:.1f} GB "
        f"({pct_total:.0f}%)"
    ]
    if per_executor:
        for addr, (used, limit) in sorted(usage.items()):
            pct = (used / limit * 100) if limit > 0 else 0
            lines.append(f"    {addr}: {used / 1e9:.1f} / {limit / 1e9:.1f} GB ({pct:.0f}%)")
    return lines


def monitor_spark(spark, interval=15, emit=None, per_executor=False):
    """Periodically report Spark executor memory and task statistics.

    Useful before a collect variant to watch driver and executor memory.

    Parameters
    ----------
    spark : pyspark.sql.SparkSession
        Active Spark session.
    interval : float, default 15
        Seconds between status reports.
    emit : callable, optional
        Function to call with each status line. Defaults to logging at INFO.
    per_executor : bool, default False
        If True, include per-executor memory breakdown.

    Returns
    -------
    callable
        A ``stop()`` function that terminates the monitoring thread.
    """
    emit = emit or log.info
    stop_event = threading.Event()

    def _loop():
        while not stop_event.is_set():
            try:
                status = spark.sparkContext.statusTracker()
                lines = format_status(
                    executor_memory(spark),
                    len(status.getActiveJobIds()),
                    len(status.getActiveStageIds()),
                    per_executor=per_executor,
                )
                for line in lines:
                    emit(line)
            except (OSError, KeyError) as e:
                log.debug("Monitor poll failed: %s", e)

            stop_event.wait(interval)

    thread = threading.Thread(target=_loop, daemon=True)
    thread.start()

    def stop():
        stop_event.set()
        thread.join(timeout=2)

    return stop
