"""Configuration classes and constants for distributed apply."""

from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any

DEFAULT_SAMPLE_ROWS = 1000
PAYLOAD_COLUMN = "payload"

ARROW_ENABLED_KEY = "spark.sql.execution.arrow.pyspark.enabled"
ARROW_FALLBACK_KEY = "spark.sql.execution.arrow.pyspark.fallback.enabled"
SHUFFLE_PARTITIONS_KEY = "spark.sql.shuffle.partitions"
UI_ENABLED_KEY = "spark.ui.enabled"


class Granularity(str, Enum):
    """Unit of data a closure is applied to."""

    PARTITION = "partition"
    GROUP = "group"
    ELEMENT = "element"


class ResultMode(str, Enum):
    """Where the result of a distributed apply lives."""

    DISTRIBUTED = "distributed"
    LOCAL = "local"


class OutputFormat(str, Enum):
    """Local table type returned by collect variants."""

    PANDAS = "pandas"
    POLARS = "polars"


@dataclass
class SessionConfig:
    """Spark session config."""

    master: str = "local[*]"
    app_name: str = "distapply"
    arrow_enabled: bool = True
    arrow_fallback: bool = True
    shuffle_partitions: int | None = None
    ui_enabled: bool = True
    extra_conf: dict[str, str] = field(default_factory=dict)

    def to_spark_conf(self) -> dict[str, str]:
        """Return the Spark conf entries implied by this config."""
        conf = {
            ARROW_ENABLED_KEY: str(self.arrow_enabled).lower(),
            ARROW_FALLBACK_KEY: str(self.arrow_fallback).lower(),
            UI_ENABLED_KEY: str(self.ui_enabled).lower(),
        }
        if self.shuffle_partitions is not None:
            if self.shuffle_partitions < 1:
                raise ValueError(f"shuffle_partitions must be positive, got {self.shuffle_partitions}")
            conf[SHUFFLE_PARTITIONS_KEY] = str(self.shuffle_partitions)
        conf.update({k: str(v) for k, v in self.extra_conf.items()})
        return conf

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return asdict(self)


APPLY_FAMILY = {
    "spark_apply": (Granularity.PARTITION, ResultMode.DISTRIBUTED),
    "dapply": (Granularity.PARTITION, ResultMode.DISTRIBUTED),
    "dapply_collect": (Granularity.PARTITION, ResultMode.LOCAL),
    "gapply": (Granularity.GROUP, ResultMode.DISTRIBUTED),
    "gapply_collect": (Granularity.GROUP, ResultMode.LOCAL),
    "spark_lapply": (Granularity.ELEMENT, ResultMode.LOCAL),
}
